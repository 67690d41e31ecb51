import asyncio
import smtplib
from email.errors import MessageError
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional

from app.core.config import settings
from app.core.logger import logger


def _has_line_break(*values: str) -> bool:
    return any("\r" in value or "\n" in value for value in values)


def send_email(subject: str, text: str, html: Optional[str] = None, to_email: Optional[str] = None) -> bool:
    """
    Sends an email over SMTP (SSL on port 465, STARTTLS otherwise).
    Defaults `to_email` to the business mailbox (EMAIL_USER).
    Returns: True if successful, False otherwise.
    """
    if not settings.EMAIL_USER or not settings.EMAIL_PASS:
        logger.error("❌ SMTP credentials missing (EMAIL_USER / EMAIL_PASS).")
        return False

    if not to_email:
        to_email = settings.EMAIL_USER

    # Header values must stay on one line
    if _has_line_break(subject, to_email):
        logger.error(f"❌ Refusing to send email with a line break in a header (to: {to_email!r})")
        return False

    try:
        msg = MIMEMultipart("alternative")
        msg['From'] = settings.EMAIL_USER
        msg['To'] = to_email
        msg['Subject'] = subject

        msg.attach(MIMEText(text, 'plain', 'utf-8'))
        if html:
            msg.attach(MIMEText(html, 'html', 'utf-8'))

        if settings.EMAIL_PORT == 465:
            connection = smtplib.SMTP_SSL(settings.EMAIL_HOST, settings.EMAIL_PORT, timeout=30)
        else:
            connection = smtplib.SMTP(settings.EMAIL_HOST, settings.EMAIL_PORT, timeout=30)

        with connection as server:
            if settings.EMAIL_PORT != 465:
                server.starttls()
            server.login(settings.EMAIL_USER, settings.EMAIL_PASS)
            server.sendmail(settings.EMAIL_USER, to_email, msg.as_string())

        logger.info(f"✅ Email sent to {to_email} with subject: '{subject}'")
        return True
    except (smtplib.SMTPException, MessageError, ValueError, OSError) as e:
        logger.error(f"❌ Failed to send email to {to_email}: {e}")
        return False


async def send_email_async(subject: str, text: str, html: Optional[str] = None, to_email: Optional[str] = None) -> bool:
    return await asyncio.to_thread(send_email, subject, text, html, to_email)
