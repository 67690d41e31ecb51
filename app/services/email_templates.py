import re
from html import escape
from typing import Tuple

from app.models.booking import Booking

# Each builder returns (subject, text, html)


def _one_line(value: str) -> str:
    """Collapses whitespace runs, line breaks included, for use in headers."""
    return re.sub(r"\s+", " ", value).strip()


def _or(value: str, fallback: str) -> str:
    return value if value else fallback


def booking_owner_notice(booking: Booking, display_date: str, received_at: str) -> Tuple[str, str, str]:
    message = _or(booking.message, "No additional information provided.")
    phone = _or(booking.phone, "Not provided")
    subject = _one_line(f"New Booking: {booking.services} - {booking.full_name}")
    text = (
        "New Booking Request\n"
        f"Date: {received_at}\n\n"
        "Customer Information\n"
        f"Name: {booking.full_name}\n"
        f"Email: {booking.email}\n"
        f"Phone: {phone}\n\n"
        "Booking Details\n"
        f"Services: {booking.services}\n"
        f"Date: {display_date}\n"
        f"Time: {booking.time}\n"
        f"Location: {booking.location}\n\n"
        "Additional Information\n"
        f"{message}\n"
    )
    html = (
        "<h2>New Booking Request</h2>"
        f"<p><strong>Date:</strong> {escape(received_at)}</p>"
        "<h3>Customer Information</h3>"
        f"<p><strong>Name:</strong> {escape(booking.full_name)}</p>"
        f"<p><strong>Email:</strong> {escape(booking.email)}</p>"
        f"<p><strong>Phone:</strong> {escape(phone)}</p>"
        "<h3>Booking Details</h3>"
        f"<p><strong>Services:</strong> {escape(booking.services)}</p>"
        f"<p><strong>Date:</strong> {escape(display_date)}</p>"
        f"<p><strong>Time:</strong> {escape(booking.time)}</p>"
        f"<p><strong>Location:</strong> {escape(booking.location)}</p>"
        "<h3>Additional Information</h3>"
        f"<p>{escape(message)}</p>"
    )
    return subject, text, html


def booking_confirmation(booking: Booking, display_date: str, business_name: str, contact_email: str) -> Tuple[str, str, str]:
    subject = _one_line(f"Booking Confirmation - {business_name}")
    text = (
        "Thank You for Your Booking!\n\n"
        f"Dear {booking.firstName},\n\n"
        f"We have received your booking request for {booking.services} on {display_date} at {booking.time}.\n"
        "Our team will review your request and get back to you shortly to confirm your appointment.\n\n"
        "Your Booking Details\n"
        f"Services: {booking.services}\n"
        f"Date: {display_date}\n"
        f"Time: {booking.time}\n"
        f"Location: {booking.location}\n\n"
        f"If you need to make any changes to your booking, please contact us at {contact_email}.\n\n"
        "Best regards,\n"
        f"{business_name} Team\n"
    )
    html = (
        "<h2>Thank You for Your Booking!</h2>"
        f"<p>Dear {escape(booking.firstName)},</p>"
        f"<p>We have received your booking request for {escape(booking.services)} "
        f"on {escape(display_date)} at {escape(booking.time)}.</p>"
        "<p>Our team will review your request and get back to you shortly to confirm your appointment.</p>"
        "<h3>Your Booking Details</h3>"
        f"<p><strong>Services:</strong> {escape(booking.services)}</p>"
        f"<p><strong>Date:</strong> {escape(display_date)}</p>"
        f"<p><strong>Time:</strong> {escape(booking.time)}</p>"
        f"<p><strong>Location:</strong> {escape(booking.location)}</p>"
        f"<p>If you need to make any changes to your booking, please contact us at {escape(contact_email)}.</p>"
        f"<p>Best regards,</p><p>{escape(business_name)} Team</p>"
    )
    return subject, text, html


def contact_owner_notice(name: str, email: str, subject_line: str, message: str, received_at: str) -> Tuple[str, str, str]:
    subject = _one_line(f"Contact Form: {subject_line}")
    text = (
        "New Contact Form Submission\n"
        f"Date: {received_at}\n\n"
        "Contact Information\n"
        f"Name: {name}\n"
        f"Email: {email}\n\n"
        "Message\n"
        f"{message}\n"
    )
    html = (
        "<h2>New Contact Form Submission</h2>"
        f"<p><strong>Date:</strong> {escape(received_at)}</p>"
        "<h3>Contact Information</h3>"
        f"<p><strong>Name:</strong> {escape(name)}</p>"
        f"<p><strong>Email:</strong> {escape(email)}</p>"
        "<h3>Message</h3>"
        f"<p>{escape(message)}</p>"
    )
    return subject, text, html


def contact_acknowledgement(name: str, business_name: str) -> Tuple[str, str, str]:
    subject = _one_line(f"Thank you for contacting {business_name}")
    text = (
        "Thank You for Contacting Us!\n\n"
        f"Dear {name},\n\n"
        "We have received your message and will get back to you as soon as possible.\n\n"
        "Best regards,\n"
        f"{business_name} Team\n"
    )
    html = (
        "<h2>Thank You for Contacting Us!</h2>"
        f"<p>Dear {escape(name)},</p>"
        "<p>We have received your message and will get back to you as soon as possible.</p>"
        f"<p>Best regards,</p><p>{escape(business_name)} Team</p>"
    )
    return subject, text, html
