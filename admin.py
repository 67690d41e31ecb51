import asyncio
import os
import sqlite3

import pandas as pd
import streamlit as st

from app.core.config import settings
from app.services.db_service import db_service


def load_data(limit: int = 1000):
    """Bookings from the booking store as a DataFrame, newest first."""
    if not os.path.exists(db_service.db_path):
        return None

    try:
        bookings = asyncio.run(db_service.list_bookings(limit))
    except sqlite3.Error as e:
        st.error(f"Error reading the database: {e}")
        return None
    return pd.DataFrame([booking.model_dump() for booking in bookings])


def service_counts(df: pd.DataFrame) -> pd.Series:
    """Bookings per service; one booking may list several comma-joined services."""
    return df["services"].str.split(",").explode().str.strip().value_counts()


def main():
    st.set_page_config(
        page_title="Touch Media Bookings",
        page_icon="📅",
        layout="centered"
    )

    st.title(f"{settings.BUSINESS_NAME} - Bookings")

    if st.button("Refresh"):
        st.rerun()

    df = load_data()

    if df is not None and not df.empty:
        counts = service_counts(df)
        upcoming = df[df["date"] >= pd.Timestamp.now().strftime("%Y-%m-%d")]

        col1, col2, col3 = st.columns(3)
        col1.metric("Total bookings", len(df))
        col2.metric("Upcoming", len(upcoming))
        col3.metric("Services", len(counts))

        st.subheader("Bookings by service")
        st.bar_chart(counts)

        st.subheader("All bookings")
        st.dataframe(
            df,
            use_container_width=True,
            column_config={
                "createdAt": st.column_config.DatetimeColumn("Created", format="D.M.YYYY HH:mm"),
                "date": "Date",
                "time": "Time",
                "firstName": "First name",
                "lastName": "Last name",
                "services": "Services",
                "location": "Location",
                "id": "ID"
            }
        )
    else:
        st.info("No bookings yet or the database does not exist.")

    st.markdown("---")
    st.caption(f"Booking System • {settings.BUSINESS_NAME}")


# `streamlit run admin.py` executes this file as __main__
if __name__ == "__main__":
    main()
