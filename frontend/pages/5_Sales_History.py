"""Sales history lookup for one product and day."""

from datetime import date

import pandas as pd
import requests
import streamlit as st

from utils.api import API_URL, error_message, get_headers

st.title("📈 Sales History")

today = date.today()
try:
    default_day = today.replace(year=today.year - 2)
except ValueError:
    default_day = today.replace(year=today.year - 2, day=28)

col1, col2 = st.columns(2)
product_id = col1.text_input("Product ID", "P001")
day = col2.date_input("Date", value=default_day)

if product_id:
    try:
        with st.spinner("Fetching sales data…"):
            resp = requests.get(
                f"{API_URL}/products/by-id-and-date",
                params={"product_id": product_id.strip(), "date": day.isoformat()},
                headers=get_headers(),
                timeout=60,
            )
    except requests.RequestException as exc:
        st.error(f"Failed to retrieve sales data: {exc}")
        st.stop()

    if not resp.ok:
        st.error(error_message(resp))
        st.stop()

    df = pd.DataFrame(resp.json())
    if df.empty:
        st.info("No sales rows for this product and date.")
    else:
        st.dataframe(df, use_container_width=True, hide_index=True)
        st.download_button(
            "Download CSV",
            df.to_csv(index=False).encode("utf-8"),
            file_name=f"sales_{product_id}_{day.isoformat()}.csv",
            mime="text/csv",
        )
