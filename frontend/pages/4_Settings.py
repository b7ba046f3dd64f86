"""
Settings page for the batch prediction parameters.

Values come from ``GET /configs/batch`` (``configs/batch.yaml`` on the
backend) and are saved back with ``PUT /configs/batch``.
"""

import requests
import streamlit as st

from utils.api import API_URL, error_message, get_headers

st.title("⚙️ Settings")

try:
    resp = requests.get(f"{API_URL}/configs/batch", headers=get_headers(), timeout=10)
    current = resp.json() if resp.ok else {}
except requests.RequestException as exc:
    st.error(f"Backend not reachable: {exc}")
    st.stop()

st.subheader("Batch configuration (batch.yaml)")
st.json(current)

with st.form("edit_batch"):
    col1, col2, col3 = st.columns(3)
    with col1:
        count = st.number_input(
            "product_count",
            value=int(current.get("product_count", 40)),
            min_value=1,
            max_value=999,
            step=1,
        )
        prefix = st.text_input("product_prefix", value=current.get("product_prefix", "P"))
    with col2:
        delay = st.number_input(
            "delay_ms",
            value=int(current.get("delay_ms", 500)),
            min_value=0,
            max_value=60_000,
            step=100,
        )
        top = st.number_input(
            "top_results",
            value=int(current.get("top_results", 10)),
            min_value=0,
            max_value=1000,
            step=1,
        )
    with col3:
        stock_min = st.number_input("stock_min", value=int(current.get("stock_min", 1)), min_value=0, step=1)
        stock_max = st.number_input("stock_max", value=int(current.get("stock_max", 100)), min_value=0, step=1)

    submitted = st.form_submit_button("Save")
    if submitted:
        payload = {
            "product_count": int(count),
            "product_prefix": prefix.strip(),
            "delay_ms": int(delay),
            "top_results": int(top),
            "stock_min": int(stock_min),
            "stock_max": int(stock_max),
        }
        try:
            saved = requests.put(f"{API_URL}/configs/batch", json=payload, headers=get_headers(), timeout=20)
        except requests.RequestException as exc:
            st.error(f"Save failed: {exc}")
        else:
            if saved.ok:
                st.success("Saved to backend.")
            else:
                st.error(f"Backend rejected the update ({saved.status_code}): {error_message(saved)}")
