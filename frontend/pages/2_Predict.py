"""Single product prediction form."""

import requests
import streamlit as st

from utils.api import API_URL, error_message, get_headers

st.title("🔮 Predict")

st.write("Ask the model for one product's predicted demand and stock-out risk.")

with st.form("predict"):
    col1, col2 = st.columns(2)
    with col1:
        product_id = st.text_input("Product ID", "P001")
    with col2:
        current_stock = st.number_input("Current stock", min_value=0, value=50, step=1)
    submitted = st.form_submit_button("Predict")

if submitted:
    try:
        with st.spinner("Waiting for the model…"):
            resp = requests.post(
                f"{API_URL}/predict",
                json={"productId": product_id.strip(), "currentStock": int(current_stock)},
                headers=get_headers(),
                timeout=120,
            )
    except requests.RequestException as exc:
        st.error(f"Request failed: {exc}")
        st.stop()

    if not resp.ok:
        st.error(error_message(resp))
        st.stop()

    result = resp.json()
    if result.get("success"):
        c1, c2, c3 = st.columns(3)
        c1.metric("Predicted units", result.get("stockPredicted"))
        c2.metric("Risk", result.get("riskLevel"))
        c3.metric("Current stock", result.get("currentStock"))
        st.write(result.get("comment"))
    else:
        st.warning(result.get("error") or "The model response could not be used.")

    database = result.get("database", {})
    if database.get("saved"):
        st.caption(f"Saved as record #{database.get('recordId')}")
    else:
        st.caption(f"Not saved: {database.get('error')}")

    with st.expander("Raw model output"):
        st.json(result.get("data"))
