"""
Batch run page.

Triggers ``POST /predict-batch`` for the configured product range and shows
the compact summary.  The request blocks until the run finishes, so a second
browser tab can use the cancel button to stop it early.
"""

import pandas as pd
import requests
import streamlit as st

from utils.api import API_URL, error_message, get_headers

st.title("🚚 Batch Run")

try:
    info = requests.get(f"{API_URL}/predict-batch", headers=get_headers(), timeout=20)
    info_data = info.json() if info.ok else {}
except requests.RequestException:
    info_data = {}

if info_data:
    st.write(info_data.get("description", ""))
    stats = info_data.get("currentStatistics", {})
    c1, c2, c3 = st.columns(3)
    c1.metric("Stored predictions", stats.get("total", 0))
    c2.metric("Successful", stats.get("successful", 0))
    c3.metric("Success rate", f"{float(stats.get('successRate', 0.0)):.1f}%")
    if info_data.get("running"):
        st.info("A batch is currently running.")

col1, col2 = st.columns(2)
run_clicked = col1.button("Run batch", type="primary")
cancel_clicked = col2.button("Cancel running batch")

if cancel_clicked:
    try:
        resp = requests.post(f"{API_URL}/predict-batch/cancel", headers=get_headers(), timeout=10)
        st.info(resp.json().get("message", "Cancellation sent"))
    except requests.RequestException as exc:
        st.error(f"Cancel failed: {exc}")

if run_clicked:
    try:
        with st.spinner("Running batch predictions… this takes a while"):
            resp = requests.post(f"{API_URL}/predict-batch", headers=get_headers(), timeout=1800)
    except requests.RequestException as exc:
        st.error(f"Batch failed: {exc}")
        st.stop()

    if not resp.ok:
        st.error(error_message(resp))
        st.stop()

    body = resp.json()
    summary = body.get("summary", {})
    if summary.get("cancelled"):
        st.warning(body.get("message"))
    else:
        st.success(body.get("message"))

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Products", summary.get("totalProducts", 0))
    c2.metric("Successful", summary.get("successfulPredictions", 0))
    c3.metric("Failed", summary.get("failedPredictions", 0))
    c4.metric("Success rate", summary.get("successRate", "0.00%"))
    st.caption(f"Execution time: {summary.get('executionTime', '')}")

    st.subheader("First results")
    st.dataframe(pd.DataFrame(summary.get("results", [])), use_container_width=True, hide_index=True)

    distribution = summary.get("riskDistribution", {})
    if distribution:
        st.subheader("Risk distribution")
        st.bar_chart(pd.Series(distribution, name="products"))
