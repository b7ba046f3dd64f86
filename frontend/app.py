r"""frontend/app.py

Streamlit multipage application for the inventory prediction service.

This file configures global options and provides a simple welcome page.
Individual pages live in the ``pages/`` subdirectory; Streamlit will
automatically load them.  To run the app locally use:

```bash
streamlit run app.py
```
"""

import os

import requests
import streamlit as st

from utils.api import API_URL, get_headers

st.set_page_config(page_title="Inventory Predictions", layout="wide")

st.title("Smart Inventory Predictions")

status = "⚠️ not reachable"

try:
    response = requests.get(f"{API_URL}/health", headers=get_headers(), timeout=5)
except requests.RequestException:
    response = None

if response is not None and response.ok:
    database = response.json().get("database", "unknown")
    status = "✅ healthy" if database == "ok" else f"⚠️ database {database}"

st.caption(f"Backend API: {status} · {API_URL} · Set `API_URL` if needed.")

with st.sidebar.expander("Auth", expanded=False):
    default_token = st.session_state.get("api_token") or os.getenv("API_TOKEN", "")
    token = st.text_input("API token", value=default_token, type="password")
    st.session_state["api_token"] = token

st.markdown(
    """
    Predict stock-out risk for each product from its current stock level.
    Use the sidebar to review the latest predictions, request a prediction
    for one product, run the batch over the whole catalogue, tune the batch
    settings or look up historical sales.  This application talks to the
    FastAPI backend over REST; make sure the backend is running and that
    `API_URL` points at it (see `.env`).
    """
)
