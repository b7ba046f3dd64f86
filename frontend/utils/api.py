r"""frontend\utils\api.py"""

import os
from typing import Optional

import streamlit as st

API_URL = os.getenv("API_URL", "http://localhost:8000/api/v1")


def get_api_token() -> str:
    """Return the API token from session state or the environment."""

    return (st.session_state.get("api_token") or os.getenv("API_TOKEN", "")).strip()


def get_headers(token: Optional[str] = None) -> dict:
    """Return default headers for API requests.

    If an API token is present in Streamlit's session state or the
    ``API_TOKEN`` environment variable, include it as a bearer token in the
    ``Authorization`` header.
    """

    resolved_token = token.strip() if isinstance(token, str) else get_api_token()
    return {"Authorization": f"Bearer {resolved_token}"} if resolved_token else {}


def error_message(response) -> str:
    """Extract a readable error from a backend response."""

    try:
        payload = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(payload, dict):
        detail = payload.get("detail")
        if isinstance(detail, dict):
            return str(detail.get("message") or detail)
        return str(payload.get("error") or detail or payload)
    return str(payload)
