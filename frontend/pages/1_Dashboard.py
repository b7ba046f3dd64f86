"""
Dashboard page with the latest prediction per product.

Shows risk-bucket counts, a filterable table and a chart comparing current
stock with predicted demand.  Data comes from
``GET /predictions/dashboard``.
"""

import altair as alt
import pandas as pd
import requests
import streamlit as st

from utils.api import API_URL, error_message, get_headers

st.title("📊 Dashboard")

FILTERS = {
    "All": None,
    "Critical": ["CRITICAL"],
    "High (incl. critical)": ["CRITICAL", "HIGH"],
    "Medium": ["MEDIUM"],
    "Low": ["LOW"],
}

try:
    with st.spinner("Loading predictions…"):
        resp = requests.get(f"{API_URL}/predictions/dashboard", headers=get_headers(), timeout=30)
    if not resp.ok:
        st.error(f"Failed to load predictions: {error_message(resp)}")
        st.stop()
    data = resp.json()
except requests.RequestException as e:
    st.error(f"Failed to load predictions: {e}")
    st.stop()

counts = data.get("counts", {})
c1, c2, c3, c4, c5 = st.columns(5)
c1.metric("Products", counts.get("all", 0))
c2.metric("Critical", counts.get("critical", 0))
c3.metric("High + critical", counts.get("high", 0))
c4.metric("Medium", counts.get("medium", 0))
c5.metric("Low", counts.get("low", 0))

df = pd.DataFrame(data.get("predictions", []))
if df.empty:
    st.info("No predictions stored yet. Run a batch from the Batch Run page.")
    st.stop()

choice = st.radio("Risk filter", list(FILTERS), horizontal=True)
levels = FILTERS[choice]
view = df if levels is None else df[df["riskLevel"].isin(levels)]

columns = ["productId", "currentStock", "stockPredicted", "riskLevel", "comment", "success", "createdAt"]
st.dataframe(view[[c for c in columns if c in view.columns]], use_container_width=True, hide_index=True)

melted = view.melt(
    id_vars=["productId"],
    value_vars=["currentStock", "stockPredicted"],
    var_name="series",
    value_name="units",
)
chart = (
    alt.Chart(melted)
    .mark_bar()
    .encode(
        x=alt.X("productId:N", sort=None, title="Product"),
        xOffset="series:N",
        y=alt.Y("units:Q", title="Units"),
        color=alt.Color("series:N", title=""),
        tooltip=["productId", "series", "units"],
    )
    .properties(height=320, title="Current stock vs predicted demand")
)
st.altair_chart(chart, use_container_width=True)

st.download_button(
    "Download CSV",
    view.to_csv(index=False).encode("utf-8"),
    file_name="predictions.csv",
    mime="text/csv",
)
st.caption(f"Updated {data.get('timestamp', '')}")
