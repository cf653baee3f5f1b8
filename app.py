import json

import pandas as pd
import streamlit as st

from reporting.redaction_report import CHANGE_KINDS, preview_payload

SAMPLE_PAYLOADS = {
    "event": {
        "message": "Sign-in failed for jane.doe@example.com",
        "exception": {
            "values": [
                {
                    "type": "AuthError",
                    "value": 'Callback https://app.example.com/callback?code=abc123&page=2 said "this is my private reflection"',
                }
            ]
        },
        "request": {"data": {"notes": "private", "step": 4, "profile": {"display_name": "Jane"}}},
        "user": {"id": "u1", "email": "jane.doe@example.com", "display_name": "Jane"},
    },
    "breadcrumb": {
        "category": "http",
        "data": {
            "url": "https://xyz.supabase.co/rest/v1/profiles?select=*&id=eq.42",
            "method": "GET",
            "status_code": 200,
        },
    },
}

# Page config
st.set_page_config(
    page_title="Telemetry Privacy Preview",
    page_icon="🛡",
    layout="wide"
)

# Title
st.title("🛡 Telemetry Privacy Filter Preview")
st.markdown("Paste a diagnostic event or breadcrumb to see exactly what would leave the device.")

kind = st.radio("Payload kind", ["event", "breadcrumb"], horizontal=True)

raw_text = st.text_area(
    "Payload (JSON)",
    value=json.dumps(SAMPLE_PAYLOADS[kind], indent=2),
    height=320,
)

# Sanitize button
sanitize_button = st.button("🚀 Sanitize")


def redactions_frame(redactions):
    """
    Build the table shown under "Redactions".

    Columns: [Path, Change, Original Type, Sent Value]
    """
    rows = [
        {
            "Path": r["path"],
            "Change": r["change"].title(),
            "Original Type": r["before_type"],
            "Sent Value": json.dumps(r["after"]) if r["after"] is not None else "(removed)",
        }
        for r in redactions
    ]
    return pd.DataFrame(rows, columns=["Path", "Change", "Original Type", "Sent Value"])


if sanitize_button:
    try:
        result = preview_payload(raw_text, kind)
    except ValueError as e:
        st.error(f"⚠️ {e}")
    else:
        col1, col2 = st.columns([2, 1])

        with col1:
            st.subheader("📤 Sanitized payload")
            if result["sanitized"] is None:
                st.warning("This payload would be dropped.")
            else:
                st.json(result["sanitized"])

        with col2:
            st.subheader("📊 Summary")
            for change in CHANGE_KINDS:
                st.metric(label=change.title(), value=result["summary"][change])

        st.markdown("---")
        st.subheader("📋 Redactions")
        df = redactions_frame(result["redactions"])
        if df.empty:
            st.info("Nothing needed redaction.")
        else:
            st.dataframe(df, use_container_width=True)
else:
    st.info("Edit the payload and click 'Sanitize' to preview.")
