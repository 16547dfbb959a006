"""Market Insights — Streamlit dashboard for marketing performance exports."""

import datetime
from pathlib import Path

import streamlit as st

from market_insights.analyst import build_analysis_payload
from market_insights.config import load_config, validate_config
from market_insights.excel_formatter import ExcelFormatter
from market_insights.ingestion import STATUS_ERROR, UploadLimitError, process_uploads
from market_insights.logger import LOG_FILE, get_logger
from market_insights.visuals import render_dashboard

logger = get_logger(__name__)

st.set_page_config(
    page_title="Market Insights",
    layout="wide",
)

config = load_config()
is_valid, config_errors = validate_config(config)

# Initialize session state
if "uploads" not in st.session_state:
    st.session_state.uploads = []
if "processing_log" not in st.session_state:
    st.session_state.processing_log = []
if "analysis_timestamp" not in st.session_state:
    st.session_state.analysis_timestamp = None


def run_ingestion(files) -> str:
    """Process the selected files; the new batch replaces whatever was shown before."""
    batch = [(f.name, f.getvalue()) for f in files]
    uploads = process_uploads(batch, config)

    st.session_state.uploads = uploads
    st.session_state.analysis_timestamp = datetime.datetime.now()
    st.session_state.processing_log.append(
        {
            "timestamp": st.session_state.analysis_timestamp.isoformat(),
            "files": [u.name for u in uploads],
            "failed": [u.name for u in uploads if u.status == STATUS_ERROR],
        }
    )

    complete = sum(1 for u in uploads if u.is_complete)
    return f"Processed {complete} of {len(uploads)} file(s)."


# --- Sidebar: Upload Control ---

st.sidebar.header("Upload Exports")

if not is_valid:
    for error in config_errors:
        st.sidebar.error(f"Config: {error}")

uploaded = st.sidebar.file_uploader(
    f"CSV exports (up to {config.max_uploads})",
    type=["csv", "txt"],
    accept_multiple_files=True,
)

if uploaded and st.sidebar.button("Analyze files", type="primary", use_container_width=True):
    try:
        with st.spinner("Parsing exports..."):
            message = run_ingestion(uploaded)
        st.sidebar.success(message)
    except UploadLimitError as e:
        st.sidebar.error(str(e))

# Debug Mode section
st.sidebar.divider()
enable_debug = st.sidebar.checkbox("Enable Verbose Debugging", value=False)

if enable_debug:
    with st.sidebar.expander("Debug Log", expanded=True):
        if Path(LOG_FILE).exists():
            try:
                with open(LOG_FILE, "r", encoding="utf-8") as f:
                    last_lines = f.readlines()[-50:]
                if last_lines:
                    st.code("".join(last_lines), language="text")
                else:
                    st.info("Debug log is empty.")
            except OSError as e:
                st.error(f"Error reading debug log: {e}")
        else:
            st.info("Debug log file not found. Upload a file to generate logs.")

# --- Main area ---

st.title("Market Insights")

uploads = st.session_state.uploads

if not uploads:
    st.info(
        "👋 Upload exported CSVs (campaigns, forms, landing pages) in the sidebar.\n\n"
        "The dashboard will:\n"
        "1. Detect the page/campaign, traffic and conversion columns\n"
        "2. Total traffic and conversions\n"
        "3. Rank rows by volume and by conversion rate"
    )
else:
    for failed in (u for u in uploads if u.status == STATUS_ERROR):
        st.error(f"{failed.name}: {failed.error}")

    complete = [u for u in uploads if u.is_complete]
    if complete:
        names = [u.name for u in complete]
        selected_name = st.selectbox("File", names) if len(complete) > 1 else names[0]
        selected = complete[names.index(selected_name)]

        if selected.truncated:
            st.warning(f"File was larger than {config.max_input_chars:,} characters and was truncated.")

        render_dashboard(selected.summary, config.min_rate_traffic)

        st.download_button(
            "Download KPI workbook",
            data=ExcelFormatter().to_bytes(selected.summary, config.min_rate_traffic),
            file_name=f"{Path(selected.name).stem}_insights.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )

        with st.expander("Parsed rows"):
            st.dataframe(selected.table.to_dataframe(), use_container_width=True, hide_index=True)

        with st.expander("Analyst sample"):
            st.caption(
                f"Header plus up to {config.sample_max_rows} rows, "
                f"capped at {config.sample_max_chars:,} characters."
            )
            st.code(selected.sample_csv, language="text")

        with st.expander("Analyst payload"):
            st.json(build_analysis_payload(complete))

# Processing log
if st.session_state.processing_log:
    with st.expander("Processing log"):
        for entry in reversed(st.session_state.processing_log):
            st.json(entry)
