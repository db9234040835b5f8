"""Streamlit app: upload document photos and collect them into one table."""
from pathlib import Path
from typing import List, Optional

import streamlit as st

# Allow running via "streamlit run snapsheet/ui/dashboard.py" without installing the package
# by ensuring the repository root is on ``sys.path``.
if __package__ in {None, ""}:
    import sys

    sys.path.append(str(Path(__file__).resolve().parents[2]))

from snapsheet.core.config import build_context, load_settings
from snapsheet.core.errors import ConfigurationError
from snapsheet.core.logging import configure_logging
from snapsheet.core.models import ProcessingState, ProcessingStatus, SourceImage
from snapsheet.ingestion.loader import encode_image
from snapsheet.processing.orchestrator import BatchOrchestrator
from snapsheet.reporting.sinks import rows_to_csv_text, rows_to_tsv
from snapsheet.reporting.templates import SOURCE_HEADER, export_headers, table_to_rows

UPLOAD_TYPES = ["png", "jpg", "jpeg", "webp", "heic", "heif"]


def _get_orchestrator() -> Optional[BatchOrchestrator]:
    """Build the context once per session so the model handle is shared."""

    if "orchestrator" not in st.session_state:
        try:
            settings = load_settings()
        except ConfigurationError as exc:
            st.error(f"⚠️ {exc}")
            return None
        st.session_state.orchestrator = BatchOrchestrator(build_context(settings))
    return st.session_state.orchestrator


def _rerun_app() -> None:
    """Trigger a Streamlit rerun, compatible with newer and older APIs."""

    rerun = getattr(st, "rerun", None) or getattr(st, "experimental_rerun", None)
    if not rerun:
        raise RuntimeError("Streamlit does not expose a rerun helper.")
    rerun()


def _render_state(placeholder, state: ProcessingState) -> None:
    if state.status == ProcessingStatus.PROCESSING:
        placeholder.info(f"⏳ {state.message}")
    elif state.status == ProcessingStatus.SUCCESS:
        placeholder.success(state.message)
    elif state.status == ProcessingStatus.ERROR:
        placeholder.error(state.message)
    else:
        placeholder.empty()


def _uploads_to_images(uploads) -> List[SourceImage]:
    return [encode_image(upload.name, upload.getvalue(), upload.type or None) for upload in uploads]


def _sidebar(orchestrator: BatchOrchestrator) -> None:
    st.header("Add Data")
    st.caption("Upload receipts, invoices, or documents.")

    uploads = st.file_uploader(
        "Images",
        type=UPLOAD_TYPES,
        accept_multiple_files=True,
        key=f"uploader_{st.session_state.get('upload_round', 0)}",
    )
    status_area = st.empty()
    st.session_state.status_area = status_area
    busy = orchestrator.state.status == ProcessingStatus.PROCESSING

    if st.button("Extract", type="primary", disabled=not uploads or busy):
        progress = st.progress(0.0)
        listener_key = "status_listener_attached"
        if not st.session_state.get(listener_key):
            orchestrator.tracker.subscribe(lambda state: _render_state(st.session_state.status_area, state))
            st.session_state[listener_key] = True
        orchestrator.run_batch(_uploads_to_images(uploads), progress_callback=progress.progress)
        progress.empty()
        st.session_state.upload_round = st.session_state.get("upload_round", 0) + 1

    _render_state(status_area, orchestrator.state)

    with st.expander("How it works", expanded=False):
        st.markdown(
            "1. Upload any image containing data.\n"
            "2. AI extracts text into columns.\n"
            f"3. Data is mapped to {len(orchestrator.store.columns)} specific columns.\n"
            "4. Copy to Google Sheets when done."
        )


def _table_section(orchestrator: BatchOrchestrator) -> None:
    store = orchestrator.store
    st.subheader("Collected Data")

    if not len(store):
        st.info("No data extracted yet. Upload an image to start building your sheet.")
        return

    display_rows = table_to_rows(store, include_source=True)
    st.dataframe(
        display_rows,
        use_container_width=True,
        hide_index=False,
        column_order=export_headers(store.columns, include_source=True),
    )
    st.caption(f"{len(store)} row{'s' if len(store) != 1 else ''} · {SOURCE_HEADER} shows the image name")

    export_rows = table_to_rows(store)
    headers = export_headers(store.columns)
    action_cols = st.columns(3)
    with action_cols[0]:
        st.download_button(
            "Download CSV",
            data=rows_to_csv_text(export_rows, headers),
            file_name="extracted_data.csv",
            mime="text/csv",
            type="primary",
        )
    with action_cols[1]:
        show_tsv = st.toggle("Copy to Sheets", help="Show tab-separated text to paste into Sheets/Excel")
    with action_cols[2]:
        confirm = st.checkbox("Confirm clear")
        if st.button("Clear", disabled=not confirm):
            orchestrator.clear_table()
            _rerun_app()

    if show_tsv:
        st.code(rows_to_tsv(export_rows, headers), language=None)
        st.caption("Use the copy icon, then paste into Google Sheets or Excel (Ctrl+V).")


def main() -> None:
    """Launch the snap-to-sheet dashboard."""

    configure_logging()
    st.set_page_config(page_title="Snap2Sheet", layout="wide")
    st.title("Snap2Sheet")

    orchestrator = _get_orchestrator()
    if orchestrator is None:
        st.stop()

    with st.sidebar:
        _sidebar(orchestrator)
    _table_section(orchestrator)


if __name__ == "__main__":
    main()
