"""Streamlit front-end for building and exporting price-change batches."""
from __future__ import annotations

import pandas as pd
import streamlit as st

from price_batch import BatchValidator, Line
from price_batch.config import SETTINGS, configure_logging
from price_batch.domain import editing
from price_batch.domain.errors import DuplicateBatchNameError, ExportRefusedError
from price_batch.domain.models import RECORD_TYPES, Batch
from price_batch.domain.results import ValidationReport
from price_batch.infrastructure.storage.batch_store import JsonBatchRepository, WriteBehindBatchWriter
from price_batch.infrastructure.storage.catalog_store import CatalogProvider
from price_batch.presentation.csv_export import encode_csv, export_filename, to_csv
from price_batch.presentation.issue_report import issues_to_rows, render_csv

LINE_COLUMNS = [
    "record_type",
    "upc",
    "brand",
    "description",
    "reference_price",
    "promo_price",
    "promo_qty",
    "start_date",
    "end_date",
]

st.set_page_config(page_title="Price Change Batches", layout="wide")
st.title("Price Change Batch Builder")


@st.cache_resource
def get_repository() -> JsonBatchRepository:
    configure_logging(SETTINGS)
    return JsonBatchRepository(SETTINGS.batches_path)


@st.cache_resource
def get_writer() -> WriteBehindBatchWriter:
    return WriteBehindBatchWriter(get_repository())


@st.cache_resource
def get_catalog_provider() -> CatalogProvider:
    provider = CatalogProvider(SETTINGS.catalog_path)
    provider.load()
    return provider


def open_batch(batch_id: str) -> Batch:
    """Working copy kept in the session; pending edits are flushed before another batch is read."""
    working = st.session_state.get("batch")
    if working is None or working.id != batch_id:
        writer.flush()
        working = repository.get(batch_id)
        st.session_state["batch"] = working
    return working


def lines_to_dataframe(lines: list[Line]) -> pd.DataFrame:
    return pd.DataFrame(
        [{col: str(getattr(line, col)) for col in LINE_COLUMNS} for line in lines],
        columns=LINE_COLUMNS,
    )


def dataframe_to_lines(df: pd.DataFrame) -> list[Line]:
    lines = []
    for _, row in df.fillna("").iterrows():
        lines.append(Line(**{col: str(row.get(col, "")).strip() for col in LINE_COLUMNS}))
    return lines


def render_issues(report: ValidationReport) -> None:
    summary = report.summary
    col1, col2, col3 = st.columns(3)
    col1.metric("Lines", summary.total_lines)
    col2.metric("Lines with issues", summary.invalid_lines)
    col3.metric("Issues", summary.total_issues)
    if report.has_issues():
        st.dataframe(pd.DataFrame(issues_to_rows(report.issues)), hide_index=True)
        st.download_button(
            "Download issue list",
            data=render_csv(report.issues),
            file_name="price_batch_issues.csv",
            mime="text/csv",
        )
    else:
        st.success("No issues")


repository = get_repository()
writer = get_writer()
provider = get_catalog_provider()

with st.sidebar:
    st.subheader("Master items")
    catalog = provider.current
    if catalog is None:
        st.warning("Master list not loaded; UPCs are not checked against it.")
    else:
        st.caption(f"{len(catalog)} items loaded")
    if st.button("Reload master list"):
        if provider.refresh() is None:
            st.error("Master list failed to load")
        st.rerun()

    st.subheader("Batches")
    new_name = st.text_input("New batch name")
    if st.button("Create", disabled=not new_name.strip()):
        try:
            created = repository.create(new_name)
            st.session_state["batch_id"] = created.id
            st.rerun()
        except DuplicateBatchNameError:
            st.error("Name already exists")

    batches = repository.list_batches()
    if not batches:
        st.info("No batches yet.")
        st.stop()
    ids = [b.id for b in batches]
    current_id = st.session_state.get("batch_id")
    selected = st.selectbox(
        "Open batch",
        ids,
        index=ids.index(current_id) if current_id in ids else 0,
        format_func=lambda i: next(b.name for b in batches if b.id == i),
    )
    st.session_state["batch_id"] = selected

    col_dup, col_del = st.columns(2)
    if col_dup.button("Duplicate"):
        writer.flush()
        st.session_state["batch_id"] = repository.duplicate(selected).id
        st.rerun()
    if col_del.button("Delete"):
        writer.flush()
        repository.delete(selected)
        st.session_state.pop("batch_id", None)
        st.session_state.pop("batch", None)
        st.rerun()

catalog = provider.current
batch = open_batch(st.session_state["batch_id"])
st.subheader(batch.name)

with st.expander("Bulk UPC add", expanded=False):
    codes = st.text_area("UPCs (whitespace or comma separated)")
    record_type = st.selectbox("Record type", RECORD_TYPES, key="bulk_upc_rt")
    if st.button("Add UPCs") and codes.strip():
        added = editing.add_upcs(batch, codes, record_type=record_type, catalog=catalog)
        writer.schedule(batch)
        st.success(f"{len(added)} line(s) added")
        st.rerun()

with st.expander("Search master list", expanded=False):
    term = st.text_input("Brand, description or UPC")
    if term and catalog is not None:
        hits = catalog.search(term)
        st.dataframe(
            pd.DataFrame([vars(item) for item in hits], columns=["upc", "brand", "description", "reference_price"]),
            hide_index=True,
        )
        picks = st.multiselect("Add to batch", [h.upc for h in hits])
        if st.button("Add selected", disabled=not picks):
            editing.add_upcs(batch, picks, catalog=catalog)
            writer.schedule(batch)
            st.rerun()

with st.expander("Apply to all lines", expanded=False):
    c1, c2, c3, c4, c5, c6 = st.columns(6)
    bulk_rt = c1.selectbox("Record type", [""] + list(RECORD_TYPES))
    bulk_price = c2.text_input("Promo price")
    bulk_qty = c3.text_input("Promo qty")
    bulk_start = c4.date_input("Start date", value=None)
    bulk_end = c5.date_input("End date", value=None)
    bulk_pct = c6.text_input("% off reference")
    if st.button("Apply"):
        editing.apply_to_all(
            batch,
            record_type=bulk_rt,
            promo_price=bulk_price,
            promo_qty=bulk_qty,
            start_date=bulk_start,
            end_date=bulk_end,
        )
        if bulk_pct:
            editing.apply_percent_off(batch, bulk_pct)
        writer.schedule(batch)
        st.rerun()

line_filter = st.text_input("Filter lines")
visible = editing.filter_lines(batch, line_filter)
edited = st.data_editor(
    lines_to_dataframe([line for _, line in visible]),
    num_rows="dynamic" if not line_filter else "fixed",
    hide_index=True,
    use_container_width=True,
    column_config={"record_type": st.column_config.SelectboxColumn(options=[""] + list(RECORD_TYPES))},
    key=f"editor_{batch.id}",
)

col_save, col_refresh = st.columns(2)
if col_save.button("Save lines"):
    edited_lines = dataframe_to_lines(edited)
    if line_filter:
        for (index, _), line in zip(visible, edited_lines):
            batch.lines[index] = line
    else:
        batch.lines = edited_lines
    writer.schedule(batch)
    st.success("Saved")
    st.rerun()
if col_refresh.button("Refresh brand/description from master list", disabled=catalog is None):
    editing.refresh_from_catalog(batch, catalog)
    writer.schedule(batch)
    st.rerun()

st.subheader("Validation")
report = BatchValidator().validate(batch, catalog)
render_issues(report)

st.subheader("Export")
try:
    csv_text = to_csv(batch, catalog)
except ExportRefusedError as exc:
    st.button("Download CSV", disabled=True)
    st.caption(exc.message)
else:
    st.code(csv_text, language="text")
    st.download_button(
        "Download CSV",
        data=encode_csv(csv_text),
        file_name=export_filename(batch),
        mime="text/csv",
        on_click=writer.flush,
    )
