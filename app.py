#!/usr/bin/env python3
"""
Rack Installation Guide - Web Interface
Upload a rack snapshot and browse the rack, wiring, power and installation views
"""

import html

import streamlit as st
from reportlab.platypus.doctemplate import LayoutError

from diagnostics import SnapshotError
from installation_document import (
    Document, KeyValueList, OrderedList, Paragraph, RackElevation, Table, TitleBlock, View,
    build_installation_document, installation_guide_filename, project_view,
)
from pdf_generator import render_pdf_bytes
from rack_config import PAGE_SIZES, get_settings
from snapshot_parser import read_snapshot
from text_renderer import render_elevation

VIEW_TABS = (
    (View.RACK, "🗄️ Rack Layout"),
    (View.WIRING, "🔌 Wiring"),
    (View.POWER, "⚡ Power"),
    (View.INSTALLATION, "🛠️ Installation"),
)

# Page configuration
st.set_page_config(
    page_title="Rack Installation Guide",
    page_icon="🗄️",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.markdown("""
<style>
    .main-header {
        font-size: 2.2rem;
        font-weight: 700;
        color: #1E3A5F;
        margin-bottom: 0.5rem;
    }
    .rack-preview {
        background-color: #f8f9fa;
        border: 2px solid #dee2e6;
        border-radius: 8px;
        padding: 1rem;
        font-family: monospace;
        font-size: 0.8rem;
        white-space: pre;
        overflow-x: auto;
    }
</style>
""", unsafe_allow_html=True)


def render_content(content) -> None:
    """Render one content element of a section with Streamlit widgets"""
    if isinstance(content, Paragraph):
        if content.warning:
            st.warning(content.text)
        else:
            st.write(content.text)
    elif isinstance(content, KeyValueList):
        cols = st.columns(min(4, len(content.entries)) or 1)
        for i, (key, value) in enumerate(content.entries):
            cols[i % len(cols)].metric(key, value)
    elif isinstance(content, Table):
        if content.title:
            st.markdown(f"**{content.title}**")
        rows = [dict(zip(content.columns, row)) for row in content.rows]
        st.dataframe(rows, use_container_width=True, hide_index=True)
    elif isinstance(content, OrderedList):
        st.markdown("\n".join(f"{i}. {item}" for i, item in enumerate(content.items, start=1)))
    elif isinstance(content, RackElevation):
        preview = html.escape("\n".join(render_elevation(content)))
        st.markdown(f'<div class="rack-preview">{preview}</div>', unsafe_allow_html=True)


def render_document(document: Document) -> None:
    for block in document.blocks:
        if isinstance(block, TitleBlock):
            continue
        st.subheader(block.heading)
        for content in block.content:
            render_content(content)


def main():
    settings = get_settings()

    st.markdown('<p class="main-header">🗄️ Rack Installation Guide</p>', unsafe_allow_html=True)

    with st.sidebar:
        st.header("Settings")
        company_name = st.text_input("Company Name", value=settings.company_name)
        page_sizes = list(PAGE_SIZES)
        page_size = st.selectbox("PDF Page Size", page_sizes, index=page_sizes.index(settings.page_size))

    uploaded_file = st.file_uploader("Upload rack snapshot (JSON)", type=["json"])
    if uploaded_file is None:
        st.info("👆 Upload a rack snapshot to generate the installation guide")
        return

    try:
        snapshot = read_snapshot(uploaded_file, unit_height=settings.unit_height, source=uploaded_file.name)
    except SnapshotError as e:
        st.error(f"❌ Error reading snapshot: {e}")
        return

    document = build_installation_document(snapshot, tolerance_w=settings.power_tolerance_w)
    title = document.blocks[0]
    st.write(f"**{title.title}** · {title.subtitle}")

    if document.diagnostic_count:
        st.error(f"⚠️ {document.diagnostic_count} issue(s) found - see Diagnostics")

    tabs = st.tabs([label for _, label in VIEW_TABS])
    for tab, (view, _) in zip(tabs, VIEW_TABS):
        with tab:
            render_document(project_view(document, view))

    st.divider()
    if st.button("📑 Export PDF", type="primary"):
        try:
            pdf_bytes = render_pdf_bytes(document, company_name=company_name, page_size=page_size)
        except (OSError, LayoutError, ValueError) as e:
            st.toast(f"❌ Failed to generate PDF: {e}")
        else:
            st.toast("✅ Installation guide exported as PDF")
            st.download_button(
                label="⬇️ Download Installation Guide",
                data=pdf_bytes,
                file_name=installation_guide_filename(document.rack_name),
                mime="application/pdf",
                use_container_width=True,
            )


if __name__ == "__main__":
    main()
