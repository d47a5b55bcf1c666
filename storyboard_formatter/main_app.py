## storyboard_formatter/main_app.py
# Streamlit shell: widgets and downloads only, all state changes go through PanelStore.

import asyncio
import uuid
from typing import Any, Dict, Optional

import streamlit as st

from storyboard_formatter.compositor import PanelCompositor
from storyboard_formatter.config import AppConfig, configure_logging
from storyboard_formatter.errors import EmptyBatchError, FormatError
from storyboard_formatter.export_utils import make_grid_image
from storyboard_formatter.exporter import ExportOrchestrator, MemorySink
from storyboard_formatter.imaging import ImageNormalizer
from storyboard_formatter.recovery import AutoRecovery
from storyboard_formatter.serializer import load_into, save
from storyboard_formatter.store import ImportFile, PanelStore


UNSAVED_WARNING = "You have unsaved changes. Are you sure you want to continue?"
DELETE_WARNING = "Are you sure you want to delete this panel?"

st.set_page_config(page_title="Storyboard Formatter", page_icon="🎬", layout="wide")


@st.cache_resource(show_spinner=False)
def get_config() -> AppConfig:
    config = AppConfig.from_env()
    configure_logging(config.log_level)
    return config


@st.cache_resource(show_spinner=False)
def recovery_slots() -> Dict[str, AutoRecovery]:
    # keyed by browser session id, so a reload of the same tab finds its own snapshot
    return {}


def session_id() -> str:
    sid = st.query_params.get("sid")
    if not sid:
        sid = uuid.uuid4().hex
        st.query_params["sid"] = sid
    return sid


config = get_config()

# ---------- Session state ----------
if "recovery" not in st.session_state:
    st.session_state.recovery = recovery_slots().setdefault(session_id(), AutoRecovery())
recovery: AutoRecovery = st.session_state.recovery

if "store" not in st.session_state:
    st.session_state.store = PanelStore(ImageNormalizer(config.imports), recovery=recovery)
for key, default in (("restore_offered", False), ("downloads", []), ("pending", None), ("flash", None)):
    if key not in st.session_state:
        st.session_state[key] = default
store: PanelStore = st.session_state.store


def perform(action: str, arg: Any = None) -> None:
    if action == "new":
        store.new_project()
    elif action == "load":
        try:
            load_into(store, arg)
            st.session_state.flash = ("success", "Project loaded!")
        except FormatError as e:
            st.session_state.flash = ("error", f"Error loading project file: {e}")
    elif action == "delete":
        store.delete_at(arg)


def guarded(action: str, arg: Any = None, warning: Optional[str] = None) -> None:
    """Run `action` now, or park it behind a confirmation prompt when `warning` is set."""
    if warning is None:
        perform(action, arg)
    else:
        st.session_state.pending = (action, arg, warning)
    st.rerun()


st.title(f"🎬 {store.title}")

if not st.session_state.restore_offered and recovery.pending is not None:
    snap = recovery.pending
    st.warning(f"Found auto-saved work ({len(snap.panels)} panels from {snap.timestamp}). Restore it?")
    c1, c2 = st.columns(2)
    if c1.button("Restore", key="restore_yes", use_container_width=True):
        recovery.restore(store)
        st.session_state.restore_offered = True
        st.rerun()
    if c2.button("Discard", key="restore_no", use_container_width=True):
        recovery.discard()
        st.session_state.restore_offered = True
        st.rerun()
    st.stop()
st.session_state.restore_offered = True

if st.session_state.flash is not None:
    kind, message = st.session_state.flash
    (st.success if kind == "success" else st.error)(message)
    st.session_state.flash = None

if st.session_state.pending is not None:
    action, arg, warning = st.session_state.pending
    st.warning(warning)
    c1, c2 = st.columns(2)
    if c1.button("Yes", key="confirm_yes", use_container_width=True):
        st.session_state.pending = None
        perform(action, arg)
        st.rerun()
    if c2.button("Cancel", key="confirm_no", use_container_width=True):
        st.session_state.pending = None
        st.rerun()

# ---------- Sidebar: project + import ----------
with st.sidebar:
    st.header("Project")
    new_name = st.text_input("Project name", value=store.project_name).strip()
    if new_name and new_name != store.project_name:
        store.project_name = new_name
        store.mark_dirty()
    if st.button("🆕 New project", key="new_project", use_container_width=True):
        guarded("new", warning=UNSAVED_WARNING if store.dirty else None)

    if st.button("💾 Prepare project file", key="save_project", use_container_width=True):
        name, payload = save(store)
        st.session_state.downloads = [(name, payload, "application/json")]

    project_file = st.file_uploader("Load project", type=["json"], key="project_upload")
    if project_file is not None and st.button("📂 Load", key="load_project", use_container_width=True):
        guarded("load", project_file.getvalue(), UNSAVED_WARNING if store.dirty else None)

    st.header("Import")
    uploads = st.file_uploader("Images", accept_multiple_files=True, key="image_upload")
    if uploads and st.button("➕ Import images", use_container_width=True):
        result = store.import_files(ImportFile(u.name, u.getvalue(), u.type) for u in uploads)
        (st.success if not result.failed and result.added else st.warning)(result.summary)

# ---------- Tabs ----------
T1, T2 = st.tabs(["Panels", "Export"])

with T1:
    if not store.panels:
        st.info("No panels yet. Import images to start creating your storyboard.")
    else:
        st.image(make_grid_image(store.panels, columns=4), use_container_width=True)
        cols = st.columns(4)
        for card in store.cards():
            with cols[card.index % 4]:
                st.markdown(f"**{card.header}** · {card.duration_label}" + (" ✏️" if card.active else ""))
                st.image(card.image, use_container_width=True)
                st.caption("  \n".join(card.captions))
                b1, b2 = st.columns(2)
                if b1.button("Edit", key=f"edit_{card.index}"):
                    store.select(card.index)
                    st.rerun()
                if b2.button("🗑", key=f"del_{card.index}"):
                    guarded("delete", card.index, DELETE_WARNING)

    panel = store.current
    if panel is not None:
        st.divider()
        st.subheader(f"Edit {panel.label}")
        with st.form("editor"):
            # widget keys carry the panel id so switching panels refreshes the form
            values = {
                "scene": st.text_input("Scene", panel.scene, key=f"scene_{panel.id}"),
                "shot": st.text_input("Shot", panel.shot, key=f"shot_{panel.id}"),
                "description": st.text_area("Description", panel.description, key=f"desc_{panel.id}"),
                "dialogue": st.text_area("Dialogue", panel.dialogue, key=f"dialogue_{panel.id}"),
                "direction": st.text_area("Direction", panel.direction, key=f"dir_{panel.id}"),
                "camera": st.text_input("Camera", panel.camera, key=f"cam_{panel.id}"),
                "duration": st.text_input("Duration (s)", str(panel.duration), key=f"dur_{panel.id}"),
            }
            if st.form_submit_button("Apply"):
                store.update(values)
                st.rerun()
        e1, e2, e3, e4 = st.columns(4)
        if e1.button("Copy"):
            store.copy_clipboard()
            st.toast("Panel data copied!")
        if e2.button("Paste"):
            if store.paste_clipboard():
                st.rerun()
            st.toast("No data to paste!")
        if e3.button("Delete panel", key="delete_current"):
            guarded("delete", store.current_index, DELETE_WARNING)
        if e4.button("Close editor"):
            store.close_editor()
            st.rerun()

with T2:
    sink = MemorySink()
    orchestrator = ExportOrchestrator(
        store, sink, PanelCompositor(config.frame), config.export, config.page
    )
    x1, x2, x3 = st.columns(3)
    job = None
    if x1.button("📄 PDF (2×2 pages)", use_container_width=True):
        job = orchestrator.export_document
    if x2.button("🖼 Single panels (PNG)", use_container_width=True):
        job = orchestrator.export_images
    if x3.button("📦 ZIP of panels", use_container_width=True):
        job = orchestrator.export_archive
    if job is not None:
        try:
            report = asyncio.run(job())
            (st.warning if report.failed else st.success)(report.summary)
            st.session_state.downloads = [(f.name, f.data, f.mime_type) for f in sink.files]
        except EmptyBatchError:
            st.info("No panels to export!")

for fname, data, mime in st.session_state.downloads:
    st.download_button(f"⬇️ {fname}", data=data, file_name=fname, mime=mime, key=f"dl_{fname}")


# ---------- Auto-recovery ----------
@st.fragment(run_every=config.autosave_seconds)
def autosave() -> None:
    # reruns on its own timer, independent of user interaction
    recovery.capture(store)


autosave()
