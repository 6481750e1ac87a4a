# =============================================================================
# Legal Navigator: Streamlit Frontend
# Run with:  streamlit run frontend/app.py
# =============================================================================
from __future__ import annotations

# ---- Imports ----------------------------------------------------------------
import logging
from datetime import date, datetime, time as dtime

import streamlit as st

from navigator.api import ApiClient
from navigator.assistant import ChatSession, suggested_questions
from navigator.config import AppConfig, configure_logging
from navigator.dispatcher import AnalysisDispatcher
from navigator.errors import ApiError, InputError
from navigator.history import SORT_MODES, HistoryBrowser
from navigator.intake import CONTRACT_TYPES, JURISDICTIONS, ContractDraft
from navigator.notify import NotificationLog
from navigator.personalization import Personalization
from navigator.presenter import SectionTracker
from navigator.procedures import (
    available_procedures,
    document_checklist,
    flowchart_nodes,
    load_procedure,
    seed_checklist,
    timeline_range,
)
from navigator.results import ResultStore
from navigator.workspace import Workspace

import views

# ---- Page Setup --------------------------------------------------------------
st.set_page_config(page_title="Legal Navigator", page_icon="⚖️", layout="centered")

CONFIG = AppConfig.from_env()
configure_logging(CONFIG.log_level)
logger = logging.getLogger("frontend")

VIEWS = ("analyze", "compare", "results", "history", "procedures", "assistant")
VIEW_FOR_TAB = {
    "upload": "analyze",
    "compare": "compare",
    "results": "results",
    "comparison-results": "results",
    "history": "history",
}


@st.cache_data(ttl=30)  # ping at most once every 30s
def ping_backend(api_base: str) -> bool:
    return ApiClient(AppConfig(api_base=api_base)).ping()


# ---- Session bootstrap -------------------------------------------------------
if "_ws" not in st.session_state:
    st.session_state["_ws"] = Workspace.build(CONFIG)
st.session_state.setdefault("_view", "analyze")

ws: Workspace = st.session_state["_ws"]
t = ws.translator
notes: NotificationLog = ws.notes
store: ResultStore = ws.store
dispatcher: AnalysisDispatcher = ws.dispatcher
history: HistoryBrowser = ws.history
draft: ContractDraft = ws.draft
tracker: SectionTracker = ws.tracker


def _follow_store() -> None:
    """Jump to whatever tab the store now points at."""
    st.session_state["_next_view"] = VIEW_FOR_TAB[store.active_tab]
    tracker.reset()
    st.session_state.pop("_section_pick", None)
    st.rerun()


views.inject_css()

# ---- Sidebar -----------------------------------------------------------------
with st.sidebar:
    st.markdown(f"### ⚖️ {t('app_title')}")
    lang = st.selectbox(
        t("language_label"),
        t.languages,
        index=t.languages.index(t.language),
        format_func=lambda code: t("language_" + code),
    )
    if lang != t.language:
        t.set_language(lang)
        st.rerun()

    if ping_backend(CONFIG.api_base):
        st.success(t("backend_online"))
    else:
        st.warning(t("backend_offline", url=CONFIG.api_base))

    if dispatcher.is_pending:
        st.info(t("request_pending"))

# widget state can only be set before the widget exists
if "_next_view" in st.session_state:
    st.session_state["_view"] = st.session_state.pop("_next_view")

view = st.radio(
    t("navigation_label"),
    VIEWS,
    format_func=lambda v: t("view_" + v),
    horizontal=True,
    label_visibility="collapsed",
    key="_view",
)


def _form_options() -> None:
    c1, c2 = st.columns(2)
    values = [v for v, _ in JURISDICTIONS]
    draft.jurisdiction = c1.selectbox(
        t("jurisdiction_label"),
        values,
        index=values.index(draft.jurisdiction) if draft.jurisdiction in values else 0,
        format_func=dict(JURISDICTIONS).get,
    )
    types = [v for v, _ in CONTRACT_TYPES]
    draft.contract_type = c2.selectbox(
        t("contract_type_label"),
        types,
        index=types.index(draft.contract_type) if draft.contract_type in types else 0,
        format_func=dict(CONTRACT_TYPES).get,
    )


# =============================================================================
# Analyze
# =============================================================================
if view == "analyze":
    st.title(t("analyze_heading"))
    st.caption(t("analyze_intro"))

    up = st.file_uploader(t("upload_label"), type=["txt", "pdf", "doc", "docx"], key="_upload")
    if up is not None and (draft.file is None or draft.file.name != up.name):
        if draft.attach_file(up.name, up.getvalue(), up.type or None):
            st.session_state["_contract_text"] = draft.text
    elif up is None and draft.file is not None:
        draft.file = None
    st.session_state.setdefault("_contract_text", draft.text)

    draft.text = st.text_area(
        t("contract_text_label"),
        height=260,
        placeholder=t("contract_text_placeholder"),
        key="_contract_text",
    )
    _form_options()
    draft.title = st.text_input(t("title_label"), value=draft.title, placeholder=t("title_placeholder"))
    draft.save = st.checkbox(t("save_label"), value=draft.save)

    c1, c2 = st.columns(2)
    go_text = c1.button(t("analyze_button"), type="primary", use_container_width=True, disabled=dispatcher.is_pending)
    go_file = c2.button(
        t("analyze_file_button"),
        use_container_width=True,
        disabled=dispatcher.is_pending or draft.file is None,
    )
    if go_text or go_file:
        with st.spinner(t("analyzing")):
            outcome = dispatcher.analyze_file(draft) if go_file else dispatcher.analyze_text(draft)
        if outcome.ok:
            _follow_store()

# =============================================================================
# Compare
# =============================================================================
elif view == "compare":
    st.title(t("compare_heading"))
    pair = ws.comparison_draft
    c1, c2 = st.columns(2)
    with c1:
        f1 = st.file_uploader(t("first_contract"), type=["txt"], key="_cmp_first")
        if f1 is not None and (pair.file is None or pair.file.name != f1.name):
            if pair.attach_file(f1.name, f1.getvalue(), f1.type or None):
                st.session_state["_cmp_first_text"] = pair.text
        st.session_state.setdefault("_cmp_first_text", pair.text)
        pair.text = st.text_area(t("first_contract"), height=220, key="_cmp_first_text")
    with c2:
        f2 = st.file_uploader(t("second_contract"), type=["txt"], key="_cmp_second")
        if f2 is not None and (pair.second_file is None or pair.second_file.name != f2.name):
            if pair.attach_second_file(f2.name, f2.getvalue(), f2.type or None):
                st.session_state["_cmp_second_text"] = pair.second_text
        st.session_state.setdefault("_cmp_second_text", pair.second_text)
        pair.second_text = st.text_area(t("second_contract"), height=220, key="_cmp_second_text")
    if st.button(t("compare_button"), type="primary", use_container_width=True, disabled=dispatcher.is_pending):
        with st.spinner(t("comparing")):
            outcome = dispatcher.compare(pair)
        if outcome.ok:
            _follow_store()

# =============================================================================
# Results
# =============================================================================
elif view == "results":
    if store.analysis is not None:
        st.title(t("results_heading"))
        views.render_analysis(store.analysis, tracker, t)
        st.divider()
        with st.form("save_form"):
            save_title = st.text_input(t("title_label"), value=dispatcher.last_context.get("title", ""))
            if st.form_submit_button(t("save_button")):
                try:
                    dispatcher.save_result(save_title)
                except (InputError, ApiError) as e:
                    logger.info("save failed: %s", e)
    elif store.comparison is not None:
        st.title(t("comparison_heading"))
        views.render_comparison(store.comparison, t)
    else:
        st.info(t("no_results"))

# =============================================================================
# History
# =============================================================================
elif view == "history":
    st.title(t("history_heading"))
    c1, c2, c3 = st.columns([3, 2, 1])
    query = c1.text_input(t("search_label"), placeholder=t("search_placeholder"))
    sort = c2.selectbox(t("sort_label"), SORT_MODES, format_func=lambda m: t("sort_" + m))
    if c3.button(t("refresh_button")):
        history.refresh()

    try:
        rows = history.visible(query, sort)
    except ApiError:
        rows = []
    if not rows:
        st.caption(t("history_empty"))
    for a in rows:
        selected = history.selected_id is not None and str(history.selected_id) == str(a.id)
        with st.container(border=True):
            st.markdown(("**▶ " if selected else "**") + views.history_label(a, t) + "**")
            b1, b2 = st.columns(2)
            if b1.button(t("open_button"), key=f"open_{a.id}"):
                try:
                    history.select(a.id)
                except ApiError as e:
                    logger.info("could not open analysis %s: %s", a.id, e)
                else:
                    _follow_store()
            if b2.button(t("delete_button"), key=f"del_{a.id}"):
                try:
                    history.delete(a.id)
                except ApiError as e:
                    logger.info("could not delete analysis %s: %s", a.id, e)
                st.rerun()

# =============================================================================
# Procedures
# =============================================================================
elif view == "procedures":
    st.title(t("procedures_heading"))
    slugs = available_procedures()
    slug = st.selectbox(t("procedure_label"), slugs, format_func=lambda s: load_procedure(s).title)
    proc = load_procedure(slug)
    personal: Personalization = ws.personalization(slug)

    st.write(proc.description)
    lo, hi = timeline_range(proc)
    st.caption(t("timeline_range", min=lo, max=hi))

    step_ids = [s.id for s in proc.steps]
    current = st.select_slider(
        t("current_step_label"),
        options=step_ids,
        format_func=lambda sid: next(s.title for s in proc.steps if s.id == sid),
    )
    branching = st.toggle(t("branching_label"), value=False)
    views.render_flowchart(flowchart_nodes(proc, current), t, branching=branching)

    step = next(s for s in proc.steps if s.id == current)
    with st.expander(t("step_details"), expanded=True):
        st.write(step.details or step.description)
        st.caption(step.timeline.description)
        for tip in step.tips:
            st.markdown(f"💡 {tip}")
        for doc in step.documents:
            st.markdown(f"{'📄' if doc.required else '📎'} **{doc.name}**: {doc.description}")

    tab_notes, tab_rem, tab_check = st.tabs([t("notes_tab"), t("reminders_tab"), t("checklist_tab")])
    with tab_notes:
        for n in personal.notes.for_step(current):
            c1, c2 = st.columns([5, 1])
            c1.markdown(n.content)
            if c2.button("🗑", key=f"note_del_{n.id}"):
                personal.notes.delete(n.id)
                st.rerun()
            with st.expander(t("edit_button")):
                with st.form(f"note_edit_{n.id}"):
                    revised = st.text_area(t("note_label"), value=n.content, key=f"note_text_{n.id}")
                    if st.form_submit_button(t("update_button")) and revised.strip():
                        personal.notes.edit(n.id, revised)
                        st.rerun()
        with st.form(f"note_{slug}", clear_on_submit=True):
            body = st.text_area(t("note_label"))
            if st.form_submit_button(t("add_note_button")) and body.strip():
                personal.notes.add(current, body)
                st.rerun()

    with tab_rem:
        now = datetime.now()
        for r in personal.reminders:
            c1, c2, c3 = st.columns([5, 1, 1])
            c1.markdown(views.reminder_line(r, t, now))
            if c2.button("✔", key=f"rem_toggle_{r.id}"):
                personal.reminders.toggle(r.id)
                st.rerun()
            if c3.button("🗑", key=f"rem_del_{r.id}"):
                personal.reminders.delete(r.id)
                st.rerun()
            with st.expander(t("edit_button")):
                with st.form(f"rem_edit_{r.id}"):
                    new_title = st.text_input(t("reminder_title_label"), value=r.title, key=f"rem_title_{r.id}")
                    new_due = st.date_input(t("reminder_due_label"), value=r.due_date.date(), key=f"rem_due_{r.id}")
                    new_before = st.number_input(
                        t("reminder_notify_label"), min_value=0, max_value=30, value=r.notify_before, key=f"rem_before_{r.id}"
                    )
                    if st.form_submit_button(t("update_button")) and new_title.strip():
                        personal.reminders.edit(
                            r.id,
                            title=new_title.strip(),
                            due_date=datetime.combine(new_due, r.due_date.time()),
                            notify_before=int(new_before),
                        )
                        st.rerun()
        with st.form(f"rem_{slug}", clear_on_submit=True):
            title = st.text_input(t("reminder_title_label"))
            due = st.date_input(t("reminder_due_label"), value=date.today())
            before = st.number_input(t("reminder_notify_label"), min_value=0, max_value=30, value=1)
            if st.form_submit_button(t("add_reminder_button")) and title.strip():
                personal.reminders.add(title, datetime.combine(due, dtime(9, 0)), int(before), step_id=current)
                st.rerun()

    with tab_check:
        st.progress(personal.checklist.completion() / 100)
        if st.button(t("seed_checklist_button")):
            added = seed_checklist(proc, personal.checklist)
            notes.notify(t("checklist_seeded", count=added))
            st.rerun()
        for category, items in personal.checklist.by_category().items():
            st.markdown(f"**{category.title()}**")
            for it in items:
                checked = st.checkbox(it.text, value=it.is_completed, key=f"chk_{it.id}")
                if checked != it.is_completed:
                    personal.checklist.toggle(it.id)
                with st.expander(t("edit_button")):
                    with st.form(f"chk_edit_{it.id}"):
                        new_text = st.text_input(t("checklist_item_label"), value=it.text, key=f"chk_text_{it.id}")
                        new_cat = st.text_input(t("category_label"), value=it.category or "general", key=f"chk_cat_{it.id}")
                        if st.form_submit_button(t("update_button")) and new_text.strip():
                            personal.checklist.edit(it.id, text=new_text, category=new_cat.strip() or "general")
                            st.rerun()
        with st.form(f"chk_{slug}", clear_on_submit=True):
            text = st.text_input(t("checklist_item_label"))
            if st.form_submit_button(t("add_item_button")) and text.strip():
                personal.checklist.add(text, step_id=current)
                st.rerun()
        with st.expander(t("all_documents")):
            for doc in document_checklist(proc):
                st.markdown(f"- {doc.name}{' *' if doc.required else ''}")

# =============================================================================
# Assistant
# =============================================================================
elif view == "assistant":
    st.title(t("assistant_heading"))
    chat: ChatSession = ws.chat
    if not chat.messages and not st.session_state.get("_chat_loaded"):
        st.session_state["_chat_loaded"] = True
        try:
            chat.load()
        except ApiError as e:
            logger.info("chat history unavailable: %s", e)

    if not chat.messages:
        with st.chat_message("assistant"):
            st.write(t("welcome_message"))
        cols = st.columns(2)
        for i, q in enumerate(suggested_questions(t)):
            if cols[i % 2].button(q, key=f"suggest_{i}", use_container_width=True):
                st.session_state["_chat_prefill"] = q
                st.rerun()

    for m in chat.messages:
        with st.chat_message("assistant" if m.role == "assistant" else "user"):
            st.write(m.content)

    prompt = st.chat_input(t("chat_placeholder")) or st.session_state.pop("_chat_prefill", None)
    if prompt:
        try:
            with st.spinner(t("thinking")):
                chat.send(prompt)
        except InputError as e:
            notes.notify(e.title, e.description, "destructive")
        st.rerun()

# ---- Notifications (last, so anything raised above is shown) ----------------
views.flash(notes.drain())
