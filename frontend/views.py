# =============================================================================
# Legal Navigator: Streamlit render helpers
# Every helper takes the Translator explicitly; none reads a global language.
# =============================================================================
from __future__ import annotations

import html
from datetime import datetime
from typing import Iterable, List, Optional

import streamlit as st

from navigator.i18n import Translator
from navigator.models import (
    AnalysisResult,
    ComparisonResult,
    FlowChartNode,
    Reminder,
    SavedAnalysis,
)
from navigator.notify import Notification
from navigator.personalization import ReminderList
from navigator.presenter import SECTIONS, SectionTracker, next_steps, risks_by_severity, severity_color
from navigator.procedures import split_branches

STATUS_ICONS = {
    "completed": "✅",
    "current": "🔵",
    "pending": "⚪",
    "optional": "🟡",
}

CSS = """
<style>
  .ln-card{border:1px solid #2a2f37;border-radius:12px;padding:12px 14px;margin:8px 0}
  .ln-badge{display:inline-block;padding:2px 10px;border-radius:999px;color:#fff;font-weight:700;font-size:.85rem}
  .ln-muted{opacity:.75;font-size:.9rem}
  .ln-node{border-left:4px solid #64748b;padding:6px 10px;margin:6px 0;border-radius:6px}
  .ln-node.start{border-color:#22c55e}.ln-node.end{border-color:#ef4444}
  .ln-node.document{border-color:#3b82f6}.ln-node.decision{border-color:#f59e0b}
  .ln-node.current{background:rgba(59,130,246,.12)}.ln-node.completed{background:rgba(34,197,94,.10)}
</style>
"""


def inject_css() -> None:
    st.markdown(CSS, unsafe_allow_html=True)


def flash(notifications: Iterable[Notification]) -> None:
    for n in notifications:
        if n.is_error:
            st.error(f"**{n.title}**  \n{n.description}" if n.description else n.title)
        else:
            st.toast(f"{n.title}: {n.description}" if n.description else n.title)


def badge(level: Optional[str], label: Optional[str] = None) -> str:
    lvl = (level or "").lower()
    text = html.escape(label or lvl.title() or "—")
    return f"<span class='ln-badge' style='background:{severity_color(lvl)}'>{text}</span>"


# -----------------------------------------------------------------------------
# Analysis results
# -----------------------------------------------------------------------------
def _render_summary(result: AnalysisResult, t: Translator) -> None:
    st.markdown(
        f"<div class='ln-card'>{badge(result.risk_level, t('risk_level_' + result.risk_level.lower()))}"
        f" &nbsp;{html.escape(t('score_label', score=round(result.score)))}</div>",
        unsafe_allow_html=True,
    )
    st.write(result.summary or "—")
    for category, clauses in (result.clause_categories or {}).items():
        if clauses:
            with st.expander(f"{category.title()} ({len(clauses)})"):
                for c in clauses:
                    st.markdown(f"- {c}")


def _render_risks(result: AnalysisResult, t: Translator) -> None:
    if not result.risks:
        st.info(t("no_risks"))
        return
    for level, risks in risks_by_severity(result).items():
        for r in risks:
            st.markdown(
                f"<div class='ln-card'>{badge(level, t('risk_level_' + level))}"
                f" <strong>{html.escape(r.clause)}</strong>"
                f"<p>{html.escape(r.issue)}</p>"
                f"<p class='ln-muted'>{html.escape(t('suggestion_label'))}: {html.escape(r.suggestion)}</p></div>",
                unsafe_allow_html=True,
            )
    for issue in result.jurisdiction_issues or []:
        st.warning(f"**{issue.clause}**: {issue.issue}\n\n{issue.recommendation}")


def _render_suggestions(result: AnalysisResult, t: Translator) -> None:
    if not result.suggestions:
        st.info(t("no_suggestions"))
        return
    for s in result.suggestions:
        with st.container(border=True):
            st.markdown(f"**{s.clause}**")
            st.write(s.suggestion)
            st.caption(f"{t('reason_label')}: {s.reason}")


def _render_next_steps(result: AnalysisResult, t: Translator) -> None:
    for i, line in enumerate(next_steps(result, t), 1):
        st.markdown(f"{i}. {line}")


_SECTION_RENDERERS = {
    "summary": _render_summary,
    "risks": _render_risks,
    "suggestions": _render_suggestions,
    "next_steps": _render_next_steps,
}


def render_analysis(result: AnalysisResult, tracker: SectionTracker, t: Translator) -> None:
    st.progress(tracker.progress / 100, text=t("progress_label", progress=tracker.progress))
    picked = st.radio(
        t("sections_label"),
        SECTIONS,
        index=tracker.index,
        format_func=lambda s: t("section_" + s),
        horizontal=True,
        label_visibility="collapsed",
        key="_section_pick",
    )
    if picked != tracker.current:
        tracker.go_to(picked)
        st.rerun()

    st.subheader(t("section_" + tracker.current))
    _SECTION_RENDERERS[tracker.current](result, t)

    if not tracker.is_last:
        if st.button(t("continue_button"), key=f"continue_{tracker.current}", use_container_width=True):
            tracker.advance()
            st.session_state.pop("_section_pick", None)
            st.rerun()


def render_comparison(result: ComparisonResult, t: Translator) -> None:
    st.subheader(t("comparison_summary"))
    st.write(result.summary or "—")
    if result.differences:
        st.subheader(t("key_differences"))
        for d in result.differences:
            with st.container(border=True):
                st.markdown(f"**{d.section}**")
                c1, c2 = st.columns(2)
                c1.caption(t("first_contract"))
                c1.write(d.first)
                c2.caption(t("second_contract"))
                c2.write(d.second)
                if d.impact:
                    st.caption(f"{t('impact_label')}: {d.impact}")
    st.subheader(t("recommendation"))
    st.write(result.recommendation or "—")


# -----------------------------------------------------------------------------
# History
# -----------------------------------------------------------------------------
def history_label(a: SavedAnalysis, t: Translator) -> str:
    when = a.created_at.strftime("%Y-%m-%d") if a.created_at else "—"
    level = a.effective_risk_level or "?"
    return f"{when} · {a.title or t('untitled')} · {a.contract_type} · {a.jurisdiction} · {level}"


# -----------------------------------------------------------------------------
# Procedures
# -----------------------------------------------------------------------------
def _node_html(node: FlowChartNode, position: int) -> str:
    icon = STATUS_ICONS.get(node.status, "⚪")
    desc = f"<div class='ln-muted'>{html.escape(node.description)}</div>" if node.description else ""
    return (
        f"<div class='ln-node {node.type} {node.status}'>{icon} <strong>{position}.</strong> "
        f"{html.escape(node.label)}{desc}</div>"
    )


def render_flowchart(nodes: List[FlowChartNode], t: Translator, branching: bool = False) -> None:
    if not nodes:
        st.caption(t("no_steps"))
        return
    if branching:
        left, right = split_branches(nodes)
        c1, c2 = st.columns(2)
        with c1:
            for i, n in enumerate(left, 1):
                st.markdown(_node_html(n, i), unsafe_allow_html=True)
        with c2:
            for i, n in enumerate(right, len(left) + 1):
                st.markdown(_node_html(n, i), unsafe_allow_html=True)
        return
    for i, n in enumerate(nodes, 1):
        st.markdown(_node_html(n, i), unsafe_allow_html=True)


def reminder_line(r: Reminder, t: Translator, now: Optional[datetime] = None) -> str:
    due = r.due_date.strftime("%b %d, %Y")
    if r.is_completed:
        state = t("reminder_done")
    elif ReminderList.is_overdue(r, now):
        state = t("reminder_overdue")
    else:
        state = t("reminder_upcoming")
    return f"{r.title} · {due} · {state}"
