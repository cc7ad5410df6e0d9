from __future__ import annotations

import io
import logging
from typing import Any, Dict, List, Mapping, MutableMapping, Optional

import pandas as pd
import streamlit as st
from streamlit.errors import StreamlitAPIException
from reportlab.lib import colors  # type: ignore
from reportlab.lib.pagesizes import letter  # type: ignore
from reportlab.lib.styles import getSampleStyleSheet  # type: ignore
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle  # type: ignore

from forms.contact_details import FIELD_LABELS, build_orchestrator
from multistep.config import configure_logging, load_settings
from multistep.errors import FlowStateError
from multistep.orchestrator import ACTION_BACK, ACTION_LABELS, FormOrchestrator, MultistepState
from multistep.steps import (
    KIND_CHECKBOX,
    KIND_NUMBER,
    KIND_SELECT,
    KIND_TEXTAREA,
    FieldSpec,
)


logger = logging.getLogger(__name__)

STATE_KEY = "multistep_state"

RESULT_COLUMNS: List[str] = ["Field", "Label", "Value"]


def safe_rerun(fragment: bool = False) -> None:
    if fragment:
        try:
            st.rerun(scope="fragment")
        except StreamlitAPIException:
            # only valid during a fragment rerun, not a full-app run
            logger.debug("Fragment rerun unavailable, rerunning the whole app")
    st.rerun()


def initialise_state(
    session: MutableMapping[str, Any],
    orchestrator: FormOrchestrator,
) -> MultistepState:
    state = session.get(STATE_KEY)
    expected = [s.step_id for s in orchestrator.steps]
    if not isinstance(state, MultistepState) or state.sequencer.step_ids != expected:
        state = orchestrator.start()
        session[STATE_KEY] = state
    return state


def reset_state(
    session: MutableMapping[str, Any],
    orchestrator: FormOrchestrator,
) -> MultistepState:
    state = orchestrator.start()
    session[STATE_KEY] = state
    return state


def format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, float):
        return f"{value:,.2f}"
    return str(value)


def build_result_df(
    result: Optional[Mapping[str, Any]],
    labels: Optional[Mapping[str, str]] = None,
) -> pd.DataFrame:
    labels = labels or {}
    rows: List[Dict[str, Any]] = []
    for name, value in (result or {}).items():
        rows.append(
            {
                "Field": str(name),
                "Label": labels.get(name, str(name)),
                "Value": format_value(value),
            }
        )
    return pd.DataFrame(rows, columns=RESULT_COLUMNS)


def create_excel_bytes(
    result: Optional[Mapping[str, Any]],
    labels: Optional[Mapping[str, str]] = None,
) -> bytes:
    buffer = io.BytesIO()
    df = build_result_df(result, labels)
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name="Submission", index=False)
    buffer.seek(0)
    return buffer.getvalue()


def _df_to_table_data(df: pd.DataFrame) -> List[List[str]]:
    cols = list(df.columns)
    out: List[List[str]] = [cols]
    for _, row in df.iterrows():
        out.append([str(row[c]) for c in cols])
    return out


def create_pdf_bytes(
    title: str,
    result: Optional[Mapping[str, Any]],
    labels: Optional[Mapping[str, str]] = None,
) -> bytes:
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=letter)
    styles = getSampleStyleSheet()
    story: List[Any] = []

    story.append(Paragraph(title, styles["Title"]))
    story.append(Spacer(1, 12))

    df = build_result_df(result, labels)
    if df.empty:
        story.append(Paragraph("No values were submitted.", styles["BodyText"]))
    else:
        story.append(Paragraph("Submitted values", styles["Heading2"]))
        story.append(Spacer(1, 6))
        t = Table(_df_to_table_data(df))
        t.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                    ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ]
            )
        )
        story.append(t)

    doc.build(story)
    buffer.seek(0)
    return buffer.getvalue()


def render_field(spec: FieldSpec, key: str) -> Any:
    if spec.kind == KIND_TEXTAREA:
        return st.text_area(spec.label, value=format_value(spec.default), key=key, help=spec.help)

    if spec.kind == KIND_NUMBER:
        try:
            value = float(spec.default)
        except (TypeError, ValueError):
            value = 0.0
        return st.number_input(spec.label, value=value, key=key, help=spec.help)

    if spec.kind == KIND_SELECT:
        options = list(spec.options)
        index = options.index(spec.default) if spec.default in options else 0
        return st.selectbox(spec.label, options=options, index=index, key=key, help=spec.help)

    if spec.kind == KIND_CHECKBOX:
        return st.checkbox(spec.label, value=bool(spec.default), key=key, help=spec.help)

    return st.text_input(spec.label, value=format_value(spec.default), key=key, help=spec.help)


def step_form_ui(orchestrator: FormOrchestrator, state: MultistepState) -> None:
    step = orchestrator.render_step(state)

    st.subheader(step.title or f"Step {step.index}")
    st.progress(step.index / step.step_count, text=f"Step {step.index} of {step.step_count}")

    clicked: Optional[str] = None
    with st.form(key=step.wrapper_id):
        submission: Dict[str, Any] = {}
        for spec in step.fields:
            widget_key = f"{step.wrapper_id}-{step.step_id}-{spec.name}"
            submission[spec.name] = render_field(spec, widget_key)

        cols = st.columns(len(step.actions))
        for col, action in zip(cols, step.actions):
            with col:
                button_type = "secondary" if action == ACTION_BACK else "primary"
                if st.form_submit_button(ACTION_LABELS[action], type=button_type):
                    clicked = action

    if clicked is None:
        return

    try:
        orchestrator.handle(state, clicked, submission)
    except FlowStateError as exc:
        logger.warning("Navigation %r failed on %s: %s", clicked, orchestrator.form_id, exc)
        st.error("This action is not available on the current step.")
        return

    if state.completed:
        safe_rerun()
    if orchestrator.consume_rebuild(state):
        safe_rerun(fragment=orchestrator.use_ajax)


def results_ui(orchestrator: FormOrchestrator, state: MultistepState, title: str) -> None:
    st.header("Submitted values")

    df = build_result_df(state.result, FIELD_LABELS)
    if df.empty:
        st.info("No values were submitted.")
    else:
        st.dataframe(df, width="stretch", hide_index=True)

    st.subheader("Downloads")
    st.download_button(
        label="Download PDF",
        data=create_pdf_bytes(title, state.result, FIELD_LABELS),
        file_name=f"{orchestrator.form_id}.pdf",
        mime="application/pdf",
    )
    st.download_button(
        label="Download Excel",
        data=create_excel_bytes(state.result, FIELD_LABELS),
        file_name=f"{orchestrator.form_id}.xlsx",
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )

    if st.button("Start over"):
        reset_state(st.session_state, orchestrator)
        safe_rerun()


def _log_completion(result: Dict[str, Any]) -> None:
    logger.info("Multistep form submitted: %s", sorted(result))


def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)
    st.set_page_config(page_title=settings.page_title)

    orchestrator = build_orchestrator(settings, on_complete=_log_completion)
    state = initialise_state(st.session_state, orchestrator)

    st.title(settings.page_title)

    if state.completed:
        results_ui(orchestrator, state, settings.page_title)
        return

    if orchestrator.use_ajax:
        st.fragment(step_form_ui)(orchestrator, state)
        return

    step_form_ui(orchestrator, state)


if __name__ == "__main__":
    main()
