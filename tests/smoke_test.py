from __future__ import annotations

from forms.contact_details import DEFAULT_STEPS, FORM_ID, STEPS, build_orchestrator
from multistep.config import FormSettings
from multistep.orchestrator import ACTION_BACK, ACTION_NEXT, ACTION_SUBMIT


def test_contact_details_flow_smoke() -> None:
    completed = []
    orch = build_orchestrator(FormSettings(form_id=FORM_ID, use_ajax=True), on_complete=completed.append)
    assert orch.step_count() == len(STEPS) == 3
    assert STEPS[:2] == DEFAULT_STEPS
    assert orch.wrapper_id == "ajax-wrapper-contact-details-form"

    state = orch.start()
    step = orch.render_step(state)
    assert step.step_id == "first_step_form"
    assert step.actions == [ACTION_NEXT]

    orch.handle(state, ACTION_NEXT, {"name": "Ada"})
    assert orch.consume_rebuild(state) is True

    step = orch.render_step(state)
    assert step.step_id == "second_step_form"
    assert step.actions == [ACTION_BACK, ACTION_NEXT]

    orch.handle(state, ACTION_BACK, {"address": "1 Main St"})
    step = orch.render_step(state)
    assert [f.default for f in step.fields] == ["Ada"]

    orch.handle(state, ACTION_NEXT, {"name": "Ada Lovelace"})
    step = orch.render_step(state)
    assert [f.default for f in step.fields] == ["1 Main St"]

    orch.handle(state, ACTION_NEXT, {"address": "1 Main St"})
    step = orch.render_step(state)
    assert step.step_id == "third_step_form"
    assert step.actions == [ACTION_BACK, ACTION_SUBMIT]

    orch.handle(state, ACTION_SUBMIT, {"city": "London"})

    assert state.completed is True
    assert completed == [{"name": "Ada Lovelace", "address": "1 Main St", "city": "London"}]
