from __future__ import annotations

from typing import Any, Dict, List

import pytest

from multistep.config import FormSettings
from multistep.errors import ConfigurationError, FlowStateError, OutOfRange
from multistep.orchestrator import (
    ACTION_BACK,
    ACTION_NEXT,
    ACTION_SUBMIT,
    FormOrchestrator,
)
from multistep.steps import KIND_SELECT, FieldSpec, StepDefinition


def _steps(n: int) -> List[StepDefinition]:
    return [
        StepDefinition(
            f"step_{i}",
            (lambda i=i: [FieldSpec(name=f"field_{i}", label=f"Field {i}")]),
            f"Step {i}",
        )
        for i in range(1, n + 1)
    ]


def _contact_steps() -> List[StepDefinition]:
    return [
        StepDefinition("first_step_form", lambda: [FieldSpec(name="name", label="Your name")]),
        StepDefinition("second_step_form", lambda: [FieldSpec(name="address", label="Your street address")]),
        StepDefinition("third_step_form", lambda: [FieldSpec(name="city", label="Your city")]),
    ]


def test_single_step_form_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        FormOrchestrator("single", _steps(1))


def test_empty_form_id_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        FormOrchestrator("", _steps(2))


def test_start_is_active_on_first_step_with_empty_store() -> None:
    orch = FormOrchestrator("demo", _steps(3))
    state = orch.start()
    assert state.current_step == 1
    assert len(state.store) == 0
    assert state.completed is False
    assert state.rebuild_requested is False


def test_next_next_submit_collects_every_step() -> None:
    received: List[Dict[str, Any]] = []
    orch = FormOrchestrator("contact", _contact_steps(), on_complete=received.append)
    state = orch.start()

    orch.on_next(state, {"name": "A"})
    orch.on_next(state, {"address": "B"})
    result = orch.on_submit(state, {"city": "C"})

    assert result == {"name": "A", "address": "B", "city": "C"}
    assert received == [result]
    assert state.result == result
    assert state.current_step == 3
    assert state.completed is True
    assert orch.consume_rebuild(state) is False


def test_back_keeps_values_from_both_steps() -> None:
    orch = FormOrchestrator("contact", _contact_steps())
    state = orch.start()
    orch.on_next(state, {"name": "A"})

    orch.on_back(state, {"address": "B"})

    assert state.current_step == 1
    assert state.store.get("address") == "B"
    assert state.store.get("name") == "A"

    rendered = orch.render_step(state)
    assert [f.default for f in rendered.fields] == ["A"]


def test_submit_before_last_step_mutates_nothing() -> None:
    orch = FormOrchestrator("contact", _contact_steps())
    state = orch.start()
    orch.on_next(state, {"name": "A"})
    before = state.store.as_dict()

    with pytest.raises(OutOfRange):
        orch.on_submit(state, {"address": "B"})

    assert state.store.as_dict() == before
    assert state.current_step == 2
    assert state.completed is False


def test_next_on_last_and_back_on_first_mutate_nothing() -> None:
    orch = FormOrchestrator("demo", _steps(2))
    state = orch.start()

    with pytest.raises(OutOfRange):
        orch.on_back(state, {"field_1": "x"})
    assert "field_1" not in state.store
    assert state.current_step == 1

    orch.on_next(state)
    with pytest.raises(OutOfRange):
        orch.on_next(state, {"field_2": "y"})
    assert "field_2" not in state.store
    assert state.current_step == 2


def test_completed_flow_accepts_no_transitions() -> None:
    orch = FormOrchestrator("demo", _steps(2))
    state = orch.start()
    orch.on_next(state)
    orch.on_submit(state)

    for call in (
        lambda: orch.on_next(state),
        lambda: orch.on_back(state),
        lambda: orch.on_submit(state),
        lambda: orch.jump_to(state, 1),
        lambda: orch.render_step(state),
    ):
        with pytest.raises(FlowStateError):
            call()
    assert orch.actions(state) == []


@pytest.mark.parametrize("n", [2, 3, 4])
def test_action_set_law(n: int) -> None:
    orch = FormOrchestrator("demo", _steps(n))
    state = orch.start()

    for position in range(1, n + 1):
        orch.jump_to(state, position)
        actions = orch.actions(state)
        assert (ACTION_NEXT in actions) != (ACTION_SUBMIT in actions)
        assert (ACTION_BACK in actions) is (position > 1)
        assert (ACTION_SUBMIT in actions) is (position == n)
        assert len(actions) == len(set(actions))


def test_jump_to_does_not_merge_and_requests_rebuild() -> None:
    orch = FormOrchestrator("demo", _steps(3))
    state = orch.start()

    orch.jump_to(state, 3)

    assert state.current_step == 3
    assert len(state.store) == 0
    assert orch.consume_rebuild(state) is True
    assert orch.consume_rebuild(state) is False

    with pytest.raises(OutOfRange):
        orch.jump_to(state, 4)
    assert state.current_step == 3


def test_cursor_changes_request_rebuild() -> None:
    orch = FormOrchestrator("demo", _steps(3))
    state = orch.start()
    assert orch.consume_rebuild(state) is False

    orch.on_next(state, {})
    assert orch.consume_rebuild(state) is True

    orch.on_back(state, {})
    assert orch.consume_rebuild(state) is True


def test_handle_dispatches_actions() -> None:
    orch = FormOrchestrator("demo", _steps(2))
    state = orch.start()

    orch.handle(state, ACTION_NEXT, {"field_1": "one"})
    assert state.current_step == 2

    orch.handle(state, ACTION_BACK, {"field_2": "two"})
    assert state.current_step == 1

    with pytest.raises(FlowStateError):
        orch.handle(state, "skip", {})

    orch.handle(state, ACTION_NEXT)
    orch.handle(state, ACTION_SUBMIT, {"field_2": "final"})
    assert state.result == {"field_1": "one", "field_2": "final"}


def test_render_step_seeds_defaults_from_store() -> None:
    steps = [
        StepDefinition(
            "profile",
            lambda: [
                FieldSpec(name="name", label="Name"),
                FieldSpec(name="plan", label="Plan", kind=KIND_SELECT, options=("basic", "pro"), default="basic"),
            ],
            "Profile",
        ),
        StepDefinition("confirm", lambda: [FieldSpec(name="notes", label="Notes")], "Confirm"),
    ]
    orch = FormOrchestrator("signup", steps, use_ajax=True)
    state = orch.start()

    first = orch.render_step(state)
    assert first.step_id == "profile"
    assert first.index == 1
    assert first.step_count == 2
    assert first.title == "Profile"
    assert first.wrapper_id == "ajax-wrapper-signup"
    assert first.actions == [ACTION_NEXT]
    assert {f.name: f.default for f in first.fields} == {"name": "", "plan": "basic"}

    orch.on_next(state, {"name": "Ada", "plan": "pro"})
    orch.on_back(state, {"notes": "later"})

    again = orch.render_step(state)
    assert {f.name: f.default for f in again.fields} == {"name": "Ada", "plan": "pro"}


def test_duplicate_fields_in_a_step_are_rejected() -> None:
    steps = [
        StepDefinition("a", lambda: [FieldSpec(name="x", label="X"), FieldSpec(name="x", label="X again")]),
        StepDefinition("b", lambda: []),
    ]
    orch = FormOrchestrator("dup", steps)
    with pytest.raises(ConfigurationError):
        orch.render_step(orch.start())


def test_from_settings_uses_form_id_and_ajax_flag() -> None:
    orch = FormOrchestrator.from_settings(FormSettings(form_id="my_multistep_form", use_ajax=False), _steps(2))
    assert orch.form_id == "my_multistep_form"
    assert orch.use_ajax is False
    assert orch.wrapper_id == "my-multistep-form"
