from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from multistep.config import FormSettings, build_wrapper_id
from multistep.errors import ConfigurationError, FlowStateError, OutOfRange
from multistep.field_store import FieldStore
from multistep.sequencer import StepSequencer, validate_step_ids
from multistep.steps import RenderedStep, StepDefinition


logger = logging.getLogger(__name__)


ACTION_BACK = "back"
ACTION_NEXT = "next"
ACTION_SUBMIT = "submit"

ACTION_LABELS: Dict[str, str] = {
    ACTION_BACK: "Back",
    ACTION_NEXT: "Next",
    ACTION_SUBMIT: "Submit",
}

Submission = Optional[Mapping[str, Any]]
CompletionHandler = Callable[[Dict[str, Any]], None]


@dataclass
class MultistepState:
    sequencer: StepSequencer
    store: FieldStore = field(default_factory=FieldStore)
    completed: bool = False
    result: Optional[Dict[str, Any]] = None
    rebuild_requested: bool = False

    @property
    def current_step(self) -> int:
        return self.sequencer.cursor


def available_actions(sequencer: StepSequencer) -> List[str]:
    actions: List[str] = []
    if not sequencer.is_first():
        actions.append(ACTION_BACK)
    if sequencer.is_last():
        actions.append(ACTION_SUBMIT)
    else:
        actions.append(ACTION_NEXT)
    return actions


class FormOrchestrator:
    """Drives one multistep flow over an explicit :class:`MultistepState`.

    The orchestrator itself holds only configuration (form id, step
    definitions, ajax flag). Everything that changes while the user walks
    through the form lives in the state object, which the caller keeps in its
    session and passes back on every transition.
    """

    def __init__(
        self,
        form_id: str,
        steps: Sequence[StepDefinition],
        *,
        use_ajax: bool = False,
        on_complete: Optional[CompletionHandler] = None,
    ) -> None:
        self.form_id = form_id
        self.use_ajax = use_ajax
        self.wrapper_id = build_wrapper_id(form_id, use_ajax)
        self.on_complete = on_complete

        self._steps: List[StepDefinition] = list(steps)
        validate_step_ids([s.step_id for s in self._steps])

    @classmethod
    def from_settings(
        cls,
        settings: FormSettings,
        steps: Sequence[StepDefinition],
        on_complete: Optional[CompletionHandler] = None,
    ) -> "FormOrchestrator":
        return cls(
            settings.form_id,
            steps,
            use_ajax=settings.use_ajax,
            on_complete=on_complete,
        )

    @property
    def steps(self) -> List[StepDefinition]:
        return list(self._steps)

    def step_count(self) -> int:
        return len(self._steps)

    def start(self) -> MultistepState:
        logger.debug("Starting flow %s with %d steps", self.form_id, self.step_count())
        return MultistepState(sequencer=StepSequencer([s.step_id for s in self._steps]))

    def _ensure_active(self, state: MultistepState) -> None:
        if state.completed:
            raise FlowStateError(f"Flow {self.form_id!r} is already completed.")

    def _request_rebuild(self, state: MultistepState) -> None:
        state.rebuild_requested = True

    def on_next(self, state: MultistepState, submission: Submission = None) -> None:
        self._ensure_active(state)
        if state.sequencer.is_last():
            raise OutOfRange(
                f"Next is not available on the last step ({state.current_step})."
            )
        state.store.merge(submission)
        state.sequencer.advance()
        self._request_rebuild(state)
        logger.debug("%s: next -> step %d", self.form_id, state.current_step)

    def on_back(self, state: MultistepState, submission: Submission = None) -> None:
        self._ensure_active(state)
        if state.sequencer.is_first():
            raise OutOfRange("Back is not available on the first step.")
        state.store.merge(submission)
        state.sequencer.retreat()
        self._request_rebuild(state)
        logger.debug("%s: back -> step %d", self.form_id, state.current_step)

    def on_submit(self, state: MultistepState, submission: Submission = None) -> Dict[str, Any]:
        self._ensure_active(state)
        if not state.sequencer.is_last():
            raise OutOfRange(
                f"Submit is only available on the last step, current step is {state.current_step}."
            )
        state.store.merge(submission)
        result = state.store.as_dict()
        state.completed = True
        state.result = result
        logger.info("%s: completed with %d fields", self.form_id, len(result))

        if self.on_complete is not None:
            self.on_complete(dict(result))
        return dict(result)

    def jump_to(self, state: MultistepState, step: int) -> None:
        self._ensure_active(state)
        state.sequencer.jump_to(step)
        self._request_rebuild(state)
        logger.debug("%s: jump -> step %d", self.form_id, state.current_step)

    def handle(self, state: MultistepState, action: str, submission: Submission = None) -> None:
        if action == ACTION_NEXT:
            self.on_next(state, submission)
        elif action == ACTION_BACK:
            self.on_back(state, submission)
        elif action == ACTION_SUBMIT:
            self.on_submit(state, submission)
        else:
            raise FlowStateError(f"Unknown navigation action: {action!r}")

    def actions(self, state: MultistepState) -> List[str]:
        if state.completed:
            return []
        return available_actions(state.sequencer)

    def consume_rebuild(self, state: MultistepState) -> bool:
        requested = state.rebuild_requested
        state.rebuild_requested = False
        return requested

    def current_definition(self, state: MultistepState) -> StepDefinition:
        step_id = state.sequencer.current_step_id()
        for definition in self._steps:
            if definition.step_id == step_id:
                return definition
        raise ConfigurationError(
            f"State refers to step {step_id!r}, which {self.form_id!r} does not define."
        )

    def render_step(self, state: MultistepState) -> RenderedStep:
        self._ensure_active(state)
        definition = self.current_definition(state)

        fields = [
            dataclasses.replace(spec, default=state.store.get(spec.name, spec.default))
            for spec in definition.build_fields()
        ]

        return RenderedStep(
            step_id=definition.step_id,
            index=state.current_step,
            step_count=self.step_count(),
            title=definition.title,
            wrapper_id=self.wrapper_id,
            fields=fields,
            actions=self.actions(state),
        )
