from __future__ import annotations

from typing import List, Optional

from multistep.config import FormSettings
from multistep.orchestrator import CompletionHandler, FormOrchestrator
from multistep.steps import KIND_TEXTFIELD, FieldSpec, StepDefinition


FORM_ID = "contact_details_form"


def first_step_form() -> List[FieldSpec]:
    return [FieldSpec(name="name", label="Your name", kind=KIND_TEXTFIELD)]


def second_step_form() -> List[FieldSpec]:
    return [FieldSpec(name="address", label="Your street address", kind=KIND_TEXTFIELD)]


def third_step_form() -> List[FieldSpec]:
    return [FieldSpec(name="city", label="Your city", kind=KIND_TEXTFIELD)]


DEFAULT_STEPS: List[StepDefinition] = [
    StepDefinition("first_step_form", first_step_form, "Step 1: Personal details"),
    StepDefinition("second_step_form", second_step_form, "Step 2: Street address info"),
]

STEPS: List[StepDefinition] = DEFAULT_STEPS + [
    StepDefinition("third_step_form", third_step_form, "Step 3: City info"),
]

FIELD_LABELS = {
    spec.name: spec.label
    for step in STEPS
    for spec in step.build_fields()
}


def build_orchestrator(
    settings: Optional[FormSettings] = None,
    on_complete: Optional[CompletionHandler] = None,
) -> FormOrchestrator:
    if settings is None:
        settings = FormSettings(form_id=FORM_ID)
    return FormOrchestrator.from_settings(settings, STEPS, on_complete=on_complete)
