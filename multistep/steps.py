from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence, Set

from multistep.errors import ConfigurationError


KIND_TEXTFIELD = "textfield"
KIND_TEXTAREA = "textarea"
KIND_NUMBER = "number"
KIND_SELECT = "select"
KIND_CHECKBOX = "checkbox"

ALLOWED_KINDS: Set[str] = {
    KIND_TEXTFIELD,
    KIND_TEXTAREA,
    KIND_NUMBER,
    KIND_SELECT,
    KIND_CHECKBOX,
}


@dataclass(frozen=True)
class FieldSpec:
    name: str
    label: str
    kind: str = KIND_TEXTFIELD
    default: Any = ""
    options: Sequence[Any] = ()
    help: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ConfigurationError("Field name must not be empty.")
        if self.kind not in ALLOWED_KINDS:
            raise ConfigurationError(f"Unknown field kind for {self.name!r}: {self.kind!r}")
        if self.kind == KIND_SELECT and not self.options:
            raise ConfigurationError(f"Select field {self.name!r} needs at least one option.")


StepBuilder = Callable[[], List[FieldSpec]]


@dataclass(frozen=True)
class StepDefinition:
    step_id: str
    builder: StepBuilder
    title: str = ""

    def build_fields(self) -> List[FieldSpec]:
        fields = list(self.builder())
        names = [f.name for f in fields]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ConfigurationError(
                f"Step {self.step_id!r} declares duplicate fields: {duplicates}"
            )
        return fields


@dataclass(frozen=True)
class RenderedStep:
    step_id: str
    index: int
    step_count: int
    title: str
    wrapper_id: str
    fields: List[FieldSpec] = field(default_factory=list)
    actions: List[str] = field(default_factory=list)
