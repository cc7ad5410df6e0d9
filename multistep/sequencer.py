from __future__ import annotations

from typing import List, Sequence

from multistep.errors import ConfigurationError, OutOfRange


MIN_STEPS = 2


def validate_step_ids(step_ids: Sequence[str]) -> List[str]:
    ids: List[str] = list(step_ids)
    if len(ids) < MIN_STEPS:
        raise ConfigurationError(
            f"A multistep form needs at least {MIN_STEPS} steps, got {len(ids)}."
        )
    duplicates = sorted({s for s in ids if ids.count(s) > 1})
    if duplicates:
        raise ConfigurationError(f"Duplicate step ids: {duplicates}")
    return ids


class StepSequencer:
    """Ordered step ids plus a 1-based cursor into them."""

    def __init__(self, step_ids: Sequence[str]) -> None:
        self._step_ids = validate_step_ids(step_ids)
        self._cursor = 1

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def step_ids(self) -> List[str]:
        return list(self._step_ids)

    def step_count(self) -> int:
        return len(self._step_ids)

    def is_first(self) -> bool:
        return self._cursor == 1

    def is_last(self) -> bool:
        return self._cursor == self.step_count()

    def advance(self) -> None:
        if self.is_last():
            raise OutOfRange(
                f"Cannot advance past the last step ({self.step_count()})."
            )
        self._cursor += 1

    def retreat(self) -> None:
        if self.is_first():
            raise OutOfRange("Cannot retreat before the first step.")
        self._cursor -= 1

    def jump_to(self, step: int) -> None:
        # bool is an int subclass
        if isinstance(step, bool) or not isinstance(step, int):
            raise OutOfRange(f"Step must be an integer, got {step!r}.")
        if not 1 <= step <= self.step_count():
            raise OutOfRange(
                f"Step {step} is outside 1..{self.step_count()}."
            )
        self._cursor = step

    def current_step_id(self) -> str:
        return self._step_ids[self._cursor - 1]

    def __repr__(self) -> str:
        return f"StepSequencer(cursor={self._cursor}, steps={self._step_ids!r})"
