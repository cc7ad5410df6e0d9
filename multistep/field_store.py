from __future__ import annotations

from typing import Any, Dict, Iterator, Mapping, Optional


class FieldStore:
    """Submitted values carried across steps.

    A later submission overwrites the keys it contains and leaves every other
    key alone, so going back and forth never loses what was entered earlier.
    """

    def __init__(self, initial: Optional[Mapping[str, Any]] = None) -> None:
        self._values: Dict[str, Any] = dict(initial) if initial else {}

    def merge(self, submission: Optional[Mapping[str, Any]]) -> None:
        for name, value in (submission or {}).items():
            self._values[name] = value

    def get(self, name: str, default: Any = "") -> Any:
        return self._values.get(name, default)

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._values)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __repr__(self) -> str:
        return f"FieldStore({self._values!r})"
