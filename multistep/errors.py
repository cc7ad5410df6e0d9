from __future__ import annotations


class ConfigurationError(Exception):
    pass


class FlowStateError(Exception):
    pass


class OutOfRange(FlowStateError):
    pass
