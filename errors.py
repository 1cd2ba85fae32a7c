from __future__ import annotations


class ParseError(ValueError):
    """
    Raised for malformed time-of-day strings in commitments or events, and
    for periods whose end does not come after their start.
    A planning run that hits one is aborted; no partial plan is returned.
    """

    def __init__(self, value: object, field: str = "time", expected: str = "HH:MM (00:00-23:59)") -> None:
        self.value = value
        self.field = field
        super().__init__(f"Invalid {field} {value!r}: expected {expected}.")
