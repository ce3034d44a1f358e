"""Input validators shared by lifecycle commands and waits.

Each validator returns ``(ok, reason)``; callers prefix the reason with the
field name, e.g. ``"link cost is not valid: value is not positive"``.
"""

from __future__ import annotations

import re

from .retry import format_duration

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


class OptionValidator:
    """Accepts only values from a fixed list of options."""

    def __init__(self, options: list[str]):
        self.options = list(options)

    def evaluate(self, value: str) -> tuple[bool, str | None]:
        if value in self.options:
            return True, None
        return False, (
            f"value {value} not allowed. "
            f"It should be one of this options: [{' '.join(self.options)}]"
        )


class NumberValidator:
    """Accepts strictly positive integers given as strings."""

    def evaluate(self, value: str) -> tuple[bool, str | None]:
        if not _INTEGER_RE.fullmatch(value or ""):
            return False, f'strconv.Atoi: parsing "{value}": invalid syntax'
        if int(value) <= 0:
            return False, "value is not positive"
        return True, None


class TimeoutValidator:
    """Rejects timeouts below a floor; never clamps."""

    def __init__(self, minimum: float):
        self.minimum = minimum

    def evaluate(self, timeout: float) -> tuple[bool, str | None]:
        if timeout < self.minimum:
            return False, (
                f"duration must not be less than {format_duration(self.minimum)}; "
                f"got {format_duration(timeout)}"
            )
        return True, None
