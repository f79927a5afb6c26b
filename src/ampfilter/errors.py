"""Exception types and change records for the AMP filter."""

from __future__ import annotations


class AmpFilterError(Exception):
    """Base class for errors raised by ampfilter itself."""


class RuleError(AmpFilterError, ValueError):
    """Raised when a rule table entry cannot be compiled or evaluated."""

    def __init__(self, rule: str, reason: str) -> None:
        self.rule = rule
        self.reason = reason
        super().__init__(f"Invalid rule {rule!r}: {reason}")


class TransformNote:
    """Represents one change made to a document while converting it to AMP."""

    __slots__ = ("code", "message", "tag")

    def __init__(self, code: str, message: str | None = None, tag: str | None = None) -> None:
        self.code = code
        self.message = message or code
        self.tag = tag

    def __repr__(self) -> str:
        if self.tag is not None:
            return f"TransformNote({self.code!r}, tag={self.tag!r})"
        return f"TransformNote({self.code!r})"

    def __str__(self) -> str:
        if self.message != self.code:
            return f"{self.code} - {self.message}"
        return self.code

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TransformNote):
            return NotImplemented
        return self.code == other.code and self.tag == other.tag

    __hash__ = None  # type: ignore[assignment]
