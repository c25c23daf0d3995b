"""Error taxonomy shared by the report engine and its callers."""

from __future__ import annotations

from typing import Optional


class ReportError(Exception):
    """Base exception for report engine errors."""

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(ReportError):
    """Raised when caller input is malformed, before any computation starts."""


class ElementNotFoundError(ReportError):
    """Raised when a requested network, gateway or sensor does not exist."""

    def __init__(self, entity: str, code: str) -> None:
        self.entity = entity
        self.code = code
        super().__init__(f"{entity.capitalize()} {code!r} not found.")
