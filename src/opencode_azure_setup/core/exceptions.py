"""Errors that end a setup session before anything is saved."""

from typing import Optional


class SetupError(Exception):
    """Base class for fatal setup errors. The message is shown to the user as-is."""


class MissingInputError(SetupError):
    """A required value was not supplied and there is nothing to fall back on."""

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"{field} is required")


class SetupAborted(SetupError):
    """The user chose not to save after the connection test kept failing."""

    def __init__(self, message: str = "Setup cancelled, configuration not saved"):
        super().__init__(message)
