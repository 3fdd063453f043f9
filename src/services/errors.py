"""Exceptions raised inside the adapter; the action boundary turns them into result objects."""


class AdapterError(Exception):
    """Base class for errors that stop an order before it reaches S/4HANA."""


class MalformedInputError(AdapterError):
    """The inbound document or payload could not be parsed."""


class ValidationFailedError(AdapterError):
    """A business rule was violated. Carries every violation collected so far."""

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or [message]


class PayloadBuildError(AdapterError):
    """A customer or material identifier is missing entirely."""
