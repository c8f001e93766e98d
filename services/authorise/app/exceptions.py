"""Authorise service specific exceptions."""


class AuthoriseError(Exception):
    """Base class for authorise service errors."""


class InvalidAuthorisationCommand(AuthoriseError):
    """Raised when a command breaks its input contract (e.g. amount <= 0)."""
