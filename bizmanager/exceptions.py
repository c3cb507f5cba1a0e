"""Service-level exceptions translated to HTTP errors by the routers."""


class NotFoundError(ValueError):
    """Raised when a requested entity does not exist."""


class TimerConflictError(ValueError):
    """Raised when a user already has a running timer."""
