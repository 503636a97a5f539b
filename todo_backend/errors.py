from __future__ import annotations

# todo_backend/errors.py


class TodoBackendError(Exception):
    """Base class for every error raised by the data and service layers."""


class ConfigError(TodoBackendError):
    """No usable store configuration."""


class StoreConnectionError(TodoBackendError):
    """A connection could not be leased or was lost while in use."""


class ConnectionRefusedStoreError(StoreConnectionError):
    pass


class TooManyConnectionsError(StoreConnectionError):
    pass


class ConnectionLostError(StoreConnectionError):
    pass


class StatementError(TodoBackendError):
    """The store rejected a statement (bad SQL, constraint violation, ...)."""


class ValidationError(TodoBackendError):
    """Caller request is missing or has malformed parameters."""
