"""Domain-level exceptions.

All failures are expressed as subclasses of DomainException so the CLI
layer can catch them uniformly and display user-friendly messages.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


# --- Local store ---------------------------------------------------------------


class StoreError(DomainException):
    """Base class for durable local store failures."""


class StoreUnavailableError(StoreError):
    """The local store could not be opened or is not open. Fatal to the session."""


class DuplicateKeyError(StoreError):
    """``add`` was given an explicit key that already exists."""


# --- Replay --------------------------------------------------------------------


class ApplyFailedError(DomainException):
    """The remote store rejected an operation applied while online.

    Queued operations never raise this; the sync coordinator only counts
    their failures.
    """


# --- Remote --------------------------------------------------------------------


class RemoteError(DomainException):
    """The remote spreadsheet service rejected a request."""


class RemoteUnavailableError(RemoteError):
    """The remote service could not be reached."""


class RemoteAuthError(RemoteError):
    """The access token was rejected (HTTP 401)."""
