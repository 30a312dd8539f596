"""Error taxonomy surfaced by the matching engine and chat ledger."""


class FitMatchError(Exception):
    """Base class for all FitMatch errors."""


class NotFoundError(FitMatchError):
    """A referenced user, chat or match does not exist or is not visible."""


class ValidationError(FitMatchError):
    """Malformed input such as empty content or out-of-range coordinates."""


class ConflictError(FitMatchError):
    """The operation clashes with an existing match for the same pair."""


class AlreadyMatchedError(ConflictError):
    """The pair already has an accepted (mutual) match."""


class StorageError(FitMatchError):
    """The backing store failed; not further classified."""
