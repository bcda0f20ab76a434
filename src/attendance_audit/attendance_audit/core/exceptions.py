class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class CacheError(Exception):
    """Raised by cache clients when the backing store is unreachable or misbehaves.

    Never escapes the cache-aside orchestrator.
    """
