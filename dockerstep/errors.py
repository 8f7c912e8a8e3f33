"""Errors raised by the base image cache."""


class CacheError(Exception):
    """Base class for cache errors."""


class AlreadyCachedError(CacheError):
    """The requested image is already present in the cache."""


class NotFoundError(CacheError):
    """The requested image is not present in the cache."""


class ExpiredError(CacheError):
    """The requested image is cached but older than the allowed TTL."""


def is_already_cached(err: BaseException | None) -> bool:
    return isinstance(err, AlreadyCachedError)


def is_not_found(err: BaseException | None) -> bool:
    return isinstance(err, NotFoundError)


def is_expired(err: BaseException | None) -> bool:
    return isinstance(err, ExpiredError)