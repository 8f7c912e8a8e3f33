from dockerstep.errors import (
    AlreadyCachedError,
    CacheError,
    ExpiredError,
    NotFoundError,
    is_already_cached,
    is_expired,
    is_not_found,
)


def test_predicates_match_own_type():
    assert is_already_cached(AlreadyCachedError())
    assert is_not_found(NotFoundError("missing"))
    assert is_expired(ExpiredError("old"))


def test_predicates_reject_other_types():
    assert not is_already_cached(NotFoundError())
    assert not is_not_found(ExpiredError())
    assert not is_expired(ValueError())
    assert not is_expired(None)


def test_message_and_hierarchy():
    err = ExpiredError("too old")
    assert str(err) == "too old"
    assert isinstance(err, CacheError)