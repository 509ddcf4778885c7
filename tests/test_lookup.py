from __future__ import annotations

import pytest

from coagula.errors import MaterializationError, UnresolvedReferenceError
from coagula.lookup import LookupTable
from coagula.records import Owner
from tests.rows import ALICE, BOB, owner_table


def test_build_keys_records_by_key_function():
    owners = owner_table(ALICE, BOB)

    assert set(owners) == {ALICE, BOB}
    assert isinstance(owners[ALICE], Owner)
    assert owners.name == "owner"


def test_resolve_returns_the_stored_record():
    owners = owner_table()

    assert owners.resolve(ALICE) is owners[ALICE]


def test_resolve_unknown_key_raises_with_context():
    owners = owner_table()

    with pytest.raises(UnresolvedReferenceError) as exc_info:
        owners.resolve("nobody@email.com", level="blog")

    error = exc_info.value
    assert error.level == "blog"
    assert error.key == "nobody@email.com"
    assert "nobody@email.com" in str(error)
    assert isinstance(error, MaterializationError)


def test_resolve_none_raises():
    with pytest.raises(UnresolvedReferenceError):
        owner_table().resolve(None, level="post")


def test_named_table_reports_its_target():
    blogs: LookupTable[int, str] = LookupTable({1: "blog one"}, name="blog")

    with pytest.raises(UnresolvedReferenceError) as exc_info:
        blogs.resolve(2, level="post")

    assert exc_info.value.target == "blog"
    assert repr(blogs) == "LookupTable('blog', 1 records)"
