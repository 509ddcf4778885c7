"""Test record shapes, ORM style validation and structural comparison."""

from __future__ import annotations

from typing import Optional

import pytest
from pydantic import ValidationError

from coagula.errors import UnresolvedReferenceError
from coagula.materializer import materialize
from coagula.records import (
    Blog,
    Owner,
    count_entities,
    graph_signature,
    owner_context,
    structurally_equal,
)
from coagula.schema import BLOG_ROW_SCHEMA
from tests.rows import ALICE, BOB, joined_row, owner_table


class MockUser:
    """Mock ORM-like user object."""

    def __init__(self, email: Optional[str]):
        self.email = email


class MockComment:
    def __init__(self, id: int, text: str, post_id: int, owner: MockUser):
        self.id = id
        self.text = text
        self.post_id = post_id
        self.owner_id = owner.email
        self.owner = owner


class MockPost:
    def __init__(self, id: int, title: str, blog_id: int, owner: MockUser):
        self.id = id
        self.title = title
        self.blog_id = blog_id
        self.owner_id = owner.email
        self.owner = owner
        self.comments: list[MockComment] = []


class MockBlog:
    def __init__(self, id: int, url: str, owner: MockUser):
        self.id = id
        self.url = url
        self.owner_id = owner.email
        self.owner = owner
        self.posts: list[MockPost] = []


def mock_blog(owner_email: str = ALICE) -> MockBlog:
    alice, bob = MockUser(owner_email), MockUser(BOB)
    blog = MockBlog(1, "https://blog1.com", alice)
    post = MockPost(1, "Post 1", 1, bob)
    post.comments.append(MockComment(1, "Comment 1", 1, alice))
    blog.posts.append(post)
    return blog


class TestOwnerContext:
    def test_owners_resolve_to_lookup_records(self):
        owners = owner_table()

        with owner_context(owners):
            blog = Blog.model_validate(mock_blog())

        assert blog.owner is owners[ALICE]
        assert blog.posts[0].owner is owners[BOB]
        assert blog.posts[0].comments[0].owner is owners[ALICE]

    def test_unknown_owner_raises(self):
        with owner_context(owner_table(BOB)):
            with pytest.raises(UnresolvedReferenceError) as exc_info:
                Blog.model_validate(mock_blog(owner_email="ghost@email.com"))

        assert exc_info.value.key == "ghost@email.com"
        assert exc_info.value.level == "blog"
        assert exc_info.value.target == "owner"

    def test_unknown_owner_names_the_referencing_level(self):
        blog = mock_blog()
        blog.posts[0].comments[0].owner = MockUser("ghost@email.com")
        blog.posts[0].comments[0].owner_id = "ghost@email.com"

        with owner_context(owner_table()):
            with pytest.raises(UnresolvedReferenceError) as exc_info:
                Blog.model_validate(blog)

        assert exc_info.value.level == "comment"
        assert "comment" in str(exc_info.value)

    def test_missing_owner_object_reports_owner_key(self):
        # An ORM relationship comes back empty when its owner row is gone.
        blog = mock_blog()
        blog.posts[0].owner = None
        blog.posts[0].owner_id = "ghost@email.com"

        with owner_context(owner_table()):
            with pytest.raises(UnresolvedReferenceError) as exc_info:
                Blog.model_validate(blog)

        assert exc_info.value.level == "post"
        assert exc_info.value.key == "ghost@email.com"

    def test_without_context_owners_are_validated_normally(self):
        blog = Blog.model_validate(mock_blog())

        assert blog.owner == Owner(email=ALICE)
        assert blog.posts[0].comments[0].text == "Comment 1"

    def test_context_is_reset_on_exit(self):
        with owner_context(owner_table(BOB)):
            pass

        # ALICE is not in the table used above, so this only works once reset
        assert Blog.model_validate(mock_blog()).owner.email == ALICE

    def test_owner_is_frozen(self):
        owner = Owner(email=ALICE)

        with pytest.raises(ValidationError):
            owner.email = BOB  # type: ignore[misc]


class TestStructuralEquality:
    def rows(self) -> list[dict]:
        return [
            joined_row(1, 1, 1),
            joined_row(1, 1, 2),
            joined_row(1, 2, 3),
            joined_row(2),
        ]

    def test_order_does_not_matter(self, owners):
        rows = self.rows()
        forward = materialize(rows, BLOG_ROW_SCHEMA, owners)
        backward = materialize(list(reversed(rows)), BLOG_ROW_SCHEMA, owners)

        assert forward != backward
        assert structurally_equal(forward, backward)

    def test_attribute_difference_is_detected(self, owners):
        rows = self.rows()
        changed = list(rows)
        changed[1] = joined_row(1, 1, 2, text="Edited")

        assert not structurally_equal(
            materialize(rows, BLOG_ROW_SCHEMA, owners),
            materialize(changed, BLOG_ROW_SCHEMA, owners),
        )

    def test_membership_difference_is_detected(self, owners):
        rows = self.rows()
        moved = list(rows)
        moved[2] = joined_row(2, 2, 3)

        assert not structurally_equal(
            materialize(rows, BLOG_ROW_SCHEMA, owners),
            materialize(moved, BLOG_ROW_SCHEMA, owners),
        )

    def test_signature_shape(self, owners):
        graph = materialize(self.rows(), BLOG_ROW_SCHEMA, owners)

        signature = graph_signature(graph)

        assert set(signature) == {1, 2}
        assert set(signature[1]["posts"]) == {1, 2}
        assert set(signature[1]["posts"][1]["comments"]) == {1, 2}
        assert signature[1]["owner"] == {"email": ALICE}
        assert count_entities(graph) == 2 + 2 + 3
