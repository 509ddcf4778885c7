from __future__ import annotations

from typing import Any, Optional

from coagula.lookup import LookupTable
from coagula.records import Owner
from coagula.schema import BLOG_COLUMNS

ALICE = "user1@email.com"
BOB = "user2@email.com"


def owner_table(*emails: str) -> LookupTable[str, Owner]:
    emails = emails or (ALICE, BOB)
    return LookupTable.build(
        (Owner(email=email) for email in emails), key=lambda owner: owner.email
    )


def joined_row(
    blog_id: Optional[int],
    post_id: Optional[int] = None,
    comment_id: Optional[int] = None,
    *,
    url: Optional[str] = None,
    title: Optional[str] = None,
    text: Optional[str] = None,
    blog_owner: Optional[str] = ALICE,
    post_owner: Optional[str] = BOB,
    comment_owner: Optional[str] = ALICE,
) -> dict[str, Any]:
    """A row shaped like the blog/post/comment LEFT JOIN."""
    row: dict[str, Any] = dict.fromkeys(BLOG_COLUMNS)
    if blog_id is not None:
        row.update(
            blog_id=blog_id,
            blog_url=url or f"https://blog{blog_id}.com",
            blog_owner_id=blog_owner,
        )
    if post_id is not None:
        row.update(
            post_id=post_id,
            post_title=title or f"Post {post_id}",
            post_blog_id=blog_id,
            post_owner_id=post_owner,
        )
    if comment_id is not None:
        row.update(
            comment_id=comment_id,
            comment_text=text or f"Comment {comment_id}",
            comment_post_id=post_id,
            comment_owner_id=comment_owner,
        )
    return row
