from __future__ import annotations

from sqlalchemy import Executable, text

from coagula.strategies.single import SingleJoinStrategy

BLOG_JOIN_SQL = """
    SELECT
        b.id AS blog_id, b.url AS blog_url, b.owner_id AS blog_owner_id,
        p.id AS post_id, p.title AS post_title, p.blog_id AS post_blog_id,
        p.owner_id AS post_owner_id,
        c.id AS comment_id, c.text AS comment_text, c.post_id AS comment_post_id,
        c.owner_id AS comment_owner_id
    FROM blogs b
    LEFT JOIN posts p ON b.id = p.blog_id
    LEFT JOIN comments c ON p.id = c.post_id
    ORDER BY b.id, p.id, c.id
"""


class RawSqlStrategy(SingleJoinStrategy):
    """The same join as ``single-join``, written by hand.

    Materialized by the same schema and materializer, so any difference in the
    resulting graph comes from the rows and not from the code folding them.
    """

    name = "raw-sql"
    description = "Raw SQL - hand written join of posts & comments"
    baseline = True

    def statement(self) -> Executable:
        return text(BLOG_JOIN_SQL)
