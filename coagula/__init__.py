"""
coagula - Rebuild nested object graphs from flat joined rows.

Folds the fanned-out row stream of a multi level LEFT JOIN back into a
deduplicated, ordered parent -> child -> grandchild graph in one pass, and
compares that against split per level loading and ORM eager loading.
"""

__version__ = "0.1.0"
__author__ = "coagula"
__email__ = "coagula@example.com"

from coagula.errors import (
    MalformedRowError,
    MaterializationError,
    UnresolvedReferenceError,
)
from coagula.lookup import LookupTable
from coagula.materializer import Materializer, link, materialize
from coagula.schema import BLOG_ROW_SCHEMA, SPLIT_SCHEMAS, Level, RowSchema

__all__ = [
    "LookupTable",
    "Level",
    "RowSchema",
    "BLOG_ROW_SCHEMA",
    "SPLIT_SCHEMAS",
    "Materializer",
    "materialize",
    "link",
    "MaterializationError",
    "MalformedRowError",
    "UnresolvedReferenceError",
]
