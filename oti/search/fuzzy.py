"""
Fuzzy query construction.

Turns a raw search value into the Lucene fuzzy query run against the
Neo4j fulltext indexes: the term is escaped, lower-cased for the
analysed fulltext indexes and kept as typed for the keyword-analysed
exact indexes, and the allowed edit distance is derived from the raw
value.
"""

import re
from dataclasses import dataclass

# Characters reserved by the Lucene classic query parser
_LUCENE_SPECIAL = re.compile(r'([\\+\-!():^\[\]"{}~*?|&/])')
_WHITESPACE = re.compile(r"(\s)")
_IDENTIFIER_HINT = re.compile(r"[\d_]")

# Lucene caps fuzzy matching at two edits
MAX_EDITS = 2


def escape_query(text: str) -> str:
    """Backslash-escape Lucene reserved characters and whitespace."""
    return _WHITESPACE.sub(r"\\\1", _LUCENE_SPECIAL.sub(r"\\\1", text))


def allowed_edits(raw_value: str) -> int:
    """Number of edits tolerated for ``raw_value``.

    Short values must match exactly; identifier-like values (containing
    a digit or an underscore) get one edit fewer than free text.
    """
    length = len(raw_value)
    if length <= 3:
        edits = 0
    elif length <= 6:
        edits = 1
    else:
        edits = MAX_EDITS
    if _IDENTIFIER_HINT.search(raw_value):
        edits -= 1
    return max(edits, 0)


def min_identity(raw_value: str) -> float:
    """Minimum similarity, in [0, 1], a match must have with ``raw_value``."""
    if not raw_value:
        return 1.0
    length = len(raw_value)
    return (length - allowed_edits(raw_value)) / length


@dataclass(frozen=True)
class FuzzyQuery:
    """A property-scoped fuzzy term query."""

    property_name: str
    term: str
    min_identity: float
    max_edits: int
    # escaped, original case
    exact_term: str

    def to_lucene(self, preserve_case: bool = False) -> str:
        """Render as a Lucene query string.

        ``preserve_case`` selects the term for indexes whose analyser keeps
        the stored case (the ``keyword`` analyser does not lower-case).
        """
        field = escape_query(self.property_name)
        term = self.exact_term if preserve_case else self.term
        if self.max_edits == 0:
            return f"{field}:{term}"
        return f"{field}:{term}~{self.max_edits}"


def build_fuzzy_query(property_name: str, raw_value: str) -> FuzzyQuery:
    """Build the normalised query for ``raw_value``.

    The threshold is computed from the raw value, before lower-casing and
    escaping.
    """
    return FuzzyQuery(
        property_name=property_name,
        term=escape_query(raw_value.lower()),
        exact_term=escape_query(raw_value),
        min_identity=min_identity(raw_value),
        max_edits=allowed_edits(raw_value),
    )
