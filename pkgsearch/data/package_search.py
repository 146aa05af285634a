"""
Ranked name search over the packages table.
"""
from __future__ import annotations

import logging
from typing import List

from pkgsearch.domain.errors import ValidationError
from pkgsearch.domain.models import PackageRecord
from pkgsearch.storage.index_handle import IndexHandle

logger = logging.getLogger(__name__)

MAX_RESULTS = 50

# Rank 1 = exact name, 2 = prefix, 3 = substring. A row that matches several
# tiers is kept only under its lowest rank.
_RANKED_SEARCH_SQL = """
    SELECT name, version, MIN(tier) AS best_tier FROM (
        SELECT name, version, 1 AS tier
        FROM packages
        WHERE name = ?

        UNION ALL

        SELECT name, version, 2 AS tier
        FROM packages
        WHERE {prefix_match}

        UNION ALL

        SELECT name, version, 3 AS tier
        FROM packages
        WHERE {substring_match}
    )
    GROUP BY name, version
    ORDER BY best_tier, name, version
    LIMIT ?
"""

RANKED_SEARCH_SQL = _RANKED_SEARCH_SQL.format(
    prefix_match="name LIKE ?",
    substring_match="name LIKE ?",
)

# Plain string comparison: wildcards match themselves and no pragma is
# needed for case sensitivity.
RANKED_SEARCH_LITERAL_SQL = _RANKED_SEARCH_SQL.format(
    prefix_match="substr(name, 1, length(?)) = ?",
    substring_match="instr(name, ?) > 0",
)


def search_packages(
    index: IndexHandle,
    q: str | None,
    escape_wildcards: bool = False,
    limit: int = MAX_RESULTS,
) -> List[PackageRecord]:
    """
    Return packages whose name matches ``q``, best matches first.

    Unless ``escape_wildcards`` is set, '%' and '_' inside ``q`` keep their
    LIKE meaning.

    Raises:
        ValidationError: ``q`` is missing or empty.
        QueryError: the index failed to answer.
    """
    if not q:
        raise ValidationError("missing query ?q=")

    limit = max(0, min(limit, MAX_RESULTS))

    if escape_wildcards:
        rows = index.query(RANKED_SEARCH_LITERAL_SQL, (q, q, q, q, limit))
    else:
        rows = index.query(RANKED_SEARCH_SQL, (q, f"{q}%", f"%{q}%", limit))
    logger.debug(f"Search {q!r} returned {len(rows)} rows")

    return [
        PackageRecord(
            name=str(name) if name is not None else "",
            version=str(version) if version is not None else "",
        )
        for name, version, _tier in rows
    ]
