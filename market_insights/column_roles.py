"""
Column-role resolution for unlabeled marketing exports.

Exports name the same concept a dozen ways ("Page Title", "page_url",
"Form Submissions (30d)"). Each semantic role has a priority-ordered list of
candidate phrases; headers and candidates are compared after normalization
(lower-case, alphanumerics only).

Matching policy: candidates are tried in order, and for each candidate an
exact normalized match anywhere in the header list is preferred over a
substring match. The first candidate with any match wins, even if a later
candidate would have matched another header exactly.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

ROLE_LABEL = "label"
ROLE_TRAFFIC = "traffic"
ROLE_CONVERSION = "conversion"

# (role, candidate phrases), most specific first
ROLE_CANDIDATES: tuple[tuple[str, tuple[str, ...]], ...] = (
    (ROLE_LABEL, (
        "page",
        "page title",
        "title",
        "url",
        "page url",
        "campaign",
        "source",
        "name",
    )),
    (ROLE_TRAFFIC, (
        "sessions",
        "visits",
        "pageviews",
        "views",
    )),
    (ROLE_CONVERSION, (
        "submissions",
        "conversions",
        "contacts",
        "new contacts",
        "form submissions",
    )),
)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


@dataclass(frozen=True)
class ColumnRoleAssignment:
    """Header chosen for each role, or None when nothing matched."""

    label: str | None = None
    traffic: str | None = None
    conversion: str | None = None

    def as_dict(self) -> dict[str, str | None]:
        return {
            ROLE_LABEL: self.label,
            ROLE_TRAFFIC: self.traffic,
            ROLE_CONVERSION: self.conversion,
        }


def normalize_header(header: str) -> str:
    """Lower-case and drop every character outside [a-z0-9]."""
    return _NON_ALNUM.sub("", header.lower())


def candidates_for(role: str) -> tuple[str, ...]:
    for name, candidates in ROLE_CANDIDATES:
        if name == role:
            return candidates
    raise KeyError(f"Unknown column role: {role}")


def resolve_role(headers: Sequence[str], candidates: Sequence[str]) -> str | None:
    """
    Return the header matching the highest-priority candidate, or None.

    Args:
        headers: Header names in source order.
        candidates: Candidate phrases in priority order.
    """
    normalized = [(normalize_header(header), header) for header in headers]

    for candidate in candidates:
        target = normalize_header(candidate)
        if not target:
            continue

        for key, header in normalized:
            if key == target:
                return header

        for key, header in normalized:
            if target in key:
                return header

    return None


def resolve_roles(headers: Sequence[str]) -> ColumnRoleAssignment:
    """
    Resolve label, traffic and conversion columns for a header list.

    The label role falls back to the first header when no candidate matches,
    so any non-empty table gets some row identity.
    """
    resolved = {role: resolve_role(headers, candidates) for role, candidates in ROLE_CANDIDATES}

    label = resolved[ROLE_LABEL]
    if label is None and len(headers) > 0:
        label = headers[0]

    return ColumnRoleAssignment(
        label=label,
        traffic=resolved[ROLE_TRAFFIC],
        conversion=resolved[ROLE_CONVERSION],
    )
