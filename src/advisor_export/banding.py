"""Rank banding and the display projection shared by the XLSX and PDF exports."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Any, NamedTuple

from advisor_export.models import AdvisorRecord

# ── Palette (hex RGB, no leading '#') ────────────────────────────

BRAND_PURPLE = "662D91"
TITLE_BAND = "F6F2FF"
WHITE = "FFFFFF"
BLACK = "000000"

TOP_RANK_LIMIT = 3
UPPER_RANK_LIMIT = 10

DISPLAY_HEADERS: list[str] = [
    "#",
    "Advisor Code",
    "Advisor Name",
    "Status",
    "No of Policies",
    "Annualized New Business Premium (RS)",
]

# "left" / "center" / "right" per display column
COLUMN_ALIGNMENT: list[str] = ["center", "center", "left", "center", "center", "right"]

NAME_WORD_LIMIT = 4


class TierStyle(NamedTuple):
    fill: str
    text: str


class BandTier(str, Enum):
    """Cosmetic row bucket, assigned by rank alone."""

    top = "A"
    upper = "B"
    rest = "C"

    @property
    def style(self) -> TierStyle:
        return _TIER_STYLES[self]


_TIER_STYLES: dict[BandTier, TierStyle] = {
    BandTier.top: TierStyle(fill="FF0000", text=WHITE),
    BandTier.upper: TierStyle(fill="ADD8E6", text=BLACK),
    BandTier.rest: TierStyle(fill="90EE90", text=BLACK),
}


def band_tier(rank: int) -> BandTier:
    """Return the tier for a 1-based *rank*."""
    if rank < 1:
        raise ValueError(f"rank must be >= 1, got {rank}")
    if rank <= TOP_RANK_LIMIT:
        return BandTier.top
    if rank <= UPPER_RANK_LIMIT:
        return BandTier.upper
    return BandTier.rest


def truncate_name(name: str, words: int = NAME_WORD_LIMIT) -> str:
    """Keep the first *words* whitespace-separated words of *name*."""
    return " ".join(name.split()[:words])


def format_premium(value: float) -> str:
    """Render an amount with thousands separators and at most three decimals."""
    rounded = round(float(value), 3)
    if rounded.is_integer():
        return f"{int(rounded):,}"
    return f"{rounded:,.3f}".rstrip("0").rstrip(".")


def display_rows(records: Sequence[AdvisorRecord]) -> list[list[Any]]:
    """Project already-sorted records onto the six display columns."""
    return [
        [
            rank,
            rec.advisor_code,
            rec.advisor_name,
            rec.advisor_status,
            rec.no_of_policies,
            rec.annualized_premium,
        ]
        for rank, rec in enumerate(records, start=1)
    ]


def tier_spans(row_count: int) -> list[tuple[BandTier, int, int]]:
    """Group ranks ``1..row_count`` into contiguous ``(tier, first, last)`` spans."""
    spans: list[tuple[BandTier, int, int]] = []
    for rank in range(1, row_count + 1):
        tier = band_tier(rank)
        if spans and spans[-1][0] is tier:
            spans[-1] = (tier, spans[-1][1], rank)
        else:
            spans.append((tier, rank, rank))
    return spans
