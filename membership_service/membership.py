"""
Membership tiers and their per-content-type ceilings.

Three fixed tiers exist. Each tier has one ceiling for articles and one for
videos; a ceiling is either bounded by a whole number or unbounded.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional


class MembershipType(Enum):
    """Membership tiers, from most to least restrictive."""
    A = "A"
    B = "B"
    C = "C"

    @property
    def display_name(self) -> str:
        return MEMBERSHIP_NAMES[self]

    @classmethod
    def parse(cls, value) -> "MembershipType":
        """Accept an enum member or its string value (case-insensitive)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(f"Unknown membership type: {value!r}")


DEFAULT_MEMBERSHIP_TYPE = MembershipType.A

MEMBERSHIP_NAMES = {
    MembershipType.A: "Basic",
    MembershipType.B: "Standard",
    MembershipType.C: "Premium",
}


class ContentType(Enum):
    """Kinds of quota-gated content."""
    ARTICLE = "article"
    VIDEO = "video"

    @classmethod
    def parse(cls, value) -> "ContentType":
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


@dataclass(frozen=True)
class Ceiling:
    """
    Upper bound on distinct items a tier may view.

    ``limit`` is None for an unbounded ceiling. Use ``Ceiling.bounded(n)`` or
    ``Ceiling.unbounded()`` rather than the constructor.
    """
    limit: Optional[int] = None

    @classmethod
    def bounded(cls, limit: int) -> "Ceiling":
        if limit < 0:
            raise ValueError("Ceiling cannot be negative")
        return cls(limit=int(limit))

    @classmethod
    def unbounded(cls) -> "Ceiling":
        return cls(limit=None)

    @classmethod
    def from_config(cls, value) -> "Ceiling":
        """Build from a config value; None means unbounded."""
        if value is None:
            return cls.unbounded()
        return cls.bounded(int(value))

    @property
    def is_unbounded(self) -> bool:
        return self.limit is None

    def is_reached(self, count: int) -> bool:
        """True when ``count`` items already fill the ceiling."""
        if self.is_unbounded:
            return False
        return count >= self.limit

    def remaining(self, count: int) -> Optional[int]:
        """Items left after ``count``; None when unbounded."""
        if self.is_unbounded:
            return None
        return max(0, self.limit - count)

    def to_json(self) -> Optional[int]:
        return self.limit

    def __str__(self) -> str:
        return "unbounded" if self.is_unbounded else str(self.limit)


@dataclass(frozen=True)
class TierLimits:
    """Ceilings for a single tier."""
    articles: Ceiling
    videos: Ceiling

    def for_content(self, content_type: ContentType) -> Ceiling:
        if content_type == ContentType.ARTICLE:
            return self.articles
        return self.videos


class MembershipLimits:
    """Immutable tier -> ceilings table."""

    def __init__(self, table: Mapping[MembershipType, TierLimits]):
        missing = [t.value for t in MembershipType if t not in table]
        if missing:
            raise ValueError(f"Missing limits for membership types: {', '.join(missing)}")
        self._table = MappingProxyType(dict(table))

    @classmethod
    def default(cls) -> "MembershipLimits":
        return cls({
            MembershipType.A: TierLimits(Ceiling.bounded(3), Ceiling.bounded(3)),
            MembershipType.B: TierLimits(Ceiling.bounded(10), Ceiling.bounded(10)),
            MembershipType.C: TierLimits(Ceiling.unbounded(), Ceiling.unbounded()),
        })

    @classmethod
    def from_dict(cls, data: Dict[str, Dict[str, Optional[int]]]) -> "MembershipLimits":
        """
        Build from ``{"A": {"articles": 3, "videos": 3}, ...}``.

        A null ceiling means unbounded. Tiers absent from ``data`` keep their
        default ceilings.
        """
        table = dict(cls.default()._table)
        for key, limits in (data or {}).items():
            tier = MembershipType.parse(key)
            current = table[tier]
            table[tier] = TierLimits(
                articles=Ceiling.from_config(limits["articles"]) if "articles" in limits else current.articles,
                videos=Ceiling.from_config(limits["videos"]) if "videos" in limits else current.videos,
            )
        return cls(table)

    def for_tier(self, membership_type: MembershipType) -> TierLimits:
        return self._table[membership_type]

    def ceiling(self, membership_type: MembershipType, content_type: ContentType) -> Ceiling:
        return self._table[membership_type].for_content(content_type)

    def has_unlimited_access(self, membership_type: MembershipType, content_type: ContentType) -> bool:
        return self.ceiling(membership_type, content_type).is_unbounded

    def to_dict(self) -> dict:
        return {
            tier.value: {
                "name": tier.display_name,
                "articles": limits.articles.to_json(),
                "videos": limits.videos.to_json(),
            }
            for tier, limits in self._table.items()
        }
