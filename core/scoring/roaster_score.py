#!/usr/bin/env python3
"""
Roaster Fit Score v1

Additive score of how well a roaster fits a roast request:
- Experience: Beginner=10, Intermediate=20, Expert=30
- Rating: (rating / 5) * 25
- Specialty match: (matching specialties / request focus areas) * 30,
  0 when the request has no focus areas
- Level: rookie=2, verified=5, expert=8, master=10
- Completion rate: (completion_rate / 100) * 5

The result is rounded half-up to an integer. It is computed once when the
roaster applies and stored on the application; later profile changes never
touch a stored score.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, Optional, Protocol, runtime_checkable
import logging
import math

from core.config_loader import ScoringConfig

logger = logging.getLogger(__name__)

# ----------------------------
# Fallbacks for unknown enum values
# ----------------------------
DEFAULT_EXPERIENCE = 'Beginner'
DEFAULT_LEVEL = 'rookie'

MAX_RATING = 5.0
MAX_COMPLETION_RATE = 100.0


# ----------------------------
# Protocols (typing)
# ----------------------------
@runtime_checkable
class RoasterProfileProto(Protocol):
    specialties: Iterable[str]
    experience: str
    rating: float
    level: str
    completion_rate: float


@runtime_checkable
class RoastRequestProto(Protocol):
    focus_areas: Iterable[str]


@dataclass(frozen=True)
class ScoreBreakdown:
    experience: float
    rating: float
    specialty: float
    level: float
    completion: float

    @property
    def raw_total(self) -> float:
        return self.experience + self.rating + self.specialty + self.level + self.completion

    @property
    def total(self) -> int:
        return round_half_up(self.raw_total)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['total'] = self.total
        return data


# ----------------------------
# Helpers
# ----------------------------
def _clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


def _enum_value(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    return getattr(raw, 'value', raw)


def round_half_up(x: float) -> int:
    # round() would send 62.5 to 62
    return int(math.floor(x + 0.5))


def _points_for(table: Dict[str, float], raw: Any, default_key: str, name: str) -> float:
    key = _enum_value(raw)
    if key in table:
        return float(table[key])
    logger.debug("Unknown %s %r; scoring as %r", name, raw, default_key)
    return float(table.get(default_key, 0.0))


def _specialty_ratio(specialties: Iterable[str], focus_areas: Iterable[str]) -> float:
    focus = set(focus_areas or [])
    if not focus:
        return 0.0
    matching = focus.intersection(specialties or [])
    return len(matching) / len(focus)


# ----------------------------
# Public API
# ----------------------------
def score_breakdown(
    profile: RoasterProfileProto,
    request: RoastRequestProto,
    config: Optional[ScoringConfig] = None
) -> ScoreBreakdown:
    """Per-factor points for a roaster against a request."""
    config = config or ScoringConfig()

    experience = _points_for(config.experience_points, profile.experience, DEFAULT_EXPERIENCE, 'experience')
    level = _points_for(config.level_points, profile.level, DEFAULT_LEVEL, 'level')

    rating = _clamp(float(profile.rating or 0.0), 0.0, MAX_RATING)
    completion_rate = _clamp(float(profile.completion_rate or 0.0), 0.0, MAX_COMPLETION_RATE)

    return ScoreBreakdown(
        experience=experience,
        rating=(rating / MAX_RATING) * config.rating_max_points,
        specialty=_specialty_ratio(profile.specialties, request.focus_areas) * config.specialty_max_points,
        level=level,
        completion=(completion_rate / MAX_COMPLETION_RATE) * config.completion_max_points,
    )


def calculate_roaster_score(
    profile: RoasterProfileProto,
    request: RoastRequestProto,
    config: Optional[ScoringConfig] = None
) -> int:
    """Fit score in [0, 100] with the default weights. Pure function."""
    return score_breakdown(profile, request, config).total
