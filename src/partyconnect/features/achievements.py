# src/partyconnect/features/achievements.py
"""
Achievement engine.

Achievements are a fixed table of badges, each with a predicate over the profile's
counters. Evaluation is pure: it reads a profile (a `Profile` model or a plain mapping
with camelCase or snake_case keys) and returns the earned badges in table order.
Missing counters count as zero, so an empty profile earns nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping

from partyconnect.domain.models import AchievementBadge, Profile

ProfileLike = Profile | Mapping[str, Any]


def _read(profile: ProfileLike, snake: str, camel: str) -> Any:
    if isinstance(profile, Profile):
        return getattr(profile, snake)
    if snake in profile:
        return profile[snake]
    return profile.get(camel)


def _count(profile: ProfileLike, snake: str, camel: str) -> int:
    value = _read(profile, snake, camel)
    if not value:
        return 0
    if isinstance(value, (int, float)):
        return int(value)
    try:
        return len(value)
    except TypeError:
        return 0


@dataclass(frozen=True)
class Achievement:
    id: str
    name: str
    description: str
    icon: str
    color: str
    criteria: Callable[[ProfileLike], bool]

    def badge(self) -> AchievementBadge:
        return AchievementBadge(
            id=self.id, name=self.name, description=self.description, icon=self.icon, color=self.color
        )


ACHIEVEMENTS: tuple[Achievement, ...] = (
    Achievement(
        id="first-time-sponsor",
        name="First Time Sponsor",
        description="Sponsored your first event",
        icon="🎉",
        color="bg-blue-100 text-blue-800",
        criteria=lambda p: _count(p, "sponsored_events", "sponsoredEvents") >= 1,
    ),
    Achievement(
        id="community-leader",
        name="Community Leader",
        description="Created 3 or more events",
        icon="👑",
        color="bg-purple-100 text-purple-800",
        criteria=lambda p: _count(p, "created_events", "createdEvents") >= 3,
    ),
    Achievement(
        id="social-butterfly",
        name="Social Butterfly",
        description="Joined 5 or more events",
        icon="🦋",
        color="bg-pink-100 text-pink-800",
        criteria=lambda p: _count(p, "joined_events", "joinedEvents") >= 5,
    ),
    Achievement(
        id="top-contributor",
        name="Top Contributor",
        description="Received 10 or more positive ratings",
        icon="⭐",
        color="bg-yellow-100 text-yellow-800",
        criteria=lambda p: _count(p, "positive_ratings", "positiveRatings") >= 10,
    ),
    Achievement(
        id="event-master",
        name="Event Master",
        description="Successfully organized 10 events",
        icon="🏆",
        color="bg-green-100 text-green-800",
        criteria=lambda p: _count(p, "successful_events", "successfulEvents") >= 10,
    ),
)


def achievements_for(profile: ProfileLike | None) -> list[Achievement]:
    """Earned achievements, in table order."""
    if profile is None:
        return []
    return [a for a in ACHIEVEMENTS if a.criteria(profile)]


def has_earned(profile: ProfileLike | None, achievement_id: str) -> bool:
    if profile is None:
        return False
    achievement = next((a for a in ACHIEVEMENTS if a.id == achievement_id), None)
    if achievement is None:
        return False
    return achievement.criteria(profile)


def achievement_badges(profile: ProfileLike | None) -> list[AchievementBadge]:
    return [a.badge() for a in achievements_for(profile)]
