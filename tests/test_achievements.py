from partyconnect.domain.models import Profile
from partyconnect.features.achievements import (
    ACHIEVEMENTS,
    achievement_badges,
    achievements_for,
    has_earned,
)


def test_counts_drive_achievements():
    profile = {
        "createdEvents": ["a", "b", "c"],
        "joinedEvents": ["x"],
        "sponsoredEvents": [],
        "positiveRatings": 0,
        "successfulEvents": 0,
    }

    earned = [a.name for a in achievements_for(profile)]

    assert "Community Leader" in earned
    assert "Social Butterfly" not in earned
    assert earned == ["Community Leader"]


def test_every_achievement_in_table_order():
    profile = Profile(
        created_events=["a", "b", "c"],
        joined_events=["1", "2", "3", "4", "5"],
        sponsored_events=["s"],
        positive_ratings=10,
        successful_events=10,
    )

    assert [a.id for a in achievements_for(profile)] == [a.id for a in ACHIEVEMENTS]
    assert [a.id for a in ACHIEVEMENTS] == [
        "first-time-sponsor",
        "community-leader",
        "social-butterfly",
        "top-contributor",
        "event-master",
    ]


def test_thresholds_are_inclusive_and_strict_below():
    assert has_earned(Profile(positive_ratings=10), "top-contributor")
    assert not has_earned(Profile(positive_ratings=9), "top-contributor")
    assert has_earned(Profile(successful_events=10), "event-master")
    assert not has_earned(Profile(joined_events=["1", "2", "3", "4"]), "social-butterfly")


def test_missing_or_empty_counters_earn_nothing():
    assert achievements_for({}) == []
    assert achievements_for({"createdEvents": None, "positiveRatings": None}) == []
    assert achievements_for(Profile()) == []
    assert achievements_for(None) == []


def test_snake_case_mapping_is_accepted():
    assert has_earned({"sponsored_events": ["e1"]}, "first-time-sponsor")


def test_unknown_achievement_id_is_never_earned():
    assert not has_earned(Profile(sponsored_events=["e1"]), "does-not-exist")
    assert not has_earned(None, "first-time-sponsor")


def test_badges_carry_display_fields():
    (badge,) = achievement_badges(Profile(sponsored_events=["e1"]))

    assert badge.id == "first-time-sponsor"
    assert badge.name == "First Time Sponsor"
    assert badge.icon == "🎉"
    assert badge.color.startswith("bg-")
