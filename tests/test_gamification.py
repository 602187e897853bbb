from datetime import date, timedelta

import pytest

from medlearn.models.user import User
from medlearn.services import gamification


def new_user(**overrides):
    fields = dict(
        xp=0, level=1, achievements=[], current_streak=0, longest_streak=0,
        daily_goal=10, daily_progress=0, total_flashcards_reviewed=0,
        total_quizzes_completed=0, total_correct_answers=0, total_incorrect_answers=0,
        average_accuracy=0, study_time=0,
    )
    fields.update(overrides)
    return User(id=1, email="u@example.com", **fields)


def achievement_ids(user):
    return [a["id"] for a in user.achievements]


def test_level_for_xp():
    assert gamification.level_for_xp(0) == 1
    assert gamification.level_for_xp(99) == 1
    assert gamification.level_for_xp(100) == 2
    assert gamification.level_for_xp(450) == 5


def test_add_xp_unlocks_xp_and_level_milestones():
    user = new_user()
    result = gamification.add_xp(user, 450)
    assert result["newLevel"] == 5
    assert result["leveledUp"] is True
    assert achievement_ids(user) == ["xp-100", "level-5"]

    # Already unlocked achievements are not granted twice
    result = gamification.add_xp(user, 10)
    assert result["newAchievements"] == []
    assert result["leveledUp"] is False


@pytest.mark.parametrize("amount", [0, -5, True, "10"])
def test_add_xp_rejects_invalid_amount(amount):
    with pytest.raises(ValueError):
        gamification.add_xp(new_user(), amount)


def test_flashcard_activity_daily_goal_bonus_once():
    user = new_user()
    today = date(2026, 4, 1)
    for _ in range(9):
        gamification.record_flashcard_activity(user, True, today=today)
    result = gamification.record_flashcard_activity(user, True, today=today)

    assert result["dailyGoalMet"] is True
    assert result["gainedXP"] == 5 + gamification.DAILY_GOAL_BONUS_XP
    assert "daily-goal" in achievement_ids(user)
    assert "cards-10" in achievement_ids(user)

    result = gamification.record_flashcard_activity(user, False, today=today)
    assert result["gainedXP"] == 1
    assert result["averageAccuracy"] == round(10 / 11 * 100)


def test_daily_progress_resets_on_new_day():
    user = new_user()
    gamification.record_flashcard_activity(user, True, today=date(2026, 4, 1))
    result = gamification.record_flashcard_activity(user, True, today=date(2026, 4, 2))
    assert result["dailyProgress"] == 1


def test_perfect_quiz_bonus():
    user = new_user()
    result = gamification.record_quiz_activity(user, 5, 5)
    assert result["gainedXP"] == 10 + 25 + gamification.PERFECT_QUIZ_BONUS_XP
    assert achievement_ids(user) == ["quiz-1", "quiz-perfect"]


def test_short_perfect_quiz_gets_no_bonus():
    user = new_user()
    result = gamification.record_quiz_activity(user, 2, 2)
    assert result["gainedXP"] == 20
    assert "quiz-perfect" not in achievement_ids(user)


def test_quiz_activity_rejects_impossible_score():
    with pytest.raises(ValueError):
        gamification.record_quiz_activity(new_user(), 6, 5)


def test_streak_extends_resets_and_holds():
    user = new_user()
    day = date(2026, 4, 1)

    assert gamification.update_streak(user, today=day)["currentStreak"] == 1
    assert gamification.update_streak(user, today=day)["currentStreak"] == 1
    assert gamification.update_streak(user, today=day + timedelta(days=1))["currentStreak"] == 2
    result = gamification.update_streak(user, today=day + timedelta(days=2))
    assert result["currentStreak"] == 3
    assert [a["id"] for a in result["newAchievements"]] == ["streak-3"]

    result = gamification.update_streak(user, today=day + timedelta(days=10))
    assert result["currentStreak"] == 1
    assert result["longestStreak"] == 3


def test_study_time_awards_xp():
    user = new_user()
    result = gamification.record_study_time(user, 120)
    assert result["studyTime"] == 120
    assert user.xp == 120
    assert "time-60" in achievement_ids(user)
    assert "xp-100" in achievement_ids(user)
