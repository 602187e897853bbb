"""
XP, levels, streaks and achievements.

All mutators work on a ``User`` row in place and leave committing to the
caller. JSON columns are reassigned, never mutated, so SQLAlchemy notices
the change.
"""
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from medlearn.models.user import User

logger = logging.getLogger(__name__)

XP_PER_LEVEL = 100
DAILY_GOAL_BONUS_XP = 20
PERFECT_QUIZ_BONUS_XP = 25
PERFECT_QUIZ_MIN_QUESTIONS = 5
ACCURACY_MIN_CARDS = 100

# (threshold, id, name, description, icon)
XP_MILESTONES = [
    (100, "xp-100", "Beginner Learner", "Earn 100 XP", "🌱"),
    (500, "xp-500", "Dedicated Student", "Earn 500 XP", "📚"),
    (1000, "xp-1000", "Knowledge Seeker", "Earn 1,000 XP", "🔍"),
    (5000, "xp-5000", "Medical Scholar", "Earn 5,000 XP", "🧠"),
    (10000, "xp-10000", "Future Doctor", "Earn 10,000 XP", "⚕️"),
]

LEVEL_MILESTONES = [
    (5, "level-5", "Rising Star", "Reach level 5", "⭐"),
    (10, "level-10", "Dedicated Learner", "Reach level 10", "🌟"),
    (25, "level-25", "Medical Expert", "Reach level 25", "🏆"),
    (50, "level-50", "Medical Virtuoso", "Reach level 50", "👨‍⚕️"),
    (100, "level-100", "Medical Legend", "Reach level 100", "🌠"),
]

CARD_MILESTONES = [
    (10, "cards-10", "Getting Started", "Study 10 flashcards", "🔄"),
    (100, "cards-100", "Learning Basics", "Study 100 flashcards", "📝"),
    (500, "cards-500", "Memory Master", "Study 500 flashcards", "🧠"),
    (1000, "cards-1000", "Study Champion", "Study 1,000 flashcards", "🏅"),
    (5000, "cards-5000", "Flashcard Legend", "Study 5,000 flashcards", "👑"),
]

ACCURACY_MILESTONES = [
    (70, "accuracy-70", "Above Average", "Maintain 70% accuracy after 100+ cards", "📈"),
    (80, "accuracy-80", "High Performer", "Maintain 80% accuracy after 100+ cards", "📊"),
    (90, "accuracy-90", "Excellence", "Maintain 90% accuracy after 100+ cards", "🎯"),
    (95, "accuracy-95", "Near Perfect", "Maintain 95% accuracy after 100+ cards", "⭐"),
    (100, "accuracy-100", "Perfect Recall", "Maintain 100% accuracy after 100+ cards", "🌟"),
]

QUIZ_MILESTONES = [
    (1, "quiz-1", "Quiz Taker", "Complete your first quiz", "📝"),
    (10, "quiz-10", "Quiz Regular", "Complete 10 quizzes", "📊"),
    (50, "quiz-50", "Quiz Expert", "Complete 50 quizzes", "🧩"),
    (100, "quiz-100", "Quiz Master", "Complete 100 quizzes", "🏆"),
]

STUDY_TIME_MILESTONES = [
    (60, "time-60", "Hour Scholar", "Study for 1 hour", "⏱️"),
    (300, "time-300", "Dedicated Learner", "Study for 5 hours", "⏰"),
    (600, "time-600", "Study Enthusiast", "Study for 10 hours", "⌚"),
    (1200, "time-1200", "Knowledge Devotee", "Study for 20 hours", "📚"),
    (3000, "time-3000", "Medical Scholar", "Study for 50 hours", "👨‍⚕️"),
]

STREAK_MILESTONES = [
    (3, "streak-3", "On Fire", "Study 3 days in a row", "🔥"),
    (7, "streak-7", "Week Warrior", "Study 7 days in a row", "📅"),
    (30, "streak-30", "Monthly Dedication", "Study 30 days in a row", "📊"),
    (100, "streak-100", "Century Club", "Study 100 days in a row", "🌟"),
    (365, "streak-365", "Year of Knowledge", "Study 365 days in a row", "🏆"),
]

DAILY_GOAL_ACHIEVEMENT = ("daily-goal", "Goal Crusher", "Complete your daily study goal", "🎯")
PERFECT_QUIZ_ACHIEVEMENT = ("quiz-perfect", "Perfect Score", "Get all questions correct in a quiz", "🎯")


def level_for_xp(xp: int) -> int:
    return 1 + xp // XP_PER_LEVEL


def accuracy_percentage(correct: int, incorrect: int) -> int:
    total = correct + incorrect
    return round(correct / total * 100) if total > 0 else 0


def _unlocked_ids(user: User) -> set:
    return {a.get("id") for a in (user.achievements or [])}  # type: ignore


def _make_achievement(achievement_id: str, name: str, description: str, category: str, icon: str) -> Dict[str, Any]:
    return {
        "id": achievement_id,
        "name": name,
        "description": description,
        "category": category,
        "icon": icon,
        "unlocked_at": datetime.now().isoformat(),
    }


class _Progress:
    """Collects achievements unlocked during one operation."""

    def __init__(self, user: User):
        self.user = user
        self.unlocked = _unlocked_ids(user)
        self.new_achievements: List[Dict[str, Any]] = []

    def unlock(self, achievement_id: str, name: str, description: str, category: str, icon: str) -> bool:
        if achievement_id in self.unlocked:
            return False
        self.unlocked.add(achievement_id)
        self.new_achievements.append(_make_achievement(achievement_id, name, description, category, icon))
        return True

    def check_milestones(self, value: int, milestones: list, category: str) -> None:
        for threshold, achievement_id, name, description, icon in milestones:
            if value >= threshold:
                self.unlock(achievement_id, name, description, category, icon)

    def award_xp(self, amount: int) -> Dict[str, Any]:
        old_level = self.user.level or 1
        new_xp = (self.user.xp or 0) + amount
        new_level = level_for_xp(new_xp)
        self.user.xp = new_xp  # type: ignore
        self.user.level = new_level  # type: ignore
        self.check_milestones(new_xp, XP_MILESTONES, "xp")
        self.check_milestones(new_level, LEVEL_MILESTONES, "level")
        return {"gainedXP": amount, "newXP": new_xp, "newLevel": new_level, "leveledUp": new_level > old_level}

    def commit(self) -> List[Dict[str, Any]]:
        if self.new_achievements:
            self.user.achievements = list(self.user.achievements or []) + self.new_achievements  # type: ignore
            names = ", ".join(a["name"] for a in self.new_achievements)
            logger.info(f"User {self.user.id} unlocked achievements: {names}")
        return self.new_achievements


def _require_positive(value, field: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ValueError(f"{field} must be a positive number")


def add_xp(user: User, amount: int) -> Dict[str, Any]:
    """
    Grant XP and unlock any XP or level milestones.

    Raises:
        ValueError: If amount is not positive
    """
    _require_positive(amount, "amount")
    progress = _Progress(user)
    result = progress.award_xp(int(amount))
    result["newAchievements"] = progress.commit()
    return result


def _roll_daily_progress(user: User, today: date) -> None:
    if user.daily_progress_date != today:
        user.daily_progress = 0  # type: ignore
        user.daily_progress_date = today  # type: ignore


def record_flashcard_activity(user: User, is_correct: bool, today: Optional[date] = None) -> Dict[str, Any]:
    """Record one flashcard review: 5 XP when correct, 1 XP otherwise."""
    if not isinstance(is_correct, bool):
        raise ValueError("is_correct is required for flashcard activity")
    today = today or date.today()
    progress = _Progress(user)

    user.total_flashcards_reviewed = (user.total_flashcards_reviewed or 0) + 1  # type: ignore
    if is_correct:
        user.total_correct_answers = (user.total_correct_answers or 0) + 1  # type: ignore
    else:
        user.total_incorrect_answers = (user.total_incorrect_answers or 0) + 1  # type: ignore
    user.average_accuracy = accuracy_percentage(  # type: ignore
        user.total_correct_answers or 0, user.total_incorrect_answers or 0  # type: ignore
    )

    _roll_daily_progress(user, today)
    user.daily_progress = (user.daily_progress or 0) + 1  # type: ignore
    daily_goal_met = user.daily_progress >= (user.daily_goal or 10)

    gained = 5 if is_correct else 1
    progress.check_milestones(user.total_flashcards_reviewed, CARD_MILESTONES, "cards")  # type: ignore
    if user.total_flashcards_reviewed >= ACCURACY_MIN_CARDS:  # type: ignore
        progress.check_milestones(user.average_accuracy, ACCURACY_MILESTONES, "accuracy")  # type: ignore
    achievement_id, name, description, icon = DAILY_GOAL_ACHIEVEMENT
    if daily_goal_met and progress.unlock(achievement_id, name, description, "daily", icon):
        gained += DAILY_GOAL_BONUS_XP

    result = progress.award_xp(gained)
    result.update({
        "totalCardsStudied": user.total_flashcards_reviewed,
        "totalCorrectAnswers": user.total_correct_answers,
        "totalIncorrectAnswers": user.total_incorrect_answers,
        "averageAccuracy": user.average_accuracy,
        "dailyProgress": user.daily_progress,
        "dailyGoalMet": daily_goal_met,
        "newAchievements": progress.commit(),
    })
    return result


def record_quiz_activity(user: User, correct_answers: int, total_questions: int) -> Dict[str, Any]:
    """Record a finished quiz: 10 XP plus 5 XP per correct answer."""
    if not isinstance(correct_answers, int) or not isinstance(total_questions, int):
        raise ValueError("correct_answers and total_questions are required for quiz activity")
    if total_questions < 0 or correct_answers < 0 or correct_answers > total_questions:
        raise ValueError("correct_answers must be between 0 and total_questions")
    progress = _Progress(user)

    user.total_quizzes_completed = (user.total_quizzes_completed or 0) + 1  # type: ignore
    user.total_correct_answers = (user.total_correct_answers or 0) + correct_answers  # type: ignore
    user.total_incorrect_answers = (  # type: ignore
        (user.total_incorrect_answers or 0) + total_questions - correct_answers
    )
    user.average_accuracy = accuracy_percentage(  # type: ignore
        user.total_correct_answers or 0, user.total_incorrect_answers or 0  # type: ignore
    )

    gained = 10 + 5 * correct_answers
    progress.check_milestones(user.total_quizzes_completed, QUIZ_MILESTONES, "quiz")  # type: ignore
    is_perfect = correct_answers == total_questions and total_questions >= PERFECT_QUIZ_MIN_QUESTIONS
    achievement_id, name, description, icon = PERFECT_QUIZ_ACHIEVEMENT
    if is_perfect and progress.unlock(achievement_id, name, description, "quiz", icon):
        gained += PERFECT_QUIZ_BONUS_XP

    result = progress.award_xp(gained)
    result.update({
        "totalQuizzesTaken": user.total_quizzes_completed,
        "totalCorrectAnswers": user.total_correct_answers,
        "totalIncorrectAnswers": user.total_incorrect_answers,
        "averageAccuracy": user.average_accuracy,
        "newAchievements": progress.commit(),
    })
    return result


def record_study_time(user: User, minutes: int) -> Dict[str, Any]:
    """Add study minutes; each minute is worth 1 XP."""
    _require_positive(minutes, "minutes")
    minutes = int(minutes)
    progress = _Progress(user)

    user.study_time = (user.study_time or 0) + minutes  # type: ignore
    progress.check_milestones(user.study_time, STUDY_TIME_MILESTONES, "time")  # type: ignore

    result = progress.award_xp(minutes)
    result.update({
        "studyTime": user.study_time,
        "newAchievements": progress.commit(),
    })
    return result


def update_streak(user: User, today: Optional[date] = None) -> Dict[str, Any]:
    """
    Update the daily study streak.

    A gap of exactly one day extends the streak, a longer gap (or no previous
    activity) restarts it at 1, and repeated activity on the same day leaves
    it unchanged.
    """
    today = today or date.today()
    last = user.last_activity_date
    current = user.current_streak or 0

    if last is None:
        current = 1
    else:
        gap = (today - last).days  # type: ignore
        if gap == 1:
            current += 1
        elif gap > 1:
            current = 1
        elif current == 0:
            current = 1

    user.current_streak = current  # type: ignore
    user.longest_streak = max(user.longest_streak or 0, current)  # type: ignore
    user.last_activity_date = today  # type: ignore

    progress = _Progress(user)
    progress.check_milestones(current, STREAK_MILESTONES, "streak")
    return {
        "currentStreak": user.current_streak,
        "longestStreak": user.longest_streak,
        "newAchievements": progress.commit(),
    }


def gamification_summary(user: User) -> Dict[str, Any]:
    return {
        "xp": user.xp,
        "level": user.level,
        "achievements": user.achievements or [],
        "currentStreak": user.current_streak,
        "longestStreak": user.longest_streak,
        "lastActivityDate": user.last_activity_date,
        "dailyGoal": user.daily_goal,
        "dailyProgress": user.daily_progress if user.daily_progress_date == date.today() else 0,
        "totalFlashcardsReviewed": user.total_flashcards_reviewed,
        "totalQuizzesCompleted": user.total_quizzes_completed,
        "totalCorrectAnswers": user.total_correct_answers,
        "totalIncorrectAnswers": user.total_incorrect_answers,
        "averageAccuracy": user.average_accuracy,
        "studyTime": user.study_time,
    }
