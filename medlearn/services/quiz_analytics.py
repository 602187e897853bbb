"""
Quiz analytics, recomputed from stored results on every read.
"""
from typing import Any, Dict, List, Optional, Sequence

from medlearn.models.quiz import QuizAttempt, QuizResult

RANKS = (
    (95, "Expert"),
    (80, "Advanced"),
    (60, "Intermediate"),
    (40, "Novice"),
)


def rank_for_percentile(percentile: int) -> str:
    for threshold, rank in RANKS:
        if percentile >= threshold:
            return rank
    return "Beginner"


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0


def _question_stats(question_ids: List[int], results: Sequence[QuizResult]) -> List[Dict[str, Any]]:
    stats = []
    for question_id in question_ids:
        answers = [
            a for r in results for a in (r.answers or [])  # type: ignore
            if str(a.get("question_id")) == str(question_id)
        ]
        if not answers:
            stats.append({
                "question_id": question_id,
                "success_rate": 0,
                "average_time_spent": 0,
                "skip_rate": 100,
            })
            continue

        correct = sum(1 for a in answers if a.get("is_correct"))
        timed = [a.get("time_spent") for a in answers if a.get("time_spent")]
        stats.append({
            "question_id": question_id,
            "success_rate": correct / len(answers) * 100,
            "average_time_spent": _mean(timed),
            "skip_rate": (len(answers) - len(timed)) / len(answers) * 100,
        })
    return stats


def compute_analytics(
    question_ids: List[int],
    results: Sequence[QuizResult],
    user_id: Optional[int],
    attempts: Sequence[QuizAttempt] = (),
) -> Dict[str, Any]:
    """
    Aggregate every result of one quiz and place ``user_id`` among them.

    Scores are compared as percentages so quizzes edited between attempts
    still rank fairly.

    Args:
        question_ids: Ids of the quiz's current questions
        results: All results recorded for the quiz
        user_id: User to compute performance for
        attempts: Started attempts, used for the completion rate

    Returns:
        Analytics dict
    """
    if not results:
        return {
            "total_attempts": 0,
            "completion_rate": 0,
            "average_score": 0,
            "average_time_spent": 0,
            "question_stats": [],
            "user_performance": None,
            "accuracy_trend": [],
        }

    scores = [r.percentage_score for r in results]
    times = [r.time_spent or 0 for r in results]

    if attempts:
        completed = sum(1 for a in attempts if a.is_complete)
        completion_rate = completed / len(attempts) * 100
    else:
        completion_rate = 100.0

    user_performance = None
    accuracy_trend: List[Dict[str, Any]] = []
    user_results = [r for r in results if r.user_id == user_id]
    if user_results:
        ordered = sorted(user_results, key=lambda r: r.completed_at)
        latest = ordered[-1]
        user_score = latest.percentage_score
        below = sum(1 for s in scores if s < user_score)
        percentile = round(below / len(scores) * 100)
        user_performance = {
            "percentile": percentile,
            "rank": rank_for_percentile(percentile),
            "fastest_time": (latest.time_spent or 0) == min(times),
            "highest_accuracy": user_score == max(scores),
        }
        accuracy_trend = [
            {"date": r.completed_at.isoformat(), "accuracy": r.percentage_score}
            for r in ordered
        ]

    return {
        "total_attempts": len(results),
        "completion_rate": completion_rate,
        "average_score": _mean(scores),
        "average_time_spent": _mean(times),
        "question_stats": _question_stats(question_ids, results),
        "user_performance": user_performance,
        "accuracy_trend": accuracy_trend,
    }


def user_result_stats(results: Sequence[QuizResult]) -> Dict[str, Any]:
    """Summary shown alongside a user's result history."""
    if not results:
        return {
            "total_quizzes_taken": 0,
            "average_score": 0,
            "total_time_spent": 0,
            "current_streak": 0,
        }
    latest = max(results, key=lambda r: r.completed_at)
    return {
        "total_quizzes_taken": len(results),
        "average_score": _mean([r.percentage_score for r in results]),
        "total_time_spent": sum(r.time_spent or 0 for r in results),
        "current_streak": latest.streak or 0,
    }


def improvement_since(previous: Optional[QuizResult], score: int, total_questions: int) -> Optional[str]:
    """Signed percentage-point change from the previous result, e.g. ``+10%``."""
    if previous is None or not previous.total_questions or not total_questions:
        return None
    delta = round((score / total_questions - previous.score / previous.total_questions) * 100)
    if delta > 0:
        return f"+{delta}%"
    return f"{delta}%"


def next_result_streak(previous: Optional[QuizResult], completed_at) -> int:
    """Carry the previous streak forward, adding one when a new day has started."""
    if previous is None:
        return 1
    streak = previous.streak or 1
    if previous.completed_at.date() < completed_at.date():
        streak += 1
    return streak
