from datetime import datetime, timedelta

from medlearn.models.quiz import QuizResult
from medlearn.services.quiz_analytics import (
    compute_analytics,
    improvement_since,
    next_result_streak,
    rank_for_percentile,
)
from medlearn.services.quiz_grading import grade_answer
from tests.conftest import API

QUIZ = {
    "title": "Cardiology basics",
    "topic": "Cardiology",
    "is_public": False,
    "questions": [
        {
            "type": "multiple-choice",
            "question": "First-line drug in anaphylaxis?",
            "options": ["Atropine", "Adrenaline", "Amiodarone"],
            "correct_answer": "Adrenaline",
        },
        {
            "type": "true-false",
            "question": "The SA node is the primary pacemaker.",
            "correct_answer": True,
        },
    ],
}


def create_quiz(client, headers, **overrides):
    r = client.post(f"{API}/quizzes", json={**QUIZ, **overrides}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


# ============= Grading =============

def test_grade_multiple_choice_accepts_letter_or_text():
    options = ["Atropine", "Adrenaline", "Amiodarone"]
    assert grade_answer("multiple-choice", "Adrenaline", "B", options)
    assert grade_answer("multiple-choice", "Adrenaline", "Adrenaline", options)
    assert not grade_answer("multiple-choice", "Adrenaline", "A", options)


def test_grade_true_false_coerces_strings():
    assert grade_answer("true-false", True, "true")
    assert grade_answer("true-false", "False", False)
    assert not grade_answer("true-false", True, "yes")


def test_grade_free_text_is_case_insensitive():
    assert grade_answer("fill-in-blank", ["mitral", "mitral valve"], "  Mitral   Valve ")
    assert grade_answer("saq", "Troponin", "troponin")
    assert not grade_answer("saq", "Troponin", "")


def test_grade_matching_compares_in_order():
    assert grade_answer("matching", ["a", "b"], ["A", "B"])
    assert not grade_answer("matching", ["a", "b"], ["b", "a"])


# ============= Analytics =============

def _result(user_id, score, total, completed_at, time_spent=60, answers=None):
    return QuizResult(
        user_id=user_id, quiz_id=1, score=score, total_questions=total,
        completed_at=completed_at, time_spent=time_spent, answers=answers or [],
    )


def test_rank_thresholds():
    assert rank_for_percentile(95) == "Expert"
    assert rank_for_percentile(80) == "Advanced"
    assert rank_for_percentile(60) == "Intermediate"
    assert rank_for_percentile(40) == "Novice"
    assert rank_for_percentile(39) == "Beginner"


def test_compute_analytics_places_user():
    now = datetime(2026, 3, 1, 12, 0)
    results = [
        _result(1, 4, 4, now, time_spent=30, answers=[{"question_id": 7, "is_correct": True, "time_spent": 30}]),
        _result(2, 2, 4, now, time_spent=90, answers=[{"question_id": 7, "is_correct": False}]),
        _result(3, 1, 4, now, time_spent=60),
    ]
    analytics = compute_analytics([7, 8], results, user_id=1)

    assert analytics["total_attempts"] == 3
    assert analytics["completion_rate"] == 100.0
    assert analytics["average_score"] == (100 + 50 + 25) / 3
    assert analytics["user_performance"] == {
        "percentile": 67,
        "rank": "Intermediate",
        "fastest_time": True,
        "highest_accuracy": True,
    }
    q7, q8 = analytics["question_stats"]
    assert q7["success_rate"] == 50
    assert q7["skip_rate"] == 50
    assert q8["skip_rate"] == 100


def test_compute_analytics_empty():
    analytics = compute_analytics([1], [], user_id=1)
    assert analytics["total_attempts"] == 0
    assert analytics["user_performance"] is None


def test_improvement_and_streak():
    day = datetime(2026, 3, 1, 9, 0)
    previous = _result(1, 2, 4, day)
    previous.streak = 2
    assert improvement_since(previous, 3, 4) == "+25%"
    assert improvement_since(previous, 1, 4) == "-25%"
    assert improvement_since(None, 1, 4) is None
    assert next_result_streak(previous, day + timedelta(hours=2)) == 2
    assert next_result_streak(previous, day + timedelta(days=1)) == 3
    assert next_result_streak(None, day) == 1


# ============= Endpoints =============

def test_create_and_list_quizzes(client, auth_headers, other_headers):
    quiz = create_quiz(client, auth_headers)
    assert quiz["question_count"] == 2
    create_quiz(client, other_headers, title="Public quiz", topic="Neurology", is_public=True)
    create_quiz(client, other_headers, title="Private quiz", topic="Renal")

    r = client.get(f"{API}/quizzes", headers=auth_headers)
    assert sorted(q["title"] for q in r.json()) == ["Cardiology basics", "Public quiz"]

    r = client.get(f"{API}/quizzes/topics", headers=auth_headers)
    assert r.json() == ["Cardiology", "Neurology"]

    r = client.get(f"{API}/quizzes/mine", headers=other_headers)
    assert len(r.json()) == 2


def test_private_quiz_forbidden_to_others(client, auth_headers, other_headers):
    quiz = create_quiz(client, auth_headers)
    r = client.get(f"{API}/quizzes/{quiz['id']}", headers=other_headers)
    assert r.status_code == 403
    r = client.patch(f"{API}/quizzes/{quiz['id']}", json={"title": "Mine now"}, headers=other_headers)
    assert r.status_code == 403
    r = client.delete(f"{API}/quizzes/{quiz['id']}", headers=other_headers)
    assert r.status_code == 404


def test_update_quiz_replaces_questions(client, auth_headers):
    quiz = create_quiz(client, auth_headers)
    r = client.patch(
        f"{API}/quizzes/{quiz['id']}",
        json={"questions": [{"type": "saq", "question": "Name the cardiac biomarker.", "correct_answer": "Troponin"}]},
        headers=auth_headers,
    )
    assert r.status_code == 200
    assert r.json()["question_count"] == 1
    assert r.json()["title"] == QUIZ["title"]


def test_update_quiz_rejects_null_title(client, auth_headers):
    quiz = create_quiz(client, auth_headers)
    r = client.patch(f"{API}/quizzes/{quiz['id']}", json={"title": None}, headers=auth_headers)
    assert r.status_code == 400
    r = client.patch(f"{API}/quizzes/{quiz['id']}", json={"topic": None}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["title"] == QUIZ["title"]
    assert r.json()["topic"] is None


def test_attempt_flow_records_result_and_xp(client, auth_headers):
    quiz = create_quiz(client, auth_headers)
    q1, q2 = [q["id"] for q in quiz["questions"]]

    r = client.post(f"{API}/quizzes/{quiz['id']}/attempts", headers=auth_headers)
    assert r.status_code == 201
    attempt = r.json()
    assert attempt["total_questions"] == 2
    assert attempt["is_complete"] is False

    r = client.patch(
        f"{API}/quizzes/{quiz['id']}/attempts",
        json={"attempt_id": attempt["id"], "answers": [{"question_id": q1, "user_answer": "B", "time_spent": 12}]},
        headers=auth_headers,
    )
    assert r.json()["answers"][0]["is_correct"] is True

    r = client.patch(
        f"{API}/quizzes/{quiz['id']}/attempts",
        json={
            "attempt_id": attempt["id"],
            "answers": [{"question_id": q2, "user_answer": "false", "time_spent": 8}],
            "is_complete": True,
        },
        headers=auth_headers,
    )
    body = r.json()
    assert body["is_complete"] is True
    assert body["score"] == 50.0
    assert body["time_spent"] == 20

    r = client.get(f"{API}/quizzes/results", headers=auth_headers)
    results = r.json()["results"]
    assert len(results) == 1
    assert results[0]["score"] == 1
    assert results[0]["percentage_score"] == 50.0
    assert r.json()["stats"]["total_quizzes_taken"] == 1

    r = client.get(f"{API}/users/profile/gamification", headers=auth_headers)
    assert r.json()["totalQuizzesCompleted"] == 1
    assert r.json()["xp"] == 15

    r = client.patch(
        f"{API}/quizzes/{quiz['id']}/attempts",
        json={"attempt_id": attempt["id"], "answers": []},
        headers=auth_headers,
    )
    assert r.status_code == 400


def test_attempt_rejects_foreign_question(client, auth_headers):
    quiz = create_quiz(client, auth_headers)
    attempt = client.post(f"{API}/quizzes/{quiz['id']}/attempts", headers=auth_headers).json()
    r = client.patch(
        f"{API}/quizzes/{quiz['id']}/attempts",
        json={"attempt_id": attempt["id"], "answers": [{"question_id": 9999, "user_answer": "x"}]},
        headers=auth_headers,
    )
    assert r.status_code == 400


def test_attempt_requires_id(client, auth_headers):
    quiz = create_quiz(client, auth_headers)
    r = client.patch(f"{API}/quizzes/{quiz['id']}/attempts", json={"answers": []}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json() == {"error": "Attempt ID is required"}


def test_submit_result_and_analytics(client, auth_headers):
    quiz = create_quiz(client, auth_headers)

    r = client.post(f"{API}/quizzes/results", json={"quiz_id": quiz["id"], "score": 3}, headers=auth_headers)
    assert r.status_code == 400

    r = client.post(
        f"{API}/quizzes/results",
        json={"quiz_id": quiz["id"], "score": 1, "time_spent": 40},
        headers=auth_headers,
    )
    assert r.status_code == 201
    first = r.json()["result"]
    assert first["improvement"] is None
    assert first["streak"] == 1
    assert len(r.json()["questions"]) == 2

    r = client.post(
        f"{API}/quizzes/results",
        json={"quiz_id": quiz["id"], "score": 2, "time_spent": 30},
        headers=auth_headers,
    )
    assert r.json()["result"]["improvement"] == "+50%"

    r = client.get(f"{API}/quizzes/results/{first['id']}", headers=auth_headers)
    assert r.status_code == 200

    r = client.get(f"{API}/quizzes/{quiz['id']}/analytics", headers=auth_headers)
    analytics = r.json()["analytics"]
    assert analytics["total_attempts"] == 2
    assert analytics["average_score"] == 75.0
    assert analytics["user_performance"]["highest_accuracy"] is True
    assert len(analytics["accuracy_trend"]) == 2
