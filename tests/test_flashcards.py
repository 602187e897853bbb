import json
from datetime import datetime, timedelta

from medlearn.models.flashcard import Flashcard, FlashcardSession
from medlearn.services.flashcard_stats import build_statistics
from medlearn.services.spaced_repetition import (
    REVIEW_INTERVALS_DAYS,
    apply_confidence,
    is_valid_confidence,
    next_review_date,
)
from tests.conftest import API


def create_category(client, headers, **overrides):
    r = client.post(f"{API}/flashcards/categories", json={"name": "Pharmacology", **overrides}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def create_card(client, headers, category_id, **overrides):
    payload = {"question": "Antidote for paracetamol?", "answer": "N-acetylcysteine", "category_id": category_id}
    r = client.post(f"{API}/flashcards", json={**payload, **overrides}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


# ============= Spaced repetition =============

def test_review_intervals():
    now = datetime(2026, 1, 1, 8, 0)
    assert REVIEW_INTERVALS_DAYS == {1: 1, 2: 3, 3: 7, 4: 14, 5: 30}
    assert next_review_date(3, now) == now + timedelta(days=7)
    assert next_review_date(5, now) == now + timedelta(days=30)
    assert next_review_date(9, now) == now + timedelta(days=1)


def test_confidence_validation():
    assert is_valid_confidence(1)
    assert is_valid_confidence(5)
    assert not is_valid_confidence(0)
    assert not is_valid_confidence(6)
    assert not is_valid_confidence(True)
    assert not is_valid_confidence("3")


def test_apply_confidence_updates_card():
    now = datetime(2026, 1, 1, 8, 0)
    card = Flashcard(review_count=2)
    apply_confidence(card, 4, now)
    assert card.confidence_level == 4
    assert card.next_review_date == now + timedelta(days=14)
    assert card.last_reviewed == now
    assert card.review_count == 3


# ============= Statistics =============

def test_build_statistics(db_session):
    now = datetime(2026, 5, 10, 18, 0)
    for days_ago, studied, correct, incorrect in [(0, 10, 8, 2), (1, 5, 3, 2), (3, 4, 4, 0)]:
        start = now - timedelta(days=days_ago, minutes=10)
        db_session.add(FlashcardSession(
            user_id=1, cards_studied=studied, correct_answers=correct, incorrect_answers=incorrect,
            skipped_cards=0, total_time_spent=600, start_time=start, end_time=start + timedelta(minutes=10),
        ))
    db_session.commit()

    stats = build_statistics(db_session, 1, now=now)
    assert stats["totalSessions"] == 3
    assert stats["totalCardsStudied"] == 19
    assert stats["accuracy"] == round(15 / 19 * 100)
    assert stats["totalTimeSpent"] == 1800
    assert stats["currentStreak"] == 2
    assert len(stats["last30Days"]) == 30
    assert stats["last30Days"][-1] == {"date": "2026-05-10", "count": 10}


# ============= Categories =============

def test_category_crud(client, auth_headers, other_headers):
    mine = create_category(client, auth_headers)
    create_category(client, other_headers, name="Shared anatomy", is_public=True)
    create_category(client, other_headers, name="Private notes")

    r = client.get(f"{API}/flashcards/categories", headers=auth_headers)
    assert [c["name"] for c in r.json()] == ["Pharmacology"]
    r = client.get(f"{API}/flashcards/categories", params={"include_public": True}, headers=auth_headers)
    assert [c["name"] for c in r.json()] == ["Pharmacology", "Shared anatomy"]

    r = client.patch(f"{API}/flashcards/categories/{mine['id']}", json={"color": "#ff0000"}, headers=auth_headers)
    assert r.json()["color"] == "#ff0000"
    r = client.patch(f"{API}/flashcards/categories/{mine['id']}", json={"color": "#000"}, headers=other_headers)
    assert r.status_code == 404


def test_delete_category_removes_cards(client, auth_headers):
    category = create_category(client, auth_headers)
    create_card(client, auth_headers, category["id"])
    client.post(f"{API}/flashcards/sessions", json={"category_id": category["id"], "cards_studied": 1}, headers=auth_headers)

    r = client.delete(f"{API}/flashcards/categories/{category['id']}", headers=auth_headers)
    assert r.status_code == 200
    r = client.get(f"{API}/flashcards", headers=auth_headers)
    assert r.json()["flashcards"] == []
    r = client.get(f"{API}/flashcards/sessions", headers=auth_headers)
    assert r.json()["sessions"][0]["category_id"] is None


# ============= Cards =============

def test_card_crud_and_category_count(client, auth_headers, other_headers):
    category = create_category(client, auth_headers)
    card = create_card(client, auth_headers, category["id"], tags=["toxicology"])
    assert card["confidence_level"] == 3
    assert card["review_count"] == 0

    r = client.get(f"{API}/flashcards/categories", headers=auth_headers)
    assert r.json()[0]["flashcard_count"] == 1

    r = client.post(
        f"{API}/flashcards",
        json={"question": "Q", "answer": "A", "category_id": category["id"]},
        headers=other_headers,
    )
    assert r.status_code == 403

    r = client.patch(f"{API}/flashcards/{card['id']}", json={"answer": "NAC"}, headers=auth_headers)
    assert r.json()["answer"] == "NAC"

    r = client.delete(f"{API}/flashcards/{card['id']}", headers=auth_headers)
    assert r.status_code == 200
    r = client.get(f"{API}/flashcards/categories", headers=auth_headers)
    assert r.json()[0]["flashcard_count"] == 0


def test_null_updates_rejected(client, auth_headers):
    category = create_category(client, auth_headers)
    card = create_card(client, auth_headers, category["id"])

    r = client.patch(f"{API}/flashcards/{card['id']}", json={"question": None}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["error"] == "Validation failed"
    r = client.patch(f"{API}/flashcards/categories/{category['id']}", json={"name": None}, headers=auth_headers)
    assert r.status_code == 400

    r = client.patch(
        f"{API}/flashcards/categories/{category['id']}", json={"description": None}, headers=auth_headers
    )
    assert r.status_code == 200
    assert r.json()["name"] == "Pharmacology"


def test_confidence_endpoint_schedules_review(client, auth_headers):
    category = create_category(client, auth_headers)
    card = create_card(client, auth_headers, category["id"])

    before = datetime.now()
    r = client.patch(f"{API}/flashcards/{card['id']}/confidence", json={"confidence_level": 5}, headers=auth_headers)
    assert r.status_code == 200
    body = r.json()
    assert body["confidence_level"] == 5
    assert body["review_count"] == 1
    due = datetime.fromisoformat(body["next_review_date"])
    assert timedelta(days=30) <= due - before < timedelta(days=30, minutes=1)

    r = client.patch(f"{API}/flashcards/{card['id']}/confidence", json={"confidence_level": 7}, headers=auth_headers)
    assert r.status_code == 400


def test_invalid_review_result_leaves_card_unchanged(client, auth_headers):
    category = create_category(client, auth_headers)
    card = create_card(client, auth_headers, category["id"])
    r = client.patch(
        f"{API}/flashcards/{card['id']}",
        json={"answer": "Changed", "review_result": 0},
        headers=auth_headers,
    )
    assert r.status_code == 400
    r = client.get(f"{API}/flashcards", headers=auth_headers)
    assert r.json()["flashcards"][0]["answer"] == "N-acetylcysteine"


def test_due_only_filter(client, auth_headers):
    category = create_category(client, auth_headers)
    due = create_card(client, auth_headers, category["id"])
    later = create_card(client, auth_headers, category["id"], question="Antidote for warfarin?", answer="Vitamin K")
    client.patch(f"{API}/flashcards/{later['id']}/confidence", json={"confidence_level": 3}, headers=auth_headers)

    r = client.get(f"{API}/flashcards", params={"due_only": True}, headers=auth_headers)
    assert [c["id"] for c in r.json()["flashcards"]] == [due["id"]]
    assert r.json()["pagination"]["total"] == 1


# ============= Sessions =============

def test_session_stats_cached_until_new_session(client, auth_headers, db_session):
    r = client.get(f"{API}/flashcards/sessions/stats", headers=auth_headers)
    assert r.json()["totalSessions"] == 0

    # Written behind the API's back, so the cached value is still served
    now = datetime.now()
    db_session.add(FlashcardSession(
        user_id=1, cards_studied=3, correct_answers=3, incorrect_answers=0, skipped_cards=0,
        total_time_spent=60, start_time=now, end_time=now,
    ))
    db_session.commit()
    r = client.get(f"{API}/flashcards/sessions/stats", headers=auth_headers)
    assert r.json()["totalSessions"] == 0

    r = client.post(
        f"{API}/flashcards/sessions",
        json={"cards_studied": 4, "correct_answers": 2, "incorrect_answers": 2, "total_time_spent": 120},
        headers=auth_headers,
    )
    assert r.status_code == 201
    session = r.json()
    start = datetime.fromisoformat(session["start_time"])
    end = datetime.fromisoformat(session["end_time"])
    assert end - start == timedelta(seconds=120)

    r = client.get(f"{API}/flashcards/sessions/stats", headers=auth_headers)
    stats = r.json()
    assert stats["totalSessions"] == 2
    assert stats["totalCardsStudied"] == 7
    assert stats["accuracy"] == round(5 / 7 * 100)

    r = client.get(f"{API}/flashcards/sessions/{session['id']}", headers=auth_headers)
    assert r.status_code == 200


def test_card_changes_refresh_cached_stats(client, auth_headers):
    category = create_category(client, auth_headers)
    stats_url = f"{API}/flashcards/sessions/stats"
    assert client.get(stats_url, headers=auth_headers).json()["totalCards"] == 0

    card = create_card(client, auth_headers, category["id"])
    stats = client.get(stats_url, headers=auth_headers).json()
    assert stats["totalCards"] == 1
    assert stats["cardsDue"] == 1

    client.patch(f"{API}/flashcards/{card['id']}/confidence", json={"confidence_level": 5}, headers=auth_headers)
    assert client.get(stats_url, headers=auth_headers).json()["cardsDue"] == 0

    client.delete(f"{API}/flashcards/{card['id']}", headers=auth_headers)
    assert client.get(stats_url, headers=auth_headers).json()["totalCards"] == 0


def test_session_for_unknown_category(client, auth_headers):
    r = client.post(f"{API}/flashcards/sessions", json={"category_id": 42}, headers=auth_headers)
    assert r.status_code == 404


# ============= Generation =============

def test_generate_from_topic(client, auth_headers, fake_llm):
    fake_llm.reply = "```json\n" + json.dumps([
        {"question": "Beta blocker antidote?", "answer": "Glucagon", "tags": ["toxicology"]},
        {"question": "", "answer": "dropped"},
        {"question": "Opioid antidote?", "answer": "Naloxone"},
    ]) + "\n```"
    category = create_category(client, auth_headers)

    r = client.post(
        f"{API}/flashcards/generate",
        data={"category_id": category["id"], "topic": "Antidotes", "num_cards": 3},
        headers=auth_headers,
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert len(body["flashcards"]) == 2
    assert {c["set_id"] for c in body["flashcards"]} == {body["set_id"]}
    assert body["flashcards"][0]["tags"] == ["toxicology", "Antidotes"]

    r = client.get(f"{API}/flashcards", params={"group_by_set": True}, headers=auth_headers)
    sets = r.json()["sets"]
    assert len(sets) == 1
    assert sets[0]["card_count"] == 2
    assert sets[0]["topic_name"] == "Antidotes"


def test_generate_requires_topic_or_pdf(client, auth_headers):
    category = create_category(client, auth_headers)
    r = client.post(f"{API}/flashcards/generate", data={"category_id": category["id"]}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json() == {"error": "Either topic or PDF file is required"}


def test_generate_rejects_non_pdf_upload(client, auth_headers):
    category = create_category(client, auth_headers)
    r = client.post(
        f"{API}/flashcards/generate",
        data={"category_id": category["id"]},
        files={"pdf": ("notes.txt", b"plain text", "text/plain")},
        headers=auth_headers,
    )
    assert r.status_code == 400
    assert r.json() == {"error": "Only PDF files are supported"}


def test_generate_checks_pdf_content_not_header(client, auth_headers, fake_llm):
    category = create_category(client, auth_headers)
    r = client.post(
        f"{API}/flashcards/generate",
        data={"category_id": category["id"]},
        files={"pdf": ("notes.pdf", b"<html>not a pdf</html>", "application/pdf")},
        headers=auth_headers,
    )
    assert r.status_code == 400
    assert r.json() == {"error": "Only PDF files are supported"}
    assert fake_llm.calls == []


def test_generate_unparseable_reply(client, auth_headers, fake_llm):
    fake_llm.reply = "Sorry, I cannot help with that."
    category = create_category(client, auth_headers)
    r = client.post(
        f"{API}/flashcards/generate",
        data={"category_id": category["id"], "topic": "Antidotes"},
        headers=auth_headers,
    )
    assert r.status_code == 502
