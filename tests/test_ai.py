import json

import pytest

from medlearn.core.agents import AIResponseError, MedicalAIAgent
from medlearn.core.agents.medical_ai import extract_json
from tests.conftest import API, FakeLLM


def test_extract_json_variants():
    assert extract_json('{"a": 1}') == {"a": 1}
    assert extract_json('```json\n[1, 2]\n```') == [1, 2]
    assert extract_json('Here you go:\n{"title": "x"}\nEnjoy') == {"title": "x"}
    with pytest.raises(AIResponseError):
        extract_json("no json here")


def test_generate_case_validates_fields():
    agent = MedicalAIAgent(llm=FakeLLM(json.dumps({"title": "Only a title"})))
    with pytest.raises(AIResponseError, match="missing required field: description"):
        agent.generate_case("Cardiology")


def test_generate_case_validates_answers():
    case = {
        "title": "t", "description": "d", "content": "c", "category": "Cardiology",
        "answers": [{"question": "q"}],
    }
    agent = MedicalAIAgent(llm=FakeLLM(json.dumps(case)))
    with pytest.raises(AIResponseError, match="question and answer"):
        agent.generate_case("Cardiology")


def test_chat_includes_context_in_system_prompt():
    llm = FakeLLM("Because of preload.")
    agent = MedicalAIAgent(llm=llm)
    assert agent.chat("Why?", context="Frank-Starling law") == "Because of preload."
    system_message = llm.calls[0][0]
    assert "Frank-Starling law" in system_message.content


def test_prompt_endpoint(client, auth_headers, fake_llm):
    fake_llm.reply = "Adrenaline is first line."
    r = client.post(f"{API}/ai", json={"message": "Anaphylaxis treatment?"}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json() == {"text": "Adrenaline is first line."}


def test_prompt_endpoint_requires_text(client, auth_headers):
    r = client.post(f"{API}/ai", json={}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json() == {"error": "Message or prompt is required"}


def test_prompt_endpoint_streams(client, auth_headers, fake_llm):
    fake_llm.reply = "one two three"
    r = client.post(f"{API}/ai", json={"prompt": "Count", "stream": True}, headers=auth_headers)
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/plain")
    assert r.text.split() == ["one", "two", "three"]


def test_prompt_endpoint_model_failure(client, auth_headers, fake_llm):
    fake_llm.reply = RuntimeError("upstream timeout")
    r = client.post(f"{API}/ai", json={"message": "Hello"}, headers=auth_headers)
    assert r.status_code == 500
    assert r.json() == {"text": "", "error": "Failed to get AI response"}


def test_streaming_prompt_model_failure(client, auth_headers, fake_llm):
    fake_llm.reply = RuntimeError("quota exceeded")
    r = client.post(f"{API}/ai", json={"prompt": "Hello", "stream": True}, headers=auth_headers)
    assert r.status_code == 500
    assert r.json() == {"text": "", "error": "Failed to get AI response"}


def test_generate_questions_endpoint(client, auth_headers, fake_llm):
    fake_llm.reply = json.dumps({"questions": [
        {"question": "Troponin rises in MI.", "correct_answer": True},
        {"question": "missing answer"},
    ]})
    r = client.post(
        f"{API}/ai/generate-questions",
        json={"topic": "MI", "question_type": "true-false", "difficulty": "beginner", "count": 50},
        headers=auth_headers,
    )
    assert r.status_code == 200
    questions = r.json()["questions"]
    assert len(questions) == 1
    assert questions[0]["type"] == "true-false"
    assert questions[0]["topic"] == "MI"


def test_generate_questions_rejects_unknown_type(client, auth_headers):
    r = client.post(
        f"{API}/ai/generate-questions",
        json={"topic": "MI", "question_type": "essay", "difficulty": "beginner"},
        headers=auth_headers,
    )
    assert r.status_code == 400


def test_generate_case_endpoint(client, auth_headers, fake_llm):
    fake_llm.reply = json.dumps({
        "title": "Syncope on exertion",
        "description": "A 19 year old athlete collapses.",
        "content": "Full history...",
        "category": "Cardiology",
        "answers": [{"question": "Diagnosis?", "answer": "HCM", "explanation": "Murmur increases with Valsalva"}],
    })
    r = client.post(f"{API}/ai/generate-case", json={"specialty": "Cardiology"}, headers=auth_headers)
    assert r.status_code == 200
    case = r.json()["case"]
    assert case["is_ai_generated"] is True
    assert case["specialties"] == ["Cardiology"]
    assert case["difficulty"] == "intermediate"


def test_generate_case_endpoint_bad_reply(client, auth_headers, fake_llm):
    fake_llm.reply = "[]"
    r = client.post(f"{API}/ai/generate-case", json={"specialty": "Cardiology"}, headers=auth_headers)
    assert r.status_code == 502


def test_chat_endpoint(client, auth_headers, fake_llm):
    fake_llm.reply = "The loop of Henle concentrates urine."
    r = client.post(f"{API}/ai/chat", json={"message": "What does the loop of Henle do?"}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json() == {"response": "The loop of Henle concentrates urine."}
