import json
from datetime import datetime, timedelta

from app.models import AuthUser
from app.routers import quiz as quiz_router
from conftest import STUDENT

QUIZ = {
    "questions": [
        {"question": "Solve for x: 2x + 3 = 7", "options": ["1", "2", "3", "4"], "correctAnswer": "2"},
        {"question": "What is a variable?", "options": ["A letter for a number", "A constant"], "correctAnswer": "A letter for a number"},
        {"question": "x + x = ?", "options": ["2x", "x2"], "correctAnswer": "2x"},
    ]
}


def test_subjects_follow_board_and_grade(client, auth_headers):
    r = client.get("/subjects", headers=auth_headers)
    assert r.status_code == 200
    assert len(r.json()) == 8
    client.patch("/profile", headers=auth_headers, json={"grade": "12"})
    slugs = {s["slug"] for s in client.get("/subjects", headers=auth_headers).json()}
    assert "art" not in slugs and "physics" in slugs


def test_subject_detail(client, auth_headers):
    r = client.get("/subjects/physics", headers=auth_headers)
    assert r.status_code == 200
    assert [t["title"] for t in r.json()["topics"]] == ["Mechanics", "Thermodynamics", "Electromagnetism"]
    assert client.get("/subjects/alchemy", headers=auth_headers).status_code == 404


def test_topic_summary(client, auth_headers, fake_llm):
    fake_llm.queue("Mechanics is about how things move.")
    r = client.get("/subjects/physics/topics/Mechanics/summary", headers=auth_headers)
    assert r.status_code == 200
    body = r.json()
    assert body["generated"] is True
    assert body["summary"] == "Mechanics is about how things move."
    assert body["learning_style"] == "Visual"
    prompt, _ = fake_llm.prompts[0]
    assert "Study of motion, forces, and energy." in prompt


def test_topic_summary_falls_back(client, auth_headers, fake_llm):
    fake_llm.queue(RuntimeError("Gemini call failed"))
    r = client.get("/subjects/physics/topics/Mechanics/summary", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["generated"] is False
    assert r.json()["summary"] == "Could not generate summary for this topic."


def test_unknown_topic(client, auth_headers):
    r = client.get("/subjects/physics/topics/Algebra/summary", headers=auth_headers)
    assert r.status_code == 404


def test_recommendations(client, auth_headers, fake_llm):
    fake_llm.queue(json.dumps({"recommendedTopics": ["Geometry"], "reasoning": "Next step after algebra."}))
    r = client.get("/recommendations", headers=auth_headers)
    assert r.status_code == 200
    assert r.json() == {"recommended_topics": ["Geometry"], "reasoning": "Next step after algebra.", "generated": True}
    assert "No quizzes taken yet." in fake_llm.prompts[0][0]


def test_recommendations_offline(client, auth_headers, fake_llm):
    fake_llm.queue("I cannot answer that.")
    r = client.get("/recommendations", headers=auth_headers)
    assert r.status_code == 200
    body = r.json()
    assert body["generated"] is False
    assert body["recommended_topics"] == ["Algebra", "Physics", "Biology"]


def test_quiz_generate_submit_history(client, auth_headers, fake_llm):
    fake_llm.queue(json.dumps(QUIZ))
    r = client.post("/quiz/generate", headers=auth_headers, json={"topic": "Algebra", "number_of_questions": 3})
    assert r.status_code == 200
    quiz = r.json()
    assert len(quiz["questions"]) == 3
    assert "correctAnswer" not in quiz["questions"][0]
    assert "correct_answer" not in quiz["questions"][0]

    r = client.post(
        f"/quiz/{quiz['quiz_id']}/submit",
        headers=auth_headers,
        json={"answers": ["2", "A constant", "2x"], "time_spent_seconds": 42},
    )
    assert r.status_code == 200
    result = r.json()
    assert result["score"] == 2 and result["total"] == 3
    assert result["percentage"] == 67
    assert [a["is_correct"] for a in result["results"]] == [True, False, True]

    history = client.get("/quiz/history", headers=auth_headers).json()
    assert len(history) == 1
    assert history[0]["topic"] == "Algebra"
    assert history[0]["time_spent_seconds"] == 42

    # a quiz can only be submitted once
    r = client.post(f"/quiz/{quiz['quiz_id']}/submit", headers=auth_headers, json={"answers": ["2", "2x", "2x"]})
    assert r.status_code == 404


def test_quiz_submit_needs_every_answer(client, auth_headers, fake_llm):
    fake_llm.queue(json.dumps(QUIZ))
    quiz = client.post("/quiz/generate", headers=auth_headers, json={"topic": "Algebra"}).json()
    r = client.post(f"/quiz/{quiz['quiz_id']}/submit", headers=auth_headers, json={"answers": ["2"]})
    assert r.status_code == 400


def test_quiz_generation_failure(client, auth_headers, fake_llm):
    fake_llm.queue("not a quiz")
    r = client.post("/quiz/generate", headers=auth_headers, json={"topic": "Algebra"})
    assert r.status_code == 502


def test_dashboard(client, auth_headers, fake_llm):
    body = client.get("/dashboard", headers=auth_headers).json()
    assert body["first_name"] == "Asha"
    assert body["onboarded"] is False
    assert body["next_step"] == "/personality/attempts"
    assert body["average_percentage"] is None

    fake_llm.queue(json.dumps(QUIZ))
    quiz = client.post("/quiz/generate", headers=auth_headers, json={"topic": "Algebra"}).json()
    client.post(f"/quiz/{quiz['quiz_id']}/submit", headers=auth_headers, json={"answers": ["2", "A letter for a number", "2x"]})
    body = client.get("/dashboard", headers=auth_headers).json()
    assert body["average_percentage"] == 100
    assert len(body["recent_results"]) == 1


def test_ai_quota(client, auth_headers, fake_llm, db_session):
    user = db_session.get(AuthUser, STUDENT["email"])
    user.requests_used = user.requests_limit
    db_session.commit()
    r = client.get("/recommendations", headers=auth_headers)
    assert r.status_code == 429
    assert fake_llm.prompts == []


def test_rejected_summary_does_not_use_quota(client, auth_headers, fake_llm, db_session):
    assert client.get("/subjects/alchemy/topics/Mechanics/summary", headers=auth_headers).status_code == 404
    assert client.get("/subjects/physics/topics/Algebra/summary", headers=auth_headers).status_code == 404
    db_session.expire_all()
    assert db_session.get(AuthUser, STUDENT["email"]).requests_used == 0
    assert fake_llm.prompts == []


def test_ai_call_uses_one_request(client, auth_headers, fake_llm, db_session):
    fake_llm.queue("Mechanics is about how things move.")
    client.get("/subjects/physics/topics/Mechanics/summary", headers=auth_headers)
    db_session.expire_all()
    assert db_session.get(AuthUser, STUDENT["email"]).requests_used == 1


def test_stale_quizzes_are_evicted(client, auth_headers, fake_llm):
    fake_llm.queue(json.dumps(QUIZ))
    quiz_id = client.post("/quiz/generate", headers=auth_headers, json={"topic": "Algebra"}).json()["quiz_id"]
    assert quiz_router.evict_stale_quizzes(timedelta(hours=24)) == 0
    later = datetime.utcnow() + timedelta(hours=25)
    assert quiz_router.evict_stale_quizzes(timedelta(hours=24), now=later) == 1
    r = client.post(f"/quiz/{quiz_id}/submit", headers=auth_headers, json={"answers": ["2", "2x", "2x"]})
    assert r.status_code == 404
