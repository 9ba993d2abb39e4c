import json


def submit(client, **body):
    return client.post("/api/submit-question", json=body)


def test_submit_and_list(client):
    resp = submit(client, question="Why?", name="Ann", ip="10.0.0.1", userAgent="pytest-agent")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["success"] is True
    assert data["message"] == "Question submitted successfully"

    questions = client.get("/api/questions").get_json()
    assert len(questions) == 1
    q = questions[0]
    assert q["id"] == data["questionId"]
    assert q["name"] == "Ann"
    assert q["ip"] == "10.0.0.1"
    assert q["userAgent"] == "pytest-agent"
    assert q["status"] == "pending"


def test_submit_fills_provenance_from_request(client):
    submit(client, question="Where from?")
    q = client.get("/api/questions").get_json()[0]
    assert q["ip"] == "127.0.0.1"
    assert q["userAgent"]


def test_submit_requires_question(client):
    resp = submit(client, name="Ann")
    assert resp.status_code == 400
    assert resp.get_json() == {"success": False, "message": "Question is required"}


def test_submit_without_json_body(client):
    resp = client.post("/api/submit-question", data="question=hi")
    assert resp.status_code == 400


def test_answer_flow(client):
    qid = submit(client, question="Why?").get_json()["questionId"]

    resp = client.post(f"/api/questions/{qid}/answer", json={"answer": "Because.", "isOwner": True})
    assert resp.status_code == 200
    assert resp.get_json() == {"success": True, "message": "Answer added successfully"}

    q = client.get(f"/api/questions/{qid}").get_json()
    assert q["status"] == "answered"
    assert q["response"] == "Because."
    assert q["answers"][0]["author"] == "Anonymous"


def test_answer_errors(client):
    qid = submit(client, question="Why?").get_json()["questionId"]
    assert client.post(f"/api/questions/{qid}/answer", json={}).status_code == 400
    resp = client.post("/api/questions/9999999/answer", json={"answer": "x"})
    assert resp.status_code == 404
    assert resp.get_json() == {"success": False, "message": "Question not found"}


def test_like(client):
    qid = submit(client, question="Why?").get_json()["questionId"]
    client.post(f"/api/questions/{qid}/like")
    resp = client.post(f"/api/questions/{qid}/like")
    assert resp.get_json() == {"success": True, "likes": 2}
    assert client.post("/api/questions/9999999/like").status_code == 404
    assert client.post("/api/questions/not-a-number/like").status_code == 404


def test_get_unknown_question(client):
    assert client.get("/api/questions/123").status_code == 404


def test_storage_failure_is_500(client, monkeypatch):
    def boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("qa_store.os.replace", boom)
    resp = submit(client, question="Why?")
    assert resp.status_code == 500
    assert resp.get_json() == {"success": False, "message": "Internal server error"}


def test_unexpected_error_is_500(client, monkeypatch):
    def broken(self):
        raise RuntimeError("boom")

    monkeypatch.setattr("qa_store.QuestionStore.list_questions", broken)
    resp = client.get("/api/questions")
    assert resp.status_code == 500
    assert resp.get_json()["success"] is False


def test_corrupt_file_served_as_empty(client, store_path):
    store_path.write_text("not json", encoding="utf-8")
    assert client.get("/api/questions").get_json() == []
    assert submit(client, question="Fresh start").status_code == 200
    assert len(json.loads(store_path.read_text(encoding="utf-8"))["questions"]) == 1


def test_static_and_spa_fallback(client):
    assert b"questions" in client.get("/").data
    assert b"questions" in client.get("/some/client/route").data
    assert b"console.log" in client.get("/app.js").data


def test_health(client):
    assert client.get("/health").get_json() == {"status": "healthy"}
