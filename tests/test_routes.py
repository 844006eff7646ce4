from conftest import make_quiz_payload, quiz_reply


def test_health_and_info(client):
	assert client.get("/health").json() == {"status": "ok"}
	info = client.get("/info").json()
	assert info["status"] == "ok"
	assert "llm_configured" in info


def test_generate_generic_quiz(client, llm):
	llm.replies.append(quiz_reply())
	r = client.post("/generate", json={"book": "", "chapters": "all", "ageRange": "8-10", "useGeneric": True})
	assert r.status_code == 200
	body = r.json()
	assert len(body["mcqs"]) == 6
	assert len(body["openEnded"]) == 4
	assert body["isBookKnown"] is True
	assert "warning" not in body


def test_generate_unknown_book_carries_warning(client, llm):
	llm.replies.extend(['{"isKnown": false, "message": "?"}', quiz_reply()])
	r = client.post("/generate", json={"book": "Unknown Title XYZ", "chapters": "all", "ageRange": "5-7", "useGeneric": False})
	body = r.json()
	assert body["isBookKnown"] is False
	assert body["warning"] == "Book 'Unknown Title XYZ' not found, using generic questions."


def test_generate_rejects_missing_book(client, llm):
	r = client.post("/generate", json={"book": "", "ageRange": "8-10", "useGeneric": False})
	assert r.status_code == 400
	assert r.json() == {"error": "Please enter a book name or select generic questions."}
	assert llm.prompts == []


def test_generate_rejects_malformed_body(client):
	r = client.post("/generate", json={"useGeneric": "definitely"})
	assert r.status_code == 400
	assert "error" in r.json()


def test_generate_failure_returns_error_json(client, llm):
	llm.replies.append("not json at all")
	r = client.post("/generate", json={"ageRange": "8-10", "useGeneric": True})
	assert r.status_code == 502
	assert "error" in r.json()


def test_submit_scores_and_formats(client, llm):
	quiz = make_quiz_payload()
	llm.replies.append('[{"qNum": 7, "score": 7, "feedback": "Nice work"}]')
	answers = {"mcq1": "b", "mcq2": "c", "open1": "Because friends help.", "open2": " "}
	r = client.post("/submit", json={**quiz, "answers": answers, "ageRange": "8-10"})
	assert r.status_code == 200
	body = r.json()
	assert body["score"] == "Total Score: 8/46 (17%)"
	assert body["totalScore"] == 8
	assert body["maxScore"] == 46
	assert "Question 1 (MCQ): Correct!" in body["feedback"]
	assert "Nice work" in body["feedback"]
	assert "No response provided." in body["feedback"]


def test_submit_survives_grading_failure(client, llm):
	quiz = make_quiz_payload()
	llm.replies.append(RuntimeError("socket closed"))
	r = client.post("/submit", json={**quiz, "answers": {"mcq1": "b", "open1": "text"}, "ageRange": "8-10"})
	assert r.status_code == 200
	body = r.json()
	assert body["totalScore"] == 1
	assert "Error evaluating response." in body["feedback"]


def test_cover_for_generic_request_uses_age_background(client):
	r = client.get("/cover", params={"book": "", "ageRange": "11-13", "useGeneric": "true"})
	assert r.json() == {"url": "https://source.unsplash.com/800x600/?literature,teen", "type": "fallback"}


def test_root_redirects_to_frontend(client):
	r = client.get("/", follow_redirects=False)
	assert r.status_code in (302, 307)
	assert r.headers["location"] == "/app"
