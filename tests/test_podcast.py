# tests/test_podcast.py
from limeai.infra.upstream import UpstreamError

SOURCE = "Cells divide by mitosis. " * 60


def test_text_required(client):
    assert client.post("/api/generate-podcast-content", json={}).status_code == 400
    assert client.post("/api/text-to-speech", json={"text": ""}).status_code == 400


def test_podcast_content_from_api(client, deepseek, admission):
    deepseek.queue.append("HOST: Hi!\nGUEST: Hello!")
    r = client.post(
        "/api/generate-podcast-content", json={"text": SOURCE, "style": "interview"}
    )
    assert r.status_code == 200
    body = r.json()
    assert body["podcastContent"].startswith("HOST:")
    assert body["source"] == "api"
    prompt = deepseek.calls[0][0]
    assert "interview-style podcast" in prompt
    assert "Cells divide" in prompt
    assert admission.count == 1


def test_unknown_style_uses_conversational_prompt(client, deepseek):
    deepseek.queue.append("HOST: Hi!")
    client.post("/api/generate-podcast-content", json={"text": "x", "style": "opera"})
    assert "conversational podcast" in deepseek.calls[0][0]


def test_podcast_fallback_on_rate_limit(client, deepseek, admission):
    deepseek.queue.append(UpstreamError("Too Many Requests", 429))
    r = client.post("/api/generate-podcast-content", json={"text": SOURCE})
    body = r.json()
    assert r.status_code == 200
    assert body["source"] == "fallback_error"
    assert body["podcastContent"].startswith("HOST: Welcome")
    assert admission.in_cooldown is True


def test_podcast_auth_error_does_not_trip_cooldown(client, deepseek, admission):
    deepseek.queue.append(UpstreamError("Invalid API key format"))
    r = client.post("/api/generate-podcast-content", json={"text": SOURCE})
    assert r.json()["source"] == "fallback_error"
    assert admission.in_cooldown is False


def test_podcast_quota_fallback(client, deepseek, admission):
    admission.record_rate_limited()
    r = client.post("/api/generate-podcast-content", json={"text": SOURCE})
    assert r.json()["source"] == "fallback_quota"
    assert deepseek.calls == []


def test_tts_missing_credentials(client, playdialog):
    playdialog.configured = False
    r = client.post("/api/text-to-speech", json={"text": "HOST: hi"})
    assert r.status_code == 500
    assert "PLAYDIALOG_USER_ID" in r.json()["detail"]


def test_tts_starts_job(client, playdialog):
    playdialog.queue.append("job-123")
    r = client.post("/api/text-to-speech", json={"text": "HOST: hi", "style": "storytelling"})
    assert r.status_code == 200
    assert r.json() == {
        "jobId": "job-123",
        "status": "processing",
        "message": "Podcast generation initiated successfully. Use the jobId to check status.",
    }
    assert playdialog.calls[0] == ("HOST: hi", "storytelling")


def test_tts_bad_credentials(client, playdialog):
    playdialog.queue.append(UpstreamError("upstream returned 401: unauthorized", 401))
    r = client.post("/api/text-to-speech", json={"text": "HOST: hi"})
    assert r.status_code == 401


def test_status_completed(client, playdialog):
    playdialog.queue.append({"status": "COMPLETED", "url": "https://cdn.example/a.mp3"})
    r = client.get("/api/podcast-status/job-1")
    assert r.status_code == 200
    assert r.json()["status"] == "completed"
    assert r.json()["audioUrl"] == "https://cdn.example/a.mp3"


def test_status_processing_and_failed(client, playdialog):
    playdialog.queue.append({"status": "IN_PROGRESS"})
    r = client.get("/api/podcast-status/job-1")
    assert r.json()["status"] == "processing"
    assert "audioUrl" not in r.json()

    playdialog.queue.append({"status": "FAILED"})
    r = client.get("/api/podcast-status/job-1")
    assert r.status_code == 500
    assert r.json()["status"] == "failed"
    assert "failed" in r.json()["message"]


def test_status_unknown_job(client, playdialog):
    playdialog.queue.append(UpstreamError("upstream returned 404: not found", 404))
    assert client.get("/api/podcast-status/nope").status_code == 404


def test_audio_requires_url(client):
    assert client.get("/api/podcast-audio").status_code == 400
    assert client.get("/api/podcast-audio?url=file:///etc/passwd").status_code == 400


def test_audio_streams_mp3(client, playdialog):
    playdialog.queue.append(iter([b"ID3", b"\x00\x01"]))
    r = client.get("/api/podcast-audio", params={"url": "https://cdn.example/a.mp3"})
    assert r.status_code == 200
    assert r.headers["content-type"] == "audio/mpeg"
    assert "attachment" in r.headers["content-disposition"]
    assert r.content == b"ID3\x00\x01"
