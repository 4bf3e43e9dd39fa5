# tests/test_flowchart.py
from limeai.fallback.catalog import FLOWCHART_CATALOG
from limeai.flowchart.router import clean_mermaid
from limeai.infra.upstream import UpstreamError

GOOD = "graph TD\n    A[Sun] --> B[Leaf]"


def test_concept_required(client):
    r = client.post("/api/generate-flowchart", json={})
    assert r.status_code == 400
    assert r.json()["detail"] == "Concept is required"

    r = client.post("/api/generate-flowchart", json={"concept": "   "})
    assert r.status_code == 400


def test_api_success_is_cached(client, deepseek, cache):
    deepseek.queue.append(f"```mermaid\n{GOOD}\n```")
    r = client.post("/api/generate-flowchart", json={"concept": "  Photosynthesis "})
    assert r.status_code == 200
    body = r.json()
    assert body["mermaidCode"] == GOOD
    assert body["isGeneratedByApi"] is True
    assert body["source"] == "api"
    assert cache.get("photosynthesis") == GOOD
    assert "Photosynthesis" in deepseek.calls[0][0]

    # Second request is served from cache without calling upstream
    r = client.post("/api/generate-flowchart", json={"concept": "photosynthesis"})
    assert r.json()["source"] == "cache_hit"
    assert r.json()["mermaidCode"] == GOOD
    assert len(deepseek.calls) == 1


def test_generic_error_falls_back_without_cooldown(client, deepseek, admission):
    deepseek.queue.append(UpstreamError("upstream returned 500: boom", 500))
    r = client.post("/api/generate-flowchart", json={"concept": "git"})
    assert r.status_code == 200
    body = r.json()
    assert body["isGeneratedByApi"] is False
    assert body["source"] == "fallback_error"
    assert body["mermaidCode"] == FLOWCHART_CATALOG["git"]
    assert admission.in_cooldown is False
    assert admission.count == 1


def test_rate_limit_enters_cooldown_then_serves_quota_fallback(client, deepseek, admission, clock):
    deepseek.queue.append(UpstreamError("upstream returned 429: slow down", 429))
    r = client.post("/api/generate-flowchart", json={"concept": "database"})
    assert r.json()["source"] == "fallback_error"
    assert admission.in_cooldown is True

    r = client.post("/api/generate-flowchart", json={"concept": "database"})
    body = r.json()
    assert body["source"] == "fallback_quota"
    assert body["mermaidCode"] == FLOWCHART_CATALOG["database"]
    assert len(deepseek.calls) == 1

    clock.advance(60)
    deepseek.queue.append(GOOD)
    r = client.post("/api/generate-flowchart", json={"concept": "database"})
    assert r.json()["source"] == "api"


def test_auth_failure_enters_cooldown(client, deepseek, admission):
    deepseek.queue.append(UpstreamError("Invalid API key format"))
    client.post("/api/generate-flowchart", json={"concept": "cloud"})
    assert admission.in_cooldown is True


def test_non_mermaid_output_falls_back(client, deepseek, cache):
    deepseek.queue.append("Sorry, I can't help with that.")
    r = client.post("/api/generate-flowchart", json={"concept": "understanding machine learning basics"})
    body = r.json()
    assert body["source"] == "fallback_error"
    assert body["mermaidCode"] == FLOWCHART_CATALOG["machine learning"]
    assert len(cache) == 0


def test_quota_exhaustion_uses_fallback(client, deepseek, admission):
    for _ in range(20):
        admission.record_attempt()
    r = client.post("/api/generate-flowchart", json={"concept": "web"})
    assert r.json()["source"] == "fallback_quota"
    assert deepseek.calls == []


def test_api_health_reports_cooldown(client, admission, cache):
    cache.put("x", GOOD)
    admission.record_rate_limited()
    r = client.get("/api/health")
    assert r.status_code == 200
    body = r.json()
    assert body["apiInCooldown"] is True
    assert body["nextAvailable"] != "now"
    assert body["cacheSize"] == 1


def test_clean_mermaid_variants():
    assert clean_mermaid(f"```mermaid\n{GOOD}\n```") == GOOD
    assert clean_mermaid(f"Here you go:\n```\n{GOOD}\n```\nEnjoy") == GOOD
    assert clean_mermaid(f"  {GOOD}  ") == GOOD
