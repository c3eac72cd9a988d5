import time

import pytest
from fastapi.testclient import TestClient

from cbt_insights.main import app


@pytest.fixture(scope="module")
def client():
    with TestClient(app) as c:
        yield c


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "ok"
    assert body["diary_threshold"] == 0.7
    assert body["limits"] == {"max_messages": 500, "max_message_chars": 100_000}


def test_detect(client, card_message, diary_markdown):
    messages = [card_message, {"role": "user", "content": diary_markdown}]
    res = client.post("/cbt/detect", json={"messages": messages})
    assert res.status_code == 200
    assert res.json() == {"has_cbt_data": True, "diary_messages": 1}


def test_parse_card_uses_camel_case(client, card_message):
    res = client.post("/cbt/parse", json={"messages": [card_message]})
    assert res.status_code == 200
    body = res.json()
    assert body["situation"] == {"date": "2024-01-15", "description": "Feeling overwhelmed at work"}
    assert body["emotions"]["initial"] == {"anxiety": 8}
    assert body["coreBeliefs"] is None
    assert body["challengeQuestions"] is None


def test_summary(client, legacy_messages):
    res = client.post("/cbt/summary", json={"messages": legacy_messages})
    assert res.status_code == 200
    body = res.json()
    assert body["has_cbt_data"] is True
    assert body["summary"].startswith("**Situation**: Presentation at work (2024-02-01)")

    empty = client.post("/cbt/summary", json={"messages": [{"role": "user", "content": "hi"}]})
    assert empty.json() == {"has_cbt_data": False, "summary": ""}


def test_diary(client, diary_markdown):
    res = client.post("/cbt/diary", json={"content": diary_markdown})
    assert res.status_code == 200
    body = res.json()
    assert body["kind"] == "diary"
    assert body["isComplete"] is True
    assert body["formData"]["date"] == "2024-03-05"
    assert body["formData"]["coreBeliefText"] == "I must be perfect"


def test_content_tier(client):
    messages = [{"role": "user", "content": "Just wanted to check in and say hi."}]
    res = client.post("/reports/content-tier", json={"messages": messages})
    assert res.status_code == 200
    body = res.json()
    assert body["analysis"]["tier"] == "tier3_minimal"
    assert body["analysis"]["analysisRecommendation"]["analysisDepth"] == "surface"
    assert body["meets_threshold"] is False
    assert body["explanation"].startswith("Content classified as: Brief Supportive Response")


def test_report_context(client, legacy_messages):
    res = client.post("/reports/context", json={"messages": legacy_messages})
    assert res.status_code == 200
    body = res.json()
    assert body["hasCbtData"] is True
    assert body["dataSource"] == "parsed"
    assert body["cbtData"]["situation"]["description"] == "Presentation at work"
    assert body["cbtSummary"].startswith("**Situation**")
    assert body["contentTier"]["tier"] in ("tier1_premium", "tier2_standard", "tier3_minimal")
    assert "userDataPriority" in body


def test_report_context_without_cbt_data(client):
    res = client.post("/reports/context", json={"messages": []})
    body = res.json()
    assert body["hasCbtData"] is False
    assert body["dataSource"] == "none"
    assert body["cbtData"] is None
    assert body["cbtSummary"] == ""
    assert body["contentTier"]["confidence"] == 100


def test_too_many_messages(client):
    messages = [{"role": "user", "content": "hi"}] * 501
    res = client.post("/cbt/parse", json={"messages": messages})
    assert res.status_code == 413


def test_message_too_long(client):
    res = client.post("/reports/context", json={"messages": [{"role": "user", "content": "a" * 100_001}]})
    assert res.status_code == 413


def test_message_at_char_limit_is_classified_quickly(client):
    content = ("organize all for " * 6000)[:100_000]
    started = time.perf_counter()
    res = client.post("/reports/content-tier", json={"messages": [{"role": "user", "content": content}]})
    assert res.status_code == 200
    assert res.json()["analysis"]["tier"] == "tier3_minimal"
    assert time.perf_counter() - started < 5

    over = client.post("/reports/content-tier", json={"messages": [{"role": "user", "content": content + "!"}]})
    assert over.status_code == 413


def test_diary_too_long(client):
    assert client.post("/cbt/diary", json={"content": "a" * 100_001}).status_code == 413


def test_malformed_request(client):
    assert client.post("/cbt/parse", json={"messages": "oops"}).status_code == 422
