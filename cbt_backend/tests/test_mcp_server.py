import importlib

import pytest

import mcp_server.server as server_module
from cbt_insights.core import logging_config
from cbt_insights.exceptions import TranscriptTooLargeError
from mcp_server.server import analyze_cbt_transcript


def test_tool_returns_plain_json(legacy_messages):
    result = analyze_cbt_transcript(legacy_messages)

    assert result["hasCbtData"] is True
    assert result["dataSource"] == "parsed"
    assert result["cbtData"]["coreBeliefs"] == {"belief": "I am not good enough", "credibility": 7}
    assert result["contentTier"]["analysisRecommendation"]["analysisDepth"] in ("surface", "moderate", "comprehensive")
    assert isinstance(result["userDataPriority"]["userAssessmentTypes"], list)


def test_tool_with_diary_message(diary_markdown):
    result = analyze_cbt_transcript([{"role": "user", "content": diary_markdown}])
    assert result["hasCbtData"] is False
    assert result["contentTier"]["tier"] == "tier1_premium"
    assert result["userDataPriority"]["shouldPrioritizeUserData"] is True


def test_tool_enforces_limits():
    with pytest.raises(TranscriptTooLargeError) as exc:
        analyze_cbt_transcript([{"role": "user", "content": "x"}] * 501)
    assert exc.value.limit == 500
    assert exc.value.actual == 501


def test_tool_message_length_limit():
    content = "my anxiety level is was " * 4166 + "my anxiety level"
    assert len(content) == 100_000
    result = analyze_cbt_transcript([{"role": "user", "content": content}])
    assert result["hasCbtData"] is False

    with pytest.raises(TranscriptTooLargeError) as exc:
        analyze_cbt_transcript([{"role": "user", "content": content + "x"}])
    assert (exc.value.limit, exc.value.actual) == (100_000, 100_001)


def test_import_leaves_logging_alone(monkeypatch):
    calls = []
    monkeypatch.setattr(logging_config, "setup_logging", lambda settings: calls.append(settings))
    importlib.reload(server_module)
    assert calls == []

    monkeypatch.undo()
    importlib.reload(server_module)


def test_main_configures_logging_then_runs(monkeypatch):
    calls = []
    monkeypatch.setattr(server_module, "setup_logging", lambda settings: calls.append("logging"))
    monkeypatch.setattr(server_module.server, "run", lambda: calls.append("run"))
    server_module.main()
    assert calls == ["logging", "run"]
