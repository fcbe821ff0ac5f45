"""Tests for the language-model client boundary."""

import asyncio
from datetime import datetime
from unittest.mock import AsyncMock, Mock, patch

import httpx

from worklog.assistant import (
    FAILURE_MESSAGE,
    OFFLINE_MESSAGE,
    UNCONFIGURED_MESSAGE,
    ParsedEntry,
    build_parse_prompt,
    build_summary_prompt,
    parse_activity_input,
    summarize_work,
)
from worklog.config import AppSettings


def _settings():
    return AppSettings(api_key="test-key", api_base_url="https://llm.test/v1beta")


def _reply(text):
    response = Mock()
    response.raise_for_status.return_value = None
    response.json.return_value = {
        "candidates": [{"content": {"parts": [{"text": text}]}}]
    }
    return response


class TestPrompts:
    def test_summary_prompt_marks_unassigned(self, projects, make_activity):
        activities = [
            make_activity("a", datetime(2024, 3, 12, 9), 5400, project_id="1"),
            make_activity("b", datetime(2024, 3, 12, 9), 600, project_id="gone"),
        ]

        prompt = build_summary_prompt(activities, projects)

        assert "Project: Website, Code: DEV, Details: work a, Duration: 90 mins" in prompt
        assert "Project: Unassigned" in prompt

    def test_parse_prompt_lists_projects(self, projects):
        prompt = build_parse_prompt("2h on servers", projects)

        assert "ID: 2, Name: Servers, Client: Cloud" in prompt
        assert 'User input: "2h on servers"' in prompt


class TestSummarizeWork:
    def test_unconfigured(self, projects):
        result = asyncio.run(summarize_work([], projects, AppSettings()))

        assert result == UNCONFIGURED_MESSAGE

    @patch("httpx.AsyncClient.post", new_callable=AsyncMock)
    def test_returns_report_text(self, mock_post, projects):
        mock_post.return_value = _reply("Great week.")

        result = asyncio.run(summarize_work([], projects, _settings()))

        assert result == "Great week."
        url = mock_post.call_args.args[0]
        assert url == "https://llm.test/v1beta/models/gemini-3-flash-preview:generateContent"
        assert mock_post.call_args.kwargs["headers"]["x-goog-api-key"] == "test-key"
        assert mock_post.call_args.kwargs["json"]["generationConfig"] == {"temperature": 0.7}

    @patch("httpx.AsyncClient.post", new_callable=AsyncMock)
    def test_offline_is_a_message(self, mock_post, projects):
        mock_post.side_effect = httpx.ConnectError("no route to host")

        result = asyncio.run(summarize_work([], projects, _settings()))

        assert result == OFFLINE_MESSAGE

    @patch("httpx.AsyncClient.post", new_callable=AsyncMock)
    def test_http_error_is_a_message(self, mock_post, projects):
        response = Mock()
        response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "boom", request=Mock(), response=Mock()
        )
        mock_post.return_value = response

        result = asyncio.run(summarize_work([], projects, _settings()))

        assert result == FAILURE_MESSAGE


class TestParseActivityInput:
    @patch("httpx.AsyncClient.post", new_callable=AsyncMock)
    def test_parses_structured_reply(self, mock_post, projects):
        mock_post.return_value = _reply(
            '{"projectId": "2", "activityCode": "OPS", "durationMinutes": 90, '
            '"description": "Patched servers"}'
        )

        parsed = asyncio.run(parse_activity_input("1.5h patching", projects, _settings()))

        assert parsed == ParsedEntry(
            project_id="2", activity_code="OPS", duration_minutes=90, description="Patched servers"
        )
        assert parsed.duration_seconds == 5400
        config = mock_post.call_args.kwargs["json"]["generationConfig"]
        assert config["responseMimeType"] == "application/json"

    @patch("httpx.AsyncClient.post", new_callable=AsyncMock)
    def test_malformed_reply_is_none(self, mock_post, projects):
        mock_post.return_value = _reply("not json at all")

        assert asyncio.run(parse_activity_input("something", projects, _settings())) is None

    @patch("httpx.AsyncClient.post", new_callable=AsyncMock)
    def test_offline_is_none(self, mock_post, projects):
        mock_post.side_effect = httpx.ConnectTimeout("timed out")

        assert asyncio.run(parse_activity_input("something", projects, _settings())) is None

    def test_unconfigured_is_none(self, projects):
        assert asyncio.run(parse_activity_input("x", projects, AppSettings())) is None


class TestParsedEntry:
    def test_short_durations_floor_to_fifteen_minutes(self):
        entry = ParsedEntry(project_id="1", duration_minutes=5, description="")

        assert entry.duration_seconds == 900
        assert entry.code == "---"
