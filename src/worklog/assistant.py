"""Client for the language-model service used for reports and entry parsing.

Both calls degrade gracefully: ``summarize_work`` returns an explanatory
message and ``parse_activity_input`` returns ``None`` whenever the service is
unreachable, unconfigured or answers with something unusable.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import httpx
from pydantic import Field, ValidationError

from .aggregation import project_label
from .config import AppSettings
from .lifecycle import MIN_TIMER_SECONDS
from .models import NO_ACTIVITY_CODE, Activity, Project
from .schemas import RecordModel

logger = logging.getLogger(__name__)

OFFLINE_MESSAGE = "The AI report needs an internet connection and is not available offline."
UNCONFIGURED_MESSAGE = "The AI report is not configured: set WORKLOG_API_KEY to enable it."
FAILURE_MESSAGE = "Unable to generate the AI report right now."

SUMMARY_PROMPT = """\
Analyze these work activities and write a concise, professional report.
Organize it by project. For each project, summarize the main results based on
the activity codes and descriptions. Finish with one suggestion on improving
time management or an observation about the trends.

Activities:
{activities}
"""

PARSE_PROMPT = """\
Turn the following user sentence into structured data for a timesheet entry.
Find the matching project among the ones provided.
Extract an activity code (short string, leave empty if none can be found) and a description.
Extract the duration in minutes.

Available projects:
{projects}

User input: "{text}"

Answer strictly in JSON:
{{
  "projectId": "string (project id)",
  "activityCode": "string (optional)",
  "durationMinutes": number,
  "description": "string"
}}
"""

PARSE_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "projectId": {"type": "STRING"},
        "activityCode": {"type": "STRING"},
        "durationMinutes": {"type": "NUMBER"},
        "description": {"type": "STRING"},
    },
    "required": ["projectId", "durationMinutes", "description"],
}


class ParsedEntry(RecordModel):
    project_id: str
    activity_code: Optional[str] = None
    duration_minutes: float = Field(ge=0)
    description: str = ""

    @property
    def duration_seconds(self) -> int:
        return max(int(self.duration_minutes * 60), MIN_TIMER_SECONDS)

    @property
    def code(self) -> str:
        return self.activity_code or NO_ACTIVITY_CODE


def build_summary_prompt(activities: Sequence[Activity], projects: Sequence[Project]) -> str:
    lines = [
        f"Project: {project_label(projects, a.project_id)}, "
        f"Code: {a.activity_code}, "
        f"Details: {a.description or 'N/A'}, "
        f"Duration: {round(a.duration_seconds / 60)} mins"
        for a in activities
    ]
    return SUMMARY_PROMPT.format(activities="\n".join(lines))


def build_parse_prompt(text: str, projects: Sequence[Project]) -> str:
    project_lines = "\n".join(
        f"ID: {p.id}, Name: {p.name}, Client: {p.client}" for p in projects
    )
    return PARSE_PROMPT.format(projects=project_lines, text=text)


async def summarize_work(
    activities: Sequence[Activity],
    projects: Sequence[Project],
    settings: AppSettings,
) -> str:
    if not settings.assistant_enabled:
        return UNCONFIGURED_MESSAGE
    prompt = build_summary_prompt(activities, projects)
    try:
        text = await _generate(
            settings,
            settings.summary_model,
            prompt,
            {"temperature": 0.7},
        )
    except httpx.TransportError as exc:
        logger.warning("Assistant unreachable: %s", exc)
        return OFFLINE_MESSAGE
    except (httpx.HTTPStatusError, KeyError, IndexError, TypeError, ValueError):
        logger.exception("Assistant report request failed.")
        return FAILURE_MESSAGE
    return text or FAILURE_MESSAGE


async def parse_activity_input(
    text: str,
    projects: Sequence[Project],
    settings: AppSettings,
) -> Optional[ParsedEntry]:
    if not settings.assistant_enabled or not text.strip():
        return None
    prompt = build_parse_prompt(text, projects)
    try:
        raw = await _generate(
            settings,
            settings.parse_model,
            prompt,
            {
                "responseMimeType": "application/json",
                "responseSchema": PARSE_RESPONSE_SCHEMA,
            },
        )
    except httpx.TransportError as exc:
        logger.warning("Assistant unreachable: %s", exc)
        return None
    except (httpx.HTTPStatusError, KeyError, IndexError, TypeError, ValueError):
        logger.exception("Assistant parse request failed.")
        return None
    if not raw:
        return None
    try:
        return ParsedEntry.model_validate_json(raw)
    except ValidationError:
        logger.warning("Assistant returned an unusable entry: %s", raw)
        return None


async def _generate(
    settings: AppSettings,
    model: str,
    prompt: str,
    generation_config: dict[str, Any],
) -> str:
    url = f"{settings.api_base_url}/models/{model}:generateContent"
    payload = {
        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        "generationConfig": generation_config,
    }
    headers = {
        "x-goog-api-key": settings.api_key or "",
        "Content-Type": "application/json",
    }
    async with httpx.AsyncClient(timeout=settings.request_timeout) as client:
        response = await client.post(url, headers=headers, json=payload)
    response.raise_for_status()
    data = response.json()
    parts = data["candidates"][0]["content"]["parts"]
    return "".join(part.get("text", "") for part in parts)
