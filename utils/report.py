"""
utils/report.py
---------------
Monthly report narration with Google Gemini.

The model only sees the aggregated summary and a small sample of
incidents; it is treated as an opaque "summary in, markdown out"
function. The client is created once by the caller (make_client) and
passed in, so tests can supply a stub.

request_crime_report() raises ReportUnavailable (carrying the message
to show) so cached callers can skip caching failures.
generate_crime_report() never raises: failures come back as that
short message instead.
"""

import json
import os

from google import genai

from utils.constants import (
    API_KEY_ENV_VARS,
    AREA_LABEL,
    GEMINI_MODEL,
    REPORT_CONNECTION_ERROR,
    REPORT_NO_CLIENT,
    REPORT_SAMPLE_SIZE,
    REPORT_UNAVAILABLE,
)
from utils.helpers import format_period
from utils.models import IncidentRecord

UNDER_INVESTIGATION = "Under investigation"


def make_client(api_key: str | None = None) -> genai.Client | None:
    """
    Build a Gemini client.

    The key is read from GEMINI_API_KEY (or API_KEY) when not given.
    Returns None if no key is available so callers can skip narration.
    """
    if api_key is None:
        api_key = next(
            (os.environ[v] for v in API_KEY_ENV_VARS if os.environ.get(v)), None,
        )
    if not api_key:
        return None
    return genai.Client(api_key=api_key)


def incident_sample(records: list[IncidentRecord], limit: int = REPORT_SAMPLE_SIZE) -> list[dict]:
    """First `limit` incidents reduced to category, street and outcome."""
    return [
        {
            "category": r.category,
            "street":   r.street_name,
            "outcome":  (r.outcome.category if r.outcome and r.outcome.category
                         else UNDER_INVESTIGATION),
        }
        for r in records[:limit]
    ]


def build_report_prompt(
    period: str,
    summary: dict,
    records: list[IncidentRecord],
    area_label: str = AREA_LABEL,
) -> str:
    breakdown = "\n".join(
        f"- {row.name}: {row.value}"
        for row in summary["by_category"].itertuples(index=False)
    ) or "- No crimes recorded"

    return f"""
You are a crime analyst for the {area_label}.
Generate a professional, concise, yet detailed monthly crime report for {format_period(period)} ({period}).

Data Summary:
- Total Crimes: {summary["total"]}
- Most Frequent Category: {summary["most_frequent_category"]}

Breakdown by Category:
{breakdown}

Notable Incidents (Raw Data Sample):
{json.dumps(incident_sample(records))}

Instructions:
1. Write a headline summarizing the month's safety status.
2. Provide a narrative overview of the trends.
3. Highlight specific areas (streets) if they appear frequently in the raw data.
4. Conclude with community safety advice based on the types of crimes (e.g., if burglary is high, suggest locking doors).
5. Format with Markdown.
6. Keep the tone objective but reassuring where possible.
""".strip()


class ReportUnavailable(Exception):
    """No narrative could be produced; `message` is shown in its place."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


def request_crime_report(
    client,
    period: str,
    summary: dict,
    records: list[IncidentRecord],
    model: str = GEMINI_MODEL,
) -> str:
    """
    Ask Gemini for the monthly narrative.

    Args:
        client:  genai.Client (or any object with models.generate_content),
                 or None when no API key is configured.
        period:  Reporting month, YYYY-MM.
        summary: Output of utils.summary.build_summary().
        records: Incidents for the month.
        model:   Gemini model name.

    Returns:
        Markdown text.

    Raises:
        ReportUnavailable: no client, the call failed, or the model
                           returned no text.
    """
    if client is None:
        raise ReportUnavailable(REPORT_NO_CLIENT)

    prompt = build_report_prompt(period, summary, records)
    try:
        response = client.models.generate_content(model=model, contents=prompt)
    except Exception as e:
        print(f"  WARNING: Gemini generation failed: {e}")
        raise ReportUnavailable(REPORT_CONNECTION_ERROR) from e

    text = getattr(response, "text", None)
    if not text:
        raise ReportUnavailable(REPORT_UNAVAILABLE)
    return text


def generate_crime_report(
    client,
    period: str,
    summary: dict,
    records: list[IncidentRecord],
    model: str = GEMINI_MODEL,
) -> str:
    """Like request_crime_report(), but returns the fallback message instead of raising."""
    try:
        return request_crime_report(client, period, summary, records, model=model)
    except ReportUnavailable as e:
        return e.message
