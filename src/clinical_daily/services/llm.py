"""Clinical synopsis of an abstract via the Anthropic API."""

import logging
from functools import lru_cache

from anthropic import APIError, AsyncAnthropic
from dotenv import load_dotenv
from pydantic import ValidationError

from clinical_daily.config import get_settings
from clinical_daily.models.model_article import AISummary

load_dotenv()

logger = logging.getLogger(__name__)

SUMMARY_TOOL_NAME = "record_clinical_summary"

SUMMARY_PROMPT = (
    "You are an expert clinical research assistant.\n"
    "Analyze the following medical abstract and provide a structured summary "
    "suitable for a clinician.\n\n"
    'Abstract:\n"{abstract}"\n\n'
    "Extract the following key information:\n"
    "1. Research Design (e.g., Phase III, Randomized, Double-blind)\n"
    "2. Study Population (Size, key criteria)\n"
    "3. Interventions (Experimental vs. Control)\n"
    "4. Endpoints (Primary and key secondary)\n"
    "5. Results (Key stats, p-values, HR)\n\n"
    f"Record the summary with the {SUMMARY_TOOL_NAME} tool."
)


class SummaryError(Exception):
    """Raised when a synopsis could not be produced. Safe to retry."""

    pass


def summary_tool() -> dict:
    """Tool definition whose input schema is the five required AISummary fields."""
    return {
        "name": SUMMARY_TOOL_NAME,
        "description": "Record a structured clinical summary of a trial abstract.",
        "input_schema": AISummary.model_json_schema(by_alias=True),
    }


@lru_cache
def get_client() -> AsyncAnthropic:
    return AsyncAnthropic(api_key=get_settings().anthropic_api_key)


async def request_summary(abstract: str) -> AISummary:
    """Summarize one abstract.

    Raises:
        SummaryError: missing API key, API failure, or a response that does
            not carry all five fields.
    """
    settings = get_settings()
    if not settings.anthropic_api_key:
        raise SummaryError(
            "API key is missing. Please set the ANTHROPIC_API_KEY environment variable."
        )

    try:
        response = await get_client().messages.create(
            model=settings.llm_model,
            max_tokens=settings.summary_max_tokens,
            tools=[summary_tool()],
            tool_choice={"type": "tool", "name": SUMMARY_TOOL_NAME},
            messages=[
                {"role": "user", "content": SUMMARY_PROMPT.format(abstract=abstract)}
            ],
        )
    except APIError as e:
        logger.error("Error generating summary: %s", e)
        raise SummaryError(f"Summarization request failed: {e}") from e

    tool_input = next(
        (
            block.input
            for block in response.content
            if block.type == "tool_use" and block.name == SUMMARY_TOOL_NAME
        ),
        None,
    )
    if tool_input is None:
        raise SummaryError("Empty response from AI")

    try:
        return AISummary.model_validate(tool_input)
    except ValidationError as e:
        logger.error("Summary response failed validation: %s", e)
        raise SummaryError("Summary response was missing required fields") from e
