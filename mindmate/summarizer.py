"""On-demand summary of an inside-out conversation: summary plus advice."""

import logging
import re
from collections.abc import Sequence

from config.config_loader import PromptsConfig
from mindmate.models import SummaryResult, TranscriptEntry
from mindmate.providers.base import AIProvider
from mindmate.responder import format_history

logger = logging.getLogger(__name__)

NO_SUMMARY = "Could not generate summary."
NO_ADVICE = "Could not generate advice."
SUMMARY_NOT_FOUND = "Summary not found."
ADVICE_NOT_FOUND = "Advice not found."
SUMMARY_ERROR = "Error generating summary."
ADVICE_ERROR = "Error generating advice."

_EMPTY_TRANSCRIPT = "(no messages)"

# Labels may come back wrapped in markdown bold: "**Summary:**"
_SUMMARY_RE = re.compile(r"(?:\*\*)?Summary:(?:\*\*)?\s*(.*?)\s*(?=(?:\*\*)?Advice:|\Z)", re.DOTALL | re.IGNORECASE)
_ADVICE_RE = re.compile(r"(?:\*\*)?Advice:(?:\*\*)?\s*(.*)", re.DOTALL | re.IGNORECASE)


def parse_summary_output(raw: str) -> SummaryResult:
    """Salvage a summary and advice from free-form model output.

    Tries the labeled sections first, then falls back to the raw text or
    placeholder strings. Never raises; both fields are always non-empty.
    """
    text = (raw or "").strip()
    if not text:
        return SummaryResult(summary=NO_SUMMARY, advice=NO_ADVICE)

    summary_match = _SUMMARY_RE.search(text)
    advice_match = _ADVICE_RE.search(text)

    summary = summary_match.group(1).strip() if summary_match else ""
    advice = advice_match.group(1).strip() if advice_match else ""

    if not summary:
        summary = text if not advice_match else SUMMARY_NOT_FOUND
    if not advice:
        advice = text if not summary_match else ADVICE_NOT_FOUND

    # Unlabeled output lands in both fields; treat the first line as the summary.
    if summary == advice:
        head, sep, tail = summary.partition("\n")
        if sep and head.strip() and tail.strip():
            summary, advice = head.strip(), tail.strip()

    return SummaryResult(summary=summary, advice=advice)


async def summarize(
    transcript: Sequence[TranscriptEntry],
    original_input: str,
    provider: AIProvider,
    prompts: PromptsConfig,
    temperature: float | None = 0.5,
) -> SummaryResult:
    """Ask the model to summarize the debate and give advice.

    Args:
        transcript: Whole conversation, user and agent entries, oldest first.
        original_input: The user message that started the conversation.
        provider: Language-model collaborator.
        prompts: Prompt templates; ``prompts.summary`` is filled here.
        temperature: Sampling temperature for the summary call.

    Returns:
        SummaryResult with both fields populated, even on model failure.
    """
    history = format_history(transcript) if transcript else _EMPTY_TRANSCRIPT
    prompt = prompts.summary.format(user_input=original_input, history=history)

    logger.info("Generating summary via %s (%d entries)", provider.name(), len(transcript))

    try:
        response = await provider.invoke(prompt, temperature=temperature)
    except Exception as exc:
        logger.warning("Summary generation failed via %s: %s", provider.name(), exc)
        return SummaryResult(summary=SUMMARY_ERROR, advice=ADVICE_ERROR)

    result = parse_summary_output(response.text)
    if result.summary in (NO_SUMMARY, SUMMARY_NOT_FOUND) or result.advice in (NO_ADVICE, ADVICE_NOT_FOUND):
        logger.warning("Summary output was not in the expected Summary/Advice format")
    return result
