"""
Model response aggregator
Drives every configured model in order and combines their verbose and summary outputs
"""

import asyncio
import json
import logging
from typing import Sequence

from langchain_core.utils.json import parse_json_markdown
from pydantic import ValidationError

from ..errors import SOURCE_OPENROUTER, GenerationFailure, log_error_info, normalize_error
from ..models.quality_models import (
    AggregateResult,
    ModelRun,
    ModelSummary,
    ParsedSummary,
    SummaryResult,
    UnparseableSummary
)

logger = logging.getLogger(__name__)

MODEL_SEPARATOR = "<br /><br /><br />=================================<br />"


def response_label(model_name: str) -> str:
    return f"<b>ResponseModel:-</b> {model_name} <br /><br/>"


def summary_block(model_name: str, summary: ParsedSummary) -> str:
    return (
        f"\n<b>Model:-</b> {model_name}"
        f"\n<b>Summary:-</b> {summary.summary}"
        f"\n<b>Score:-</b> {summary.score}"
    )


def parse_summary(raw: str) -> SummaryResult:
    """
    Decide once whether a summarization response is usable

    Args:
        raw: Text returned by the summarization call

    Returns:
        SummaryResult: ParsedSummary, or UnparseableSummary carrying the reason
    """
    cleaned = raw.replace("```json", "").replace("```", "").strip()
    try:
        # json.loads rejects truncated output that the partial parser would close
        data = parse_json_markdown(cleaned, parser=json.loads)
    except json.JSONDecodeError as e:
        return UnparseableSummary(raw=raw, reason=f"invalid JSON: {e}")

    if not isinstance(data, dict):
        return UnparseableSummary(raw=raw, reason="expected a JSON object")

    try:
        model_summary = ModelSummary.model_validate(data)
    except ValidationError as e:
        return UnparseableSummary(raw=raw, reason=f"unexpected shape: {e.error_count()} validation error(s)")

    return ParsedSummary(summary=model_summary.summary, score=model_summary.score)


class ModelResponseAggregator:
    """
    Calls each configured model sequentially: one grounded generation call,
    then one summarization call on the generated text.
    """

    def __init__(self,
                 llm_client,
                 summarize_prompt: str,
                 summary_header: str = "",
                 initial_delay: float = 0.0):
        """
        Initialize aggregator

        Args:
            llm_client: Gateway with generate() and make_call_to_model()
            summarize_prompt: Prompt used for the summarization call
            summary_header: Text the summary response starts with
            initial_delay: Seconds to wait before the first model call
        """
        self.llm_client = llm_client
        self.summarize_prompt = summarize_prompt
        self.summary_header = summary_header
        self.initial_delay = initial_delay

    async def run(self, model_names: Sequence[str], index_key: str, prompt: str) -> AggregateResult:
        """
        Run every model in input order

        Args:
            model_names: Ordered model identifiers (duplicates are called twice)
            index_key: Document index used for grounding
            prompt: Final user prompt

        Returns:
            AggregateResult: Combined responses

        Raises:
            GenerationFailure: If any model call fails; no partial result is returned
        """
        result = AggregateResult(summary_response=self.summary_header)

        if self.initial_delay > 0:
            logger.info(f"⏳ Waiting {self.initial_delay:g} seconds before calling the model gateway")
            await asyncio.sleep(self.initial_delay)

        for model_name in model_names:
            logger.info(f"🤖 Calling model: {model_name}")
            try:
                verbose = await self.llm_client.generate(model_name, index_key, prompt)
            except Exception as e:
                raise self._failure(model_name, e, "Generation failed") from e

            result.full_response += response_label(model_name) + verbose

            logger.info(f"📊 Generating summary for model: {model_name}")
            try:
                raw_summary = await self.llm_client.make_call_to_model(model_name, verbose, self.summarize_prompt)
            except Exception as e:
                raise self._failure(model_name, e, "Summarization failed") from e

            summary = parse_summary(raw_summary)
            if isinstance(summary, ParsedSummary):
                result.summary_response += summary_block(model_name, summary)
            else:
                logger.error(f"Failed to parse summary for model {model_name}: {summary.reason}")

            if len(model_names) > 1:
                result.full_response += MODEL_SEPARATOR

            result.model_runs.append(ModelRun(model_name=model_name, verbose_response=verbose, summary=summary))
            logger.info(f"✅ Model {model_name} completed")

        return result

    def _failure(self, model_name: str, exc: Exception, context: str) -> GenerationFailure:
        info = normalize_error(exc, SOURCE_OPENROUTER)
        log_error_info(info, f"{context} for model {model_name}")
        return GenerationFailure(model_name, info)


__all__ = ["MODEL_SEPARATOR", "ModelResponseAggregator", "parse_summary", "response_label", "summary_block"]
