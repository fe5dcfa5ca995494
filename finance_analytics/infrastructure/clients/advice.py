"""Advice collaborator client - text generation with bounded timeout and template fallback"""

import asyncio
import json
import logging
import re
import time
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI, OpenAIError

from finance_analytics.config import Settings, settings
from finance_analytics.domain.exceptions import AdviceUnavailableError
from finance_analytics.infrastructure.observability.metrics import advice_latency_histogram, record_advice

FALLBACK_ADVICE = [
    "Keep an eye on categories where spending keeps growing",
    "Set budgets for your largest expense categories",
    "Review your reports regularly to spot spending patterns",
]

SYSTEM_PROMPT = (
    "You are a personal finance advisor. You receive a JSON summary of a user's "
    "finances. Reply with 3 to 5 short, practical tips, one per line, with no "
    "numbering, headings or extra text."
)

_BULLET = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s*")
MIN_ADVICE_LENGTH = 10


def build_prompt(summary: Dict[str, Any]) -> str:
    return "Financial summary:\n" + json.dumps(summary, ensure_ascii=False, indent=2, default=str)


def _json_items(text: str) -> Optional[List[str]]:
    try:
        items = json.loads(text)
    except ValueError:
        return None
    if isinstance(items, list) and all(isinstance(item, str) for item in items):
        return items
    return None


def parse_advice(text: str, max_items: int) -> List[str]:
    """Split model output into tips, dropping bullets, numbering and short fragments

    A JSON array of strings is taken item by item; anything else is read line by line.
    """
    items = _json_items(text.strip())
    if items is None:
        items = text.splitlines()
    lines = (_BULLET.sub("", line).strip() for line in items)
    return [line for line in lines if len(line) > MIN_ADVICE_LENGTH][:max_items]


class AdviceClient:
    """
    Wrapper around the external text-generation service.

    The AsyncOpenAI handle is injected and owned by the application; pass
    None to run in fallback-only mode. generate_advice never raises for
    collaborator failures: it returns FALLBACK_ADVICE instead.
    """

    def __init__(
        self,
        openai_client: Optional[AsyncOpenAI] = None,
        model: str | None = None,
        timeout: float | None = None,
        temperature: float | None = None,
        max_items: int | None = None,
    ):
        self.openai_client = openai_client
        self.model = model or settings.advice_model
        self.timeout = timeout or settings.advice_timeout_seconds
        self.temperature = settings.advice_temperature if temperature is None else temperature
        self.max_items = max_items or settings.advice_max_items

    @property
    def enabled(self) -> bool:
        return self.openai_client is not None

    async def generate_advice(self, summary: Dict[str, Any]) -> List[str]:
        """
        Ask the collaborator for tips about a structured summary.

        Returns:
            Generated tips, or FALLBACK_ADVICE on timeout, API error or
            unusable output
        """
        if not self.enabled:
            record_advice("fallback", "disabled")
            return list(FALLBACK_ADVICE)

        start_time = time.perf_counter()
        try:
            advice = await asyncio.wait_for(self._request(summary), timeout=self.timeout)
        except asyncio.TimeoutError:
            reason = "timeout"
            logging.warning(f"Advice generation timed out after {self.timeout}s", extra={"reason": reason})
        except AdviceUnavailableError as e:
            reason = "empty"
            logging.warning(f"Advice generation returned no usable text: {e}", extra={"reason": reason})
        except OpenAIError as e:
            reason = "error"
            logging.warning(f"Advice generation failed: {e}", extra={"reason": reason})
        except Exception as e:
            reason = "error"
            logging.warning(f"Advice generation failed unexpectedly: {e!r}", extra={"reason": reason})
        else:
            advice_latency_histogram.observe(time.perf_counter() - start_time)
            record_advice("generated")
            return advice

        record_advice("fallback", reason)
        return list(FALLBACK_ADVICE)

    async def _request(self, summary: Dict[str, Any]) -> List[str]:
        response = await self.openai_client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(summary)},
            ],
            temperature=self.temperature,
        )

        try:
            text = response.choices[0].message.content or ""
        except (AttributeError, IndexError, TypeError) as e:
            raise AdviceUnavailableError(f"Malformed completion: {e}") from e
        if not isinstance(text, str):
            raise AdviceUnavailableError(f"Malformed completion content: {type(text).__name__}")

        advice = parse_advice(text, self.max_items)
        if not advice:
            raise AdviceUnavailableError("Completion contained no advice lines")
        return advice

    async def aclose(self) -> None:
        if self.openai_client is not None:
            await self.openai_client.close()


def build_advice_client(config: Settings = settings) -> AdviceClient:
    """Construct the process-wide advice client; fallback-only without an API key"""
    openai_client = None
    if config.openai_api_key:
        openai_client = AsyncOpenAI(
            api_key=config.openai_api_key,
            base_url=config.openai_base_url,
            timeout=config.advice_timeout_seconds,
            max_retries=0,
        )

    return AdviceClient(
        openai_client=openai_client,
        model=config.advice_model,
        timeout=config.advice_timeout_seconds,
        temperature=config.advice_temperature,
        max_items=config.advice_max_items,
    )
