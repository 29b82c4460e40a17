# src/taskquest/llm/classifier.py

from __future__ import annotations

import json
import logging
import re
import time
from typing import Any, Dict, List

import httpx
import openai
from openai import OpenAI

from ..core.errors import ClassifierUnavailable

logger = logging.getLogger(__name__)

_PRIORITY_WORDS = ("high", "medium", "low")
_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)

PROMPT_TEMPLATE = (
    "You are a productivity assistant. Given a short task title, respond with a strict "
    "JSON object and nothing else:\n"
    '{{"priority":"high|medium|low","category":"one of: {categories}",'
    '"description":"1-2 sentences expanding the title"}}\n'
    "Title: {title}"
)


def _is_auth_error(exc: Exception) -> bool:
    return isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError))


def _is_not_found_error(exc: Exception) -> bool:
    return isinstance(exc, openai.NotFoundError)


def _is_rate_limit_error(exc: Exception) -> bool:
    return isinstance(exc, openai.RateLimitError)


def _is_connection_error(exc: Exception) -> bool:
    return isinstance(exc, (openai.APIConnectionError, openai.APITimeoutError))


def parse_suggestion_text(text: str) -> dict[str, Any]:
    """
    Turn a model reply into a raw suggestion mapping.

    Strict JSON is preferred; a JSON object embedded in prose is accepted too.
    Otherwise the first priority word mentioned anywhere is used and the rest
    is left for the caller to default.
    """
    raw = (text or "").strip()
    if not raw:
        raise ClassifierUnavailable("Classifier returned no content.")

    candidates = [raw]
    m = _JSON_OBJECT_RE.search(raw)
    if m and m.group(0) != raw:
        candidates.append(m.group(0))

    for cand in candidates:
        try:
            data = json.loads(cand)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data

    lower = raw.lower()
    for word in _PRIORITY_WORDS:
        if word in lower:
            return {"priority": word}
    return {}


class OpenRouterTaskClassifier:
    """
    OpenAI-compatible (OpenRouter) task classifier.

    Behavior:
    - Tries models in the configured order.
    - 404 (model not available) -> skip the model for an hour, try next.
    - Rate limit / network issues -> try next.
    - Auth issues -> fail fast.
    - Everything failing -> ClassifierUnavailable.
    """

    def __init__(self, settings: Any) -> None:
        api_key = getattr(settings, "openrouter_api_key", None)
        base_url = getattr(settings, "openrouter_base_url", "") or ""

        if not api_key or not str(api_key).strip():
            raise RuntimeError(
                "Classifier API key is not set. Set TASKQUEST_OPENROUTER_API_KEY in your .env."
            )
        if not base_url.strip():
            raise RuntimeError(
                "Classifier base URL is not set. Set TASKQUEST_OPENROUTER_BASE_URL in your .env."
            )

        self._models: List[str] = [
            m.strip() for m in (getattr(settings, "llm_models", []) or []) if m and m.strip()
        ]
        if not self._models:
            raise RuntimeError("Classifier model list is empty. Set TASKQUEST_LLM_MODELS in your .env.")

        self._headers: Dict[str, str] = dict(getattr(settings, "extra_headers", {}) or {})
        timeout_s = float(getattr(settings, "llm_timeout_seconds", 20.0))

        # No automatic retries: a failing model falls through to the next one quickly.
        self._client = OpenAI(
            base_url=str(base_url),
            api_key=str(api_key),
            timeout=httpx.Timeout(connect=5.0, read=timeout_s, write=10.0, pool=5.0),
            max_retries=0,
        )
        self._bad_models: dict[str, float] = {}  # model -> retry_at (monotonic)

    def _complete(self, model: str, prompt: str) -> str:
        resp = self._client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            temperature=0.3,
            max_tokens=200,
            extra_headers=self._headers or None,
        )
        choice0 = resp.choices[0] if resp.choices else None
        content = choice0.message.content if choice0 is not None else None
        return content or ""

    def classify(self, text: str, *, categories: list[str]) -> dict[str, Any]:
        prompt = PROMPT_TEMPLATE.format(categories=", ".join(categories), title=text)
        last_error: Exception | None = None
        now = time.monotonic()

        for model in self._models:
            retry_at = self._bad_models.get(model)
            if retry_at is not None and retry_at > now:
                continue

            t0 = time.monotonic()
            try:
                content = self._complete(model, prompt)
                logger.info("Classifier: model=%s answered in %.2fs", model, time.monotonic() - t0)
                return parse_suggestion_text(content)

            except ClassifierUnavailable as e:
                last_error = e
                logger.info("Classifier: empty reply from model=%s, trying next", model)
                continue

            except Exception as e:
                last_error = e

                if _is_auth_error(e):
                    raise ClassifierUnavailable(
                        "Classifier authentication failed. Check TASKQUEST_OPENROUTER_API_KEY."
                    ) from e

                if _is_not_found_error(e):
                    self._bad_models[model] = time.monotonic() + 3600.0
                    logger.info("Classifier: model not available (404): %s", model)
                    continue

                if _is_rate_limit_error(e):
                    logger.info("Classifier: rate-limited on model=%s, trying next", model)
                    continue

                if _is_connection_error(e):
                    logger.info("Classifier: network/timeout error on model=%s, trying next", model)
                    continue

                logger.info("Classifier: error on model=%s (%s), trying next", model, e.__class__.__name__)
                continue

        raise ClassifierUnavailable("All classifier models failed.") from last_error
