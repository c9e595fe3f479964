from __future__ import annotations

import logging
from typing import Optional

from openai import OpenAI, OpenAIError

from day_planner.config.settings import load_openai_api_key
from day_planner.errors import MissingCredentialsError, ProviderFetchError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You turn emails, calendar events and tasks into a time-blocked daily plan. "
    "Answer with a single JSON object and nothing else."
)


class OpenAIModelClient:
    """GenerativeModelClient backed by the OpenAI Responses API."""

    def __init__(
        self,
        *,
        model: str,
        timeout: float,
        api_key: Optional[str] = None,
        client: Optional[OpenAI] = None,
    ):
        if client is None:
            key = api_key or load_openai_api_key()
            if not key:
                raise MissingCredentialsError(
                    "No OpenAI API key. Set OPENAI_API_KEY or add secrets/openai_token.txt."
                )
            client = OpenAI(api_key=key, timeout=timeout, max_retries=0)
        self._client = client
        self._model = model

    def complete(self, prompt: str) -> str:
        try:
            resp = self._client.responses.create(
                model=self._model,
                input=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
            )
        except OpenAIError as exc:
            raise ProviderFetchError("model", f"Model call failed: {exc}", cause=exc) from exc

        output_text = getattr(resp, "output_text", None) or ""
        if not output_text:
            # Left to the response parser, which answers with the fallback plan.
            logger.warning("Model returned an empty response")
        return output_text
