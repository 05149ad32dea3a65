from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

import openai

from .config import LLMConfig
from .errors import EnrichmentError, MissingAPIKeyError

# dedicated logger recording every LLM request and response
logger = logging.getLogger("swift_testgen.llm")

SYSTEM_PROMPT = "You are an expert in Swift testing. Only return the test function body."


def configure_llm_log(path: Path | str = "llm_log.log") -> None:
    """Attach a file handler to the LLM logger, once per process."""
    if logger.handlers:
        return
    logger.setLevel(logging.INFO)
    logger.propagate = False
    file_handler = logging.FileHandler(path, encoding="utf-8")
    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)


class LLMClient(Protocol):
    async def complete(self, prompt: str) -> str:  # pragma: no cover - interface
        ...


def read_api_key(config: LLMConfig) -> str | None:
    return os.environ.get(config.api_key_env) or None


@dataclass
class OpenAILLMClient(LLMClient):
    """
    Chat Completions client for any OpenAI-compatible endpoint.

    Configuration is fixed at construction; the API key defaults to the
    environment variable named by ``config.api_key_env``. Any failure is
    raised as :class:`EnrichmentError`.
    """

    config: LLMConfig
    api_key: str | None = None
    client: Any = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.api_key is None:
            self.api_key = read_api_key(self.config)

    def _get_client(self) -> Any:
        if self.client is None:
            if not self.api_key:
                raise MissingAPIKeyError(self.config.api_key_env)
            self.client = openai.AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.config.api_base,
                timeout=self.config.timeout,
                max_retries=0,
            )
        return self.client

    async def complete(self, prompt: str) -> str:
        client = self._get_client()

        logger.info("LLM REQUEST model=%s\nPROMPT:\n%s", self.config.model, prompt)

        try:
            completion = await client.chat.completions.create(
                model=self.config.model,
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
            )
        except openai.APIStatusError as exc:
            raise EnrichmentError(f"Invalid response from API (status {exc.status_code})") from exc
        except openai.APIError as exc:
            raise EnrichmentError(f"Request to API failed: {exc}") from exc

        try:
            content = completion.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as exc:
            raise EnrichmentError("Failed to decode the response from API") from exc
        if not isinstance(content, str):
            raise EnrichmentError("Failed to decode the response from API")

        logger.info("LLM RESPONSE model=%s\nRESPONSE:\n%s", self.config.model, content)

        return content.strip()
