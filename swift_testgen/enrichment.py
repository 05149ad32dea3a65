from __future__ import annotations

import asyncio
import re

from .config import LLMConfig
from .errors import EnrichmentError
from .llm_client import LLMClient
from .models import DeclaredFunction, DeclaredType
from .prompts import prompt_generate_test_body


class TestBodyGenerator:
    """Turns a function signature into an XCTest method body via an LLM."""

    __test__ = False  # not a pytest class

    def __init__(self, llm_client: LLMClient, timeout: float | None = None) -> None:
        self.llm = llm_client
        self.timeout = timeout

    @classmethod
    def from_config(cls, llm_client: LLMClient, config: LLMConfig) -> TestBodyGenerator:
        return cls(llm_client, timeout=config.timeout)

    async def generate_body(self, function: DeclaredFunction, owner: DeclaredType) -> str:
        prompt = prompt_generate_test_body(function, owner)
        try:
            raw = await asyncio.wait_for(self.llm.complete(prompt), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            raise EnrichmentError(
                f"Timed out after {self.timeout}s generating a body for "
                f"{owner.type_name}.{function.name}"
            ) from exc
        return extract_swift_code_from_response(raw)


def extract_swift_code_from_response(response: str) -> str:
    if not response:
        return ""

    swift_block_pattern = re.compile(
        r"```swift\s*(?P<code>.+?)```",
        re.DOTALL | re.IGNORECASE,
    )
    match = swift_block_pattern.search(response)
    if match:
        return match.group("code").strip()

    generic_block_pattern = re.compile(
        r"```[^\S\n]*\n(?P<code>.+?)```",
        re.DOTALL,
    )
    match = generic_block_pattern.search(response)
    if match:
        return match.group("code").strip()

    return response.strip()
