from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class LLMConfig:
    model: str = "gpt-4"
    temperature: float = 0.2
    max_tokens: int = 1024
    api_base: str = "https://api.openai.com/v1"
    api_key_env: str = "OPENAI_API_KEY"
    timeout: float = 60.0           # seconds per enrichment call


@dataclass
class GenerationConfig:
    file_extension: str = ".swift"
    max_concurrency: int = 4        # concurrent enrichment calls per run
    enable_enrichment: bool = True


@dataclass
class ProjectConfig:
    target: str                     # module imported with @testable
    source_dir: Path
    output_dir: Path
    type_names: list[str] | None = None  # if None -> all extracted types


@dataclass
class AppConfig:
    project: ProjectConfig
    llm: LLMConfig = field(default_factory=LLMConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)


def default_source_dir(target: str) -> Path:
    """SwiftPM convention: sources of module ``target`` live in ``Sources/<target>``."""
    return Path("Sources") / target


def default_output_dir() -> Path:
    return Path("Tests")
