from __future__ import annotations

from pathlib import Path


class SwiftTestGenError(Exception):
    """Base class for all errors raised by swift_testgen."""


class DiscoveryError(SwiftTestGenError):
    pass


class ExtractionError(SwiftTestGenError):
    def __init__(self, path: Path | str | None, cause: str) -> None:
        self.path = path
        self.cause = cause
        where = str(path) if path is not None else "<source>"
        super().__init__(f"Failed to extract declarations from {where}: {cause}")


class EnrichmentError(SwiftTestGenError):
    pass


class MissingAPIKeyError(EnrichmentError):
    def __init__(self, env_var: str) -> None:
        self.env_var = env_var
        super().__init__(
            f"Missing API key. Please set the {env_var} environment variable."
        )


class SynthesisError(SwiftTestGenError):
    def __init__(self, file_name: str, cause: str) -> None:
        self.file_name = file_name
        self.cause = cause
        super().__init__(f"Failed to write file: {file_name} ({cause})")
