from __future__ import annotations

import asyncio
import logging
from typing import Callable

from .config import AppConfig
from .enrichment import TestBodyGenerator
from .errors import EnrichmentError, ExtractionError, SynthesisError
from .extractor import filter_types_by_name, parse_swift_file
from .file_tree import collect_swift_files
from .models import (
    BatchReport,
    DeclaredFunction,
    DeclaredType,
    FileFailure,
    SourceFile,
    SynthesisFailure,
)
from .synthesizer import plan_test_class_names, render_test_file, write_test_file
from .syntax import SwiftParser

logger = logging.getLogger(__name__)


class TestGenOrchestrator:
    """
    Runs discovery, extraction, enrichment and synthesis for one invocation.

    Every failure is contained to the item it concerns (file, type or
    function) and recorded in the returned :class:`BatchReport`.
    """

    __test__ = False  # not a pytest class

    def __init__(
        self,
        config: AppConfig,
        body_generator: TestBodyGenerator | None = None,
        parser: SwiftParser | None = None,
        echo: Callable[[str], None] = print,
    ) -> None:
        self.config = config
        self.body_generator = body_generator if config.generation.enable_enrichment else None
        self.parser = parser or SwiftParser()
        self.echo = echo

    # ---- Step 1: discover source files ----

    def scan_sources(self) -> list[SourceFile]:
        return collect_swift_files(
            self.config.project.source_dir,
            extension=self.config.generation.file_extension,
        )

    # ---- Step 2: extract declarations, one file at a time ----

    def extract_all(self, files: list[SourceFile], report: BatchReport) -> list[DeclaredType]:
        types: list[DeclaredType] = []
        for source in files:
            try:
                extracted = parse_swift_file(source.path, parser=self.parser)
            except ExtractionError as exc:
                logger.debug("Extraction failed", exc_info=exc)
                self.echo(f"Failed to parse {source.rel_path}: {exc.cause}")
                report.file_failures.append(FileFailure(path=source.path, reason=exc.cause))
                continue
            report.extracted[source.path] = extracted
            types.extend(extracted)
        return types

    # ---- Step 3: enrichment (optional) ----

    async def _enrich_function(
        self,
        function: DeclaredFunction,
        owner: DeclaredType,
        semaphore: asyncio.Semaphore,
        report: BatchReport,
    ) -> str | None:
        if self.body_generator is None:
            return None
        async with semaphore:
            try:
                return await self.body_generator.generate_body(function, owner)
            except EnrichmentError as exc:
                logger.warning(
                    "Enrichment failed for %s.%s, using placeholder body: %s",
                    owner.type_name,
                    function.name,
                    exc,
                )
                report.enrichment_failures += 1
                return None
            except Exception as exc:
                # any LLMClient implementation may fail in its own way
                logger.warning(
                    "Unexpected enrichment error for %s.%s, using placeholder body",
                    owner.type_name,
                    function.name,
                    exc_info=exc,
                )
                report.enrichment_failures += 1
                return None

    async def enrich_type(
        self,
        declared_type: DeclaredType,
        semaphore: asyncio.Semaphore,
        report: BatchReport,
    ) -> list[str | None]:
        # gather keeps the input order whatever the completion order
        return list(
            await asyncio.gather(
                *(
                    self._enrich_function(fn, declared_type, semaphore, report)
                    for fn in declared_type.functions
                )
            )
        )

    # ---- Step 4: synthesize & persist ----

    async def synthesize_type(
        self,
        declared_type: DeclaredType,
        test_class_name: str,
        semaphore: asyncio.Semaphore,
        report: BatchReport,
    ) -> None:
        bodies = await self.enrich_type(declared_type, semaphore, report)
        generated = render_test_file(
            declared_type,
            target=self.config.project.target,
            bodies=bodies,
            test_class_name=test_class_name,
            extension=self.config.generation.file_extension,
        )
        try:
            path = write_test_file(generated, self.config.project.output_dir)
        except SynthesisError as exc:
            logger.debug("Synthesis failed", exc_info=exc)
            self.echo(f"Failed to write file: {exc.file_name} ({exc.cause})")
            report.synthesis_failures.append(
                SynthesisFailure(file_name=exc.file_name, reason=exc.cause)
            )
            return
        report.written.append(path)

    async def run(self) -> BatchReport:
        report = BatchReport()

        files = self.scan_sources()
        report.files_found = len(files)
        self.echo(f"Found {len(files)} Swift files in {self.config.project.source_dir}")

        types = filter_types_by_name(
            self.extract_all(files, report), self.config.project.type_names
        )
        report.selected = list(types)
        names = plan_test_class_names(types, source_root=self.config.project.source_dir.resolve())

        semaphore = asyncio.Semaphore(max(1, self.config.generation.max_concurrency))
        await asyncio.gather(
            *(
                self.synthesize_type(declared_type, name, semaphore, report)
                for declared_type, name in zip(types, names)
            )
        )
        # completion order is arbitrary; report in planning order
        order = {name: index for index, name in enumerate(names)}
        report.written.sort(key=lambda p: order.get(p.stem, len(order)))
        return report
