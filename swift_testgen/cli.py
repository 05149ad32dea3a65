from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

from .config import (
    AppConfig,
    GenerationConfig,
    LLMConfig,
    ProjectConfig,
    default_output_dir,
    default_source_dir,
)
from .enrichment import TestBodyGenerator
from .llm_client import OpenAILLMClient, configure_llm_log, read_api_key
from .models import BatchReport
from .orchestrator import TestGenOrchestrator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="swift-testgen",
        description="Generate XCTest scaffolds for the types declared in a Swift module",
    )
    parser.add_argument(
        "target",
        help="Name of the module under test (used for `@testable import`).",
    )
    parser.add_argument(
        "--source",
        "-s",
        help="Directory containing the module's Swift sources (default: Sources/<target>).",
    )
    parser.add_argument(
        "--output",
        "-o",
        help="Directory to write generated test files to (default: Tests).",
    )
    parser.add_argument(
        "--types",
        help="Comma-separated list of type names to generate tests for. "
        "If omitted, every discovered type is used.",
    )
    parser.add_argument(
        "--no-ai",
        action="store_true",
        help="Do not call the LLM; emit placeholder test bodies only.",
    )
    parser.add_argument("--model", default=LLMConfig.model, help="Chat model name.")
    parser.add_argument(
        "--api-base",
        default=LLMConfig.api_base,
        help="Base URL of the OpenAI-compatible API.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=LLMConfig.timeout,
        help="Seconds to wait for each generated test body.",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=GenerationConfig.max_concurrency,
        help="Maximum number of concurrent LLM requests.",
    )
    parser.add_argument(
        "--llm-log",
        default="llm_log.log",
        help="File receiving every LLM prompt and response.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")
    return parser


def build_config(args: argparse.Namespace) -> AppConfig:
    type_names = [s.strip() for s in args.types.split(",") if s.strip()] if args.types else None
    return AppConfig(
        project=ProjectConfig(
            target=args.target,
            source_dir=Path(args.source) if args.source else default_source_dir(args.target),
            output_dir=Path(args.output) if args.output else default_output_dir(),
            type_names=type_names,
        ),
        llm=LLMConfig(model=args.model, api_base=args.api_base, timeout=args.timeout),
        generation=GenerationConfig(
            max_concurrency=args.concurrency,
            enable_enrichment=not args.no_ai,
        ),
    )


def build_body_generator(config: AppConfig, llm_log: str | None = None) -> TestBodyGenerator | None:
    if not config.generation.enable_enrichment:
        return None
    if read_api_key(config.llm) is None:
        print(
            f"{config.llm.api_key_env} is not set; generating placeholder test bodies only."
        )
        return None
    if llm_log:
        configure_llm_log(llm_log)
    return TestBodyGenerator.from_config(OpenAILLMClient(config.llm), config.llm)


def print_summary(report: BatchReport) -> None:
    failures = len(report.file_failures) + len(report.synthesis_failures)
    print(
        f"Extracted {len(report.types)} types from "
        f"{report.files_found - len(report.file_failures)}/{report.files_found} files; "
        f"selected {len(report.selected)}; wrote {len(report.written)} test files."
    )
    if report.enrichment_failures:
        print(f"{report.enrichment_failures} test bodies fell back to placeholders.")
    if failures:
        print(f"{failures} item(s) failed, see messages above.")
    print("Done.")


async def main_async(argv: list[str] | None = None) -> BatchReport:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = build_config(args)
    orchestrator = TestGenOrchestrator(
        config=config,
        body_generator=build_body_generator(config, args.llm_log),
    )
    report = await orchestrator.run()
    print_summary(report)
    return report


def main(argv: list[str] | None = None) -> None:
    asyncio.run(main_async(argv))


if __name__ == "__main__":
    main()
