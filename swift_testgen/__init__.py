"""
XCTest scaffold generator for Swift modules.

This package provides a framework to:
- scan a Swift module for source files
- extract declared types and their functions with tree-sitter
- optionally let an LLM write each test body
- write one XCTest case per type
"""

__all__ = [
    "cli",
    "config",
    "enrichment",
    "errors",
    "extractor",
    "file_tree",
    "llm_client",
    "models",
    "orchestrator",
    "prompts",
    "synthesizer",
    "syntax",
]
