"""Prompts module - centralized prompt templates for AI services.

Re-exports all prompt constants and utilities for easy importing:
    from services.prompts import strip_markdown_code_blocks, SCENARIO_GENERATOR_V1
"""

from services.prompts._base import strip_markdown_code_blocks
from services.prompts.scenario import SCENARIO_GENERATOR_V1

__all__ = [
    # Utilities
    "strip_markdown_code_blocks",
    # Scenario authoring
    "SCENARIO_GENERATOR_V1",
]
