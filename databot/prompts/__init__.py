"""Prompt templates and loader."""

from databot.prompts.loader import PromptLoader

__all__ = ["PromptLoader"]
