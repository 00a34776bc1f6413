"""Markdown prompt templates for name generation and idea enhancement."""

from prompts.loader import PromptTemplate, get_prompt_path, load_prompt, reload_prompts

__all__ = ["PromptTemplate", "get_prompt_path", "load_prompt", "reload_prompts"]
