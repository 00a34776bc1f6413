"""Loads markdown prompt templates with YAML frontmatter and renders them with jinja2."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import yaml
from jinja2 import BaseLoader, Environment, StrictUndefined

logger = logging.getLogger(__name__)

PROMPTS_DIR = Path(__file__).parent

_ENV = Environment(loader=BaseLoader(), undefined=StrictUndefined, keep_trailing_newline=False)


class PromptTemplate:
    def __init__(self, prompt_id: str, content: str, metadata: Dict[str, Any]):
        self.id = prompt_id
        self.content = content
        self.version = metadata.get("version", "v1")
        self.description = metadata.get("description", "")
        self.requires = list(metadata.get("requires") or [])
        self._template = _ENV.from_string(content)

    def render(self, **kwargs) -> str:
        missing = [name for name in self.requires if kwargs.get(name) is None]
        if missing:
            raise ValueError(f"Prompt '{self.id}' is missing variables: {', '.join(missing)}")
        return self._template.render(**kwargs).strip()


def get_prompt_path(prompt_id: str) -> Path:
    return PROMPTS_DIR / f"{prompt_id}.md"


def _split_frontmatter(content: str) -> tuple[Dict[str, Any], str]:
    if not content.startswith("---"):
        return {}, content

    parts = content.split("---", 2)
    if len(parts) < 3:
        return {}, content

    header, body = parts[1], parts[2]
    try:
        metadata = yaml.safe_load(header) or {}
    except yaml.YAMLError:
        logger.warning("Failed to parse YAML frontmatter")
        metadata = {}
    return metadata, body.strip()


@lru_cache(maxsize=16)
def _load_template(prompt_id: str) -> PromptTemplate:
    path = get_prompt_path(prompt_id)
    if not path.exists():
        raise FileNotFoundError(f"Prompt file not found: {path}")

    metadata, body = _split_frontmatter(path.read_text(encoding="utf-8"))
    return PromptTemplate(prompt_id, body, metadata)


def load_prompt(prompt_id: str, **kwargs) -> str:
    """Render prompt ``prompt_id`` with ``kwargs``; the optional ``avoid_names`` defaults to empty."""
    kwargs.setdefault("avoid_names", [])
    kwargs.setdefault("max_names", 40)
    return _load_template(prompt_id).render(**kwargs)


def reload_prompts() -> None:
    _load_template.cache_clear()
