"""Prompt templates and prompt construction."""

from ollama_commit.prompts.builder import build_commit_prompt, create_prompt_file, get_system_prompt, truncate_diff
from ollama_commit.prompts.templates import PROMPT_TEMPLATES, TEMPLATE_DESCRIPTIONS, get_template

__all__ = [
	"PROMPT_TEMPLATES",
	"TEMPLATE_DESCRIPTIONS",
	"build_commit_prompt",
	"create_prompt_file",
	"get_system_prompt",
	"get_template",
	"truncate_diff",
]
