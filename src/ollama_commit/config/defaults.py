"""Default configuration settings for ollama-git-commit."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from xdg.BaseDirectory import xdg_config_home

APP_DIR_NAME = "ollama-git-commit"
USER_CONFIG_DIR = Path(xdg_config_home) / APP_DIR_NAME
USER_CONFIG_FILE = USER_CONFIG_DIR / "config.json"
LOCAL_CONFIG_FILENAME = ".ollama-git-commit.json"

DEFAULT_MODEL = "mistral:7b-instruct"
DEFAULT_EMBEDDINGS_MODEL = "nomic-embed-text"
EMBEDDINGS_PROFILE_NAME = "embeddingsProvider"

# Roles given to a profile created for the primary model
DEFAULT_CHAT_ROLES = ["chat", "edit", "autocomplete", "apply", "summarize"]

# Models tried, in order, when --auto-model is set
PREFERRED_MODELS = [
	"mistral:7b-instruct",
	"llama3.2",
	"llama3",
	"codellama",
	"qwen2.5",
	"deepseek-coder",
	"mistral",
	"phi3",
	"gemma2",
]

DEFAULT_CONFIG: dict[str, Any] = {
	"model": DEFAULT_MODEL,
	"host": "http://localhost:11434",
	# Behaviour flags
	"verbose": False,
	"interactive": True,
	"debug": False,
	"auto_stage": False,
	"auto_model": False,
	"auto_commit": False,
	"quiet": False,
	# Prompt settings
	"prompt_file": str(USER_CONFIG_DIR / "prompt.txt"),
	"prompt_template": "default",
	# Network timeouts in milliseconds
	"timeouts": {
		"connection": 10000,
		"generation": 120000,
		"model_pull": 300000,
	},
	"use_emojis": False,
	# Model-role registry, filled in by the auto-sync rule
	"models": [],
	"embeddings_provider": EMBEDDINGS_PROFILE_NAME,
	"embeddings_model": DEFAULT_EMBEDDINGS_MODEL,
	# Context providers added to the prompt
	"context": [],
}


# Metadata shown by `config keys`
CONFIG_KEYS: list[dict[str, str]] = [
	{"key": "model", "type": "string", "description": "Primary model for commit message generation", "example": "llama3"},
	{"key": "host", "type": "string", "description": "Ollama server host URL", "example": "http://localhost:11434"},
	{"key": "verbose", "type": "boolean", "description": "Enable verbose output", "example": "true"},
	{"key": "interactive", "type": "boolean", "description": "Enable interactive mode", "example": "true"},
	{"key": "debug", "type": "boolean", "description": "Enable debug mode", "example": "false"},
	{"key": "autoStage", "type": "boolean", "description": "Stage all changes before generating", "example": "false"},
	{"key": "autoModel", "type": "boolean", "description": "Automatically select an installed model", "example": "false"},
	{"key": "autoCommit", "type": "boolean", "description": "Commit and push after generating", "example": "false"},
	{"key": "quiet", "type": "boolean", "description": "Suppress git command output", "example": "true"},
	{"key": "promptFile", "type": "string", "description": "Path to custom prompt file", "example": "~/prompt.txt"},
	{"key": "promptTemplate", "type": "string", "description": "Prompt template to use", "example": "conventional"},
	{"key": "useEmojis", "type": "boolean", "description": "Keep emojis in commit messages", "example": "false"},
	{"key": "timeouts.connection", "type": "number", "description": "Connection timeout (ms)", "example": "10000"},
	{"key": "timeouts.generation", "type": "number", "description": "Generation timeout (ms)", "example": "120000"},
	{"key": "timeouts.modelPull", "type": "number", "description": "Model pull timeout (ms)", "example": "300000"},
	{"key": "embeddingsModel", "type": "string", "description": "Fallback embeddings model", "example": "nomic-embed-text"},
	{"key": "embeddingsProvider", "type": "string", "description": "Profile used for embeddings", "example": "embeddingsProvider"},
	{"key": "context", "type": "array", "description": "Context providers (comma-separated)", "example": "code,diff"},
]
