"""Configuration resolution for ollama-git-commit."""

from ollama_commit.config.config_loader import (
	ConfigManager,
	apply_overrides,
	env_var_for,
	merge_layers,
	resolve_layers,
	sync_model_profiles,
)
from ollama_commit.config.schema import (
	ConfigSource,
	ConfigSourceMap,
	ContextProviderSpec,
	ModelProfile,
	ResolvedConfig,
	TimeoutsConfig,
)

__all__ = [
	"ConfigManager",
	"ConfigSource",
	"ConfigSourceMap",
	"ContextProviderSpec",
	"ModelProfile",
	"ResolvedConfig",
	"TimeoutsConfig",
	"apply_overrides",
	"env_var_for",
	"merge_layers",
	"resolve_layers",
	"sync_model_profiles",
]
