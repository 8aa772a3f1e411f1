"""Pydantic schemas for the resolved configuration and its provenance map."""

from __future__ import annotations

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

ModelRole = Literal["chat", "edit", "autocomplete", "apply", "summarize", "embed"]
ModelProvider = Literal["ollama", "openai", "anthropic"]
PromptTemplateName = Literal["default", "conventional", "simple", "detailed"]
ContextProviderName = Literal["code", "docs", "diff", "terminal", "folder", "codebase"]

VALID_ROLES: tuple[str, ...] = ("chat", "edit", "autocomplete", "apply", "summarize", "embed")
VALID_TEMPLATES: tuple[str, ...] = ("default", "conventional", "simple", "detailed")
VALID_CONTEXT_PROVIDERS: tuple[str, ...] = ("code", "docs", "diff", "terminal", "folder", "codebase")

# Shared model configuration: camelCase on disk, snake_case in Python
_CAMEL_CONFIG = ConfigDict(
	alias_generator=to_camel,
	populate_by_name=True,
	frozen=True,
	protected_namespaces=(),
)


class ConfigSource(StrEnum):
	"""Configuration layers, highest precedence first."""

	ENVIRONMENT = "environment"
	PROJECT_FILE = "project-file"
	USER_FILE = "user-file"
	DEFAULT = "default"


class ModelProfile(BaseModel):
	"""A named model bound to one or more roles."""

	model_config = _CAMEL_CONFIG

	name: str = Field(min_length=1)
	provider: ModelProvider = "ollama"
	model: str = Field(min_length=1)
	roles: list[ModelRole] = Field(min_length=1)

	@field_validator("roles")
	@classmethod
	def _dedupe_roles(cls, roles: list[ModelRole]) -> list[ModelRole]:
		seen: list[ModelRole] = []
		for role in roles:
			if role not in seen:
				seen.append(role)
		return seen

	def has_role(self, role: ModelRole) -> bool:
		"""Return True if this profile serves the given role."""
		return role in self.roles


class ContextProviderSpec(BaseModel):
	"""An entry of the ``context`` list."""

	model_config = _CAMEL_CONFIG

	provider: ContextProviderName
	enabled: bool = True


class TimeoutsConfig(BaseModel):
	"""Network timeouts in milliseconds."""

	model_config = _CAMEL_CONFIG

	connection: int = Field(default=10000, ge=0)
	generation: int = Field(default=120000, ge=0)
	model_pull: int = Field(default=300000, ge=0)


class ResolvedConfig(BaseModel):
	"""
	Immutable configuration snapshot consumed by one orchestration run.

	Produced by ``ConfigManager`` from the four ranked layers. Use
	``model_copy(update=...)`` to derive a variant (CLI overrides).

	"""

	model_config = _CAMEL_CONFIG

	model: str
	host: str
	verbose: bool = False
	interactive: bool = True
	debug: bool = False
	auto_stage: bool = False
	auto_model: bool = False
	auto_commit: bool = False
	quiet: bool = False
	prompt_file: str
	prompt_template: PromptTemplateName = "default"
	timeouts: TimeoutsConfig = Field(default_factory=TimeoutsConfig)
	use_emojis: bool = False
	models: list[ModelProfile] = Field(default_factory=list)
	embeddings_provider: str = "embeddingsProvider"
	embeddings_model: str = "nomic-embed-text"
	context: list[ContextProviderSpec] = Field(default_factory=list)

	def find_model_by_role(self, role: ModelRole) -> ModelProfile | None:
		"""Return the first profile carrying ``role``, or None."""
		return next((profile for profile in self.models if profile.has_role(role)), None)


class TimeoutsSourceMap(BaseModel):
	"""Provenance of each timeout value."""

	model_config = _CAMEL_CONFIG

	connection: ConfigSource = ConfigSource.DEFAULT
	generation: ConfigSource = ConfigSource.DEFAULT
	model_pull: ConfigSource = ConfigSource.DEFAULT


class ConfigSourceMap(BaseModel):
	"""Same shape as ``ResolvedConfig`` with every leaf replaced by its source."""

	model_config = _CAMEL_CONFIG

	model: ConfigSource = ConfigSource.DEFAULT
	host: ConfigSource = ConfigSource.DEFAULT
	verbose: ConfigSource = ConfigSource.DEFAULT
	interactive: ConfigSource = ConfigSource.DEFAULT
	debug: ConfigSource = ConfigSource.DEFAULT
	auto_stage: ConfigSource = ConfigSource.DEFAULT
	auto_model: ConfigSource = ConfigSource.DEFAULT
	auto_commit: ConfigSource = ConfigSource.DEFAULT
	quiet: ConfigSource = ConfigSource.DEFAULT
	prompt_file: ConfigSource = ConfigSource.DEFAULT
	prompt_template: ConfigSource = ConfigSource.DEFAULT
	timeouts: TimeoutsSourceMap = Field(default_factory=TimeoutsSourceMap)
	use_emojis: ConfigSource = ConfigSource.DEFAULT
	models: ConfigSource = ConfigSource.DEFAULT
	embeddings_provider: ConfigSource = ConfigSource.DEFAULT
	embeddings_model: ConfigSource = ConfigSource.DEFAULT
	context: ConfigSource = ConfigSource.DEFAULT
