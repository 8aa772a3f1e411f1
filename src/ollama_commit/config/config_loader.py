"""
Configuration loader for ollama-git-commit.

This module resolves the configuration from four ranked layers
(environment > project file > user file > built-in defaults), records
which layer supplied every leaf value, and keeps the model-role registry
in step with the primary model.

"""

from __future__ import annotations

import json
import logging
import os
from functools import cache
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any, Literal

from pydantic import TypeAdapter, ValidationError

from ollama_commit.config.defaults import (
	DEFAULT_CHAT_ROLES,
	DEFAULT_CONFIG,
	EMBEDDINGS_PROFILE_NAME,
	LOCAL_CONFIG_FILENAME,
	USER_CONFIG_FILE,
)
from ollama_commit.config.schema import (
	ConfigSource,
	ConfigSourceMap,
	ModelProfile,
	ModelRole,
	ResolvedConfig,
	TimeoutsConfig,
	VALID_TEMPLATES,
)
from ollama_commit.errors import ConfigError, ConfigurationWarning
from ollama_commit.utils.url_utils import has_scheme, normalize_host

if TYPE_CHECKING:
	from collections.abc import Iterator, Mapping

logger = logging.getLogger(__name__)

ConfigTarget = Literal["user", "local"]
LayerDict = dict[str, Any]
LeafPath = tuple[str, ...]

ENV_PREFIX = "OLLAMA_COMMIT_"
HOST_ENV_VAR = "OLLAMA_HOST"

_MISSING = object()


# --- Field metadata ---


def _field_aliases(model: type[ResolvedConfig] | type[TimeoutsConfig]) -> dict[str, str]:
	"""Map both the camelCase alias and the snake_case name of every field to the field name."""
	aliases: dict[str, str] = {}
	for name, field in model.model_fields.items():
		aliases[name] = name
		if field.alias:
			aliases[field.alias] = name
	return aliases


_TOP_LEVEL_KEYS = _field_aliases(ResolvedConfig)
_TIMEOUT_KEYS = _field_aliases(TimeoutsConfig)

LEAF_PATHS: tuple[LeafPath, ...] = tuple(
	path
	for name in ResolvedConfig.model_fields
	for path in (
		[("timeouts", sub) for sub in TimeoutsConfig.model_fields] if name == "timeouts" else [(name,)]
	)
)


@cache
def _adapter_for(path: LeafPath) -> TypeAdapter[Any]:
	"""Return a TypeAdapter validating the value of a single leaf field."""
	if path[0] == "timeouts":
		field = TimeoutsConfig.model_fields[path[1]]
	else:
		field = ResolvedConfig.model_fields[path[0]]
	if field.metadata:
		return TypeAdapter(Annotated[(field.annotation, *field.metadata)])
	return TypeAdapter(field.annotation)


def env_var_for(path: LeafPath) -> str:
	"""
	Return the environment variable that overrides a leaf field.

	``host`` is read from ``OLLAMA_HOST``; every other field uses
	``OLLAMA_COMMIT_<SCREAMING_SNAKE_PATH>``, e.g. ``timeouts.model_pull``
	becomes ``OLLAMA_COMMIT_TIMEOUTS_MODEL_PULL``.

	"""
	if path == ("host",):
		return HOST_ENV_VAR
	return ENV_PREFIX + "_".join(part.upper() for part in path)


def iter_leaves(layer: Mapping[str, Any]) -> Iterator[tuple[LeafPath, Any]]:
	"""Yield ``(path, value)`` for every leaf present in a layer."""
	for key, value in layer.items():
		if key == "timeouts" and isinstance(value, dict):
			for sub_key, sub_value in value.items():
				yield ("timeouts", sub_key), sub_value
		else:
			yield (key,), value


def get_leaf(layer: Mapping[str, Any], path: LeafPath) -> Any:
	"""Return the value at ``path`` or the ``_MISSING`` sentinel."""
	current: Any = layer
	for part in path:
		if not isinstance(current, dict) or part not in current:
			return _MISSING
		current = current[part]
	return current


def _set_leaf(layer: LayerDict, path: LeafPath, value: Any) -> None:
	if len(path) == 1:
		layer[path[0]] = value
	else:
		layer.setdefault(path[0], {})[path[1]] = value


# --- Pure layer functions ---


def normalize_keys(raw: Mapping[str, Any]) -> LayerDict:
	"""
	Translate a raw mapping (camelCase or snake_case keys) into a layer dict.

	Unknown keys are dropped. ``timeouts`` stays a nested dict.

	Args:
		raw: Mapping as read from a JSON file or passed to ``save_config``

	Returns:
		LayerDict: New dict keyed by snake_case field names

	"""
	layer: LayerDict = {}
	for key, value in raw.items():
		name = _TOP_LEVEL_KEYS.get(key)
		if name is None:
			logger.debug("Ignoring unknown configuration key: %s", key)
			continue
		if name == "timeouts" and isinstance(value, dict):
			timeouts: LayerDict = {}
			for sub_key, sub_value in value.items():
				sub_name = _TIMEOUT_KEYS.get(sub_key)
				if sub_name is None:
					logger.debug("Ignoring unknown timeout key: %s", sub_key)
					continue
				timeouts[sub_name] = sub_value
			layer["timeouts"] = timeouts
		else:
			layer[name] = value
	return layer


def sanitize_layer(layer: Mapping[str, Any], label: str) -> tuple[LayerDict, list[ConfigurationWarning]]:
	"""
	Validate every leaf of a layer against its field type.

	Invalid leaves are dropped so the next-lower layer supplies the value.
	Host values are normalized; adding a missing scheme is reported.

	Args:
		layer: Layer dict with snake_case keys
		label: Human readable layer name used in warnings

	Returns:
		tuple: The sanitized layer and the warnings raised while sanitizing

	"""
	clean: LayerDict = {}
	problems: list[ConfigurationWarning] = []
	for path, value in iter_leaves(layer):
		if path == ("timeouts",):
			problems.append(ConfigurationWarning(f"Ignoring 'timeouts' in {label}: expected an object"))
			continue
		try:
			validated = _adapter_for(path).validate_python(value)
		except ValidationError as e:
			dotted = ".".join(path)
			problems.append(
				ConfigurationWarning(f"Ignoring invalid value for '{dotted}' in {label}: {e.errors()[0]['msg']}")
			)
			continue
		if path == ("host",):
			if not validated.strip():
				problems.append(ConfigurationWarning(f"Ignoring empty host in {label}"))
				continue
			if not has_scheme(validated.strip()):
				problems.append(
					ConfigurationWarning(
						f"Host '{validated}' in {label} has no scheme; assuming http://. "
						"Expected format: http://host:port"
					)
				)
			validated = normalize_host(validated)
		_set_leaf(clean, path, validated)
	return clean, problems


def merge_layers(base: Mapping[str, Any], override: Mapping[str, Any]) -> LayerDict:
	"""
	Shallow-merge ``override`` over ``base`` and return a new dict.

	``timeouts`` is merged one level deeper so a layer can set a single timeout.

	"""
	merged: LayerDict = dict(base)
	for key, value in override.items():
		if key == "timeouts" and isinstance(value, dict):
			merged["timeouts"] = {**base.get("timeouts", {}), **value}
		else:
			merged[key] = value
	return merged


def _parse_env_value(path: LeafPath, raw: str) -> Any:
	"""Convert an environment string using the type of the field's default."""
	if path == ("models",):
		try:
			return json.loads(raw)
		except json.JSONDecodeError:
			logger.warning("Invalid models JSON in environment variable %s", env_var_for(path))
			return _MISSING
	if path == ("context",):
		return [{"provider": name.strip()} for name in raw.split(",") if name.strip()]

	default = get_leaf(DEFAULT_CONFIG, path)
	if isinstance(default, bool):
		return raw.strip().lower() in {"true", "1"}
	if isinstance(default, int):
		try:
			return int(raw.strip())
		except ValueError:
			logger.debug("Rejecting non-numeric value for %s: %r", env_var_for(path), raw)
			return _MISSING
	return raw


def read_env_layer(env: Mapping[str, str]) -> LayerDict:
	"""
	Build the environment layer.

	Each variable maps to exactly one field; unparseable values are left out.

	"""
	layer: LayerDict = {}
	for path in LEAF_PATHS:
		raw = env.get(env_var_for(path))
		if raw is None:
			continue
		value = _parse_env_value(path, raw)
		if value is _MISSING:
			continue
		_set_leaf(layer, path, value)
	return layer


def sync_model_profiles(
	models: list[ModelProfile], primary_model: str, embeddings_model: str
) -> list[ModelProfile]:
	"""
	Reconcile the model-role registry with the primary model.

	The first profile carrying the ``chat`` role gets ``primary_model`` as
	its model id (name, provider and roles are kept). Without a chat profile
	a new one named after the model is appended. A profile with the
	``embed`` role is appended when none exists.

	Args:
		models: Current profiles
		primary_model: Non-empty primary model id
		embeddings_model: Model id used for a synthesized embeddings profile

	Returns:
		list[ModelProfile]: New list; ``models`` is not modified

	"""
	updated = list(models)
	chat_index = next((i for i, profile in enumerate(updated) if profile.has_role("chat")), None)
	if chat_index is None:
		updated.append(
			ModelProfile(name=primary_model, provider="ollama", model=primary_model, roles=list(DEFAULT_CHAT_ROLES))
		)
	elif updated[chat_index].model != primary_model:
		updated[chat_index] = updated[chat_index].model_copy(update={"model": primary_model})

	if not any(profile.has_role("embed") for profile in updated):
		updated.append(
			ModelProfile(name=EMBEDDINGS_PROFILE_NAME, provider="ollama", model=embeddings_model, roles=["embed"])
		)
	return updated


def compute_sources(
	config: ResolvedConfig,
	layers: list[tuple[ConfigSource, Mapping[str, Any]]],
	*,
	models_synced: bool = False,
) -> ConfigSourceMap:
	"""
	Work out which layer supplied every resolved leaf.

	For each leaf the layers are tested in precedence order; the first one
	that has the leaf and whose value equals the resolved value wins.
	Leaves no layer matches come from the defaults.

	Args:
		config: The resolved configuration
		layers: ``(source, layer)`` pairs, highest precedence first
		models_synced: True when the auto-sync rule rewrote ``models``

	Returns:
		ConfigSourceMap: Provenance of every leaf

	"""
	sources: LayerDict = {}
	for path in LEAF_PATHS:
		resolved: Any = config
		for part in path:
			resolved = getattr(resolved, part)
		source = ConfigSource.DEFAULT
		for label, layer in layers:
			value = get_leaf(layer, path)
			if value is not _MISSING and value == resolved:
				source = label
				break
		_set_leaf(sources, path, source)

	if models_synced:
		sources["models"] = sources["model"]
	return ConfigSourceMap.model_validate(sources)


def resolve_layers(
	user_layer: Mapping[str, Any],
	project_layer: Mapping[str, Any],
	env_layer: Mapping[str, Any],
) -> tuple[ResolvedConfig, ConfigSourceMap]:
	"""
	Fold the layers over the defaults and compute provenance.

	Args:
		user_layer: Sanitized user-global file layer
		project_layer: Sanitized project-local file layer
		env_layer: Sanitized environment layer

	Returns:
		tuple: The resolved configuration and its source map

	"""
	merged: LayerDict = dict(DEFAULT_CONFIG)
	for layer in (user_layer, project_layer, env_layer):
		merged = merge_layers(merged, layer)

	config = ResolvedConfig.model_validate(merged)

	models_synced = False
	if config.model.strip():
		synced = sync_model_profiles(config.models, config.model, config.embeddings_model)
		if synced != config.models:
			logger.debug("Auto-syncing models array with core model: %s", config.model)
			config = config.model_copy(update={"models": synced})
			models_synced = True

	sources = compute_sources(
		config,
		[
			(ConfigSource.ENVIRONMENT, env_layer),
			(ConfigSource.PROJECT_FILE, project_layer),
			(ConfigSource.USER_FILE, user_layer),
		],
		models_synced=models_synced,
	)
	return config, sources


def apply_overrides(config: ResolvedConfig, **overrides: Any) -> ResolvedConfig:  # noqa: ANN401
	"""
	Return a copy of ``config`` with command-line overrides applied.

	``None`` means "not given". An unknown prompt template is ignored so the
	configured one stays in effect. A new primary model is synced into the
	model-role registry.

	"""
	update = {key: value for key, value in overrides.items() if value is not None}
	template = update.get("prompt_template")
	if template is not None and template not in VALID_TEMPLATES:
		logger.debug("Unknown prompt template %r, keeping %r", template, config.prompt_template)
		update.pop("prompt_template")
	unknown = set(update) - set(ResolvedConfig.model_fields)
	if unknown:
		msg = f"Unknown configuration overrides: {', '.join(sorted(unknown))}"
		raise ValueError(msg)
	if not update:
		return config

	if "host" in update:
		update["host"] = normalize_host(update["host"])
	data = config.model_dump() | update
	result = ResolvedConfig.model_validate(data)
	if "model" in update and result.model.strip():
		result = result.model_copy(
			update={"models": sync_model_profiles(result.models, result.model, result.embeddings_model)}
		)
	return result


# --- Stateful manager ---


class ConfigManager:
	"""
	Loads, resolves and persists the configuration.

	One instance is created per CLI invocation and passed explicitly to
	whatever needs it. The in-memory snapshot is read-mostly; saves are
	last-writer-wins with no cross-process locking.

	"""

	def __init__(
		self,
		project_dir: Path | None = None,
		user_config_file: Path | None = None,
		env: Mapping[str, str] | None = None,
	) -> None:
		"""
		Initialize the configuration manager.

		Args:
			project_dir: Directory holding the project-local file (defaults to cwd)
			user_config_file: User-global config path (defaults to the XDG location)
			env: Environment mapping (defaults to ``os.environ`` at load time)

		"""
		self.project_dir = project_dir or Path.cwd()
		self.user_config_file = user_config_file or USER_CONFIG_FILE
		self.local_config_file = self.project_dir / LOCAL_CONFIG_FILENAME
		self._env = env
		self._initialized = False
		self._config: ResolvedConfig | None = None
		self._sources: ConfigSourceMap | None = None
		self.warnings: list[ConfigurationWarning] = []

	# Loading

	def initialize(self) -> None:
		"""Load all layers once. Further calls are no-ops."""
		if not self._initialized:
			self._load()
			self._initialized = True

	def reload(self) -> None:
		"""Discard the snapshot and load all layers again."""
		self._initialized = False
		self.initialize()

	def _warn(self, warning: ConfigurationWarning) -> None:
		self.warnings.append(warning)
		logger.warning("%s", warning)

	def _read_raw(self, path: Path) -> dict[str, Any] | None:
		"""
		Read a config file as a raw JSON object.

		Returns:
			The parsed object, ``{}`` if the file is absent, or None if it
			exists but is unreadable or not a JSON object.

		"""
		if not path.exists():
			return {}
		try:
			content = json.loads(path.read_text(encoding="utf-8") or "{}")
		except json.JSONDecodeError as e:
			self._warn(ConfigurationWarning(f"Configuration file {path} is not valid JSON ({e.msg}); ignoring it"))
			return None
		except OSError as e:
			self._warn(ConfigurationWarning(f"Could not read configuration file {path}: {e}; ignoring it"))
			return None
		if not isinstance(content, dict):
			self._warn(ConfigurationWarning(f"Configuration file {path} does not contain a JSON object; ignoring it"))
			return None
		return content

	def _read_file_layer(self, path: Path, label: str) -> LayerDict:
		raw = self._read_raw(path)
		if not raw:
			return {}
		layer, problems = sanitize_layer(normalize_keys(raw), label)
		for problem in problems:
			self._warn(problem)
		logger.debug("Loaded configuration from %s", path)
		return layer

	def _read_env_layer(self) -> LayerDict:
		env = self._env if self._env is not None else os.environ
		layer, problems = sanitize_layer(read_env_layer(env), "environment")
		for problem in problems:
			self._warn(problem)
		return layer

	def _load(self) -> None:
		self.warnings = []
		user_layer = self._read_file_layer(self.user_config_file, f"user config {self.user_config_file}")
		project_layer = self._read_file_layer(self.local_config_file, f"project config {self.local_config_file}")
		env_layer = self._read_env_layer()
		self._config, self._sources = resolve_layers(user_layer, project_layer, env_layer)

	# Queries

	@property
	def config(self) -> ResolvedConfig:
		"""The current snapshot (not copied)."""
		self.initialize()
		if self._config is None:  # pragma: no cover - set by _load
			msg = "Configuration failed to load"
			raise ConfigError(msg)
		return self._config

	def get_config(self) -> ResolvedConfig:
		"""Return a deep copy of the resolved configuration."""
		return self.config.model_copy(deep=True)

	def get_config_sources(self) -> ConfigSourceMap:
		"""Return a copy of the provenance map."""
		self.initialize()
		if self._sources is None:  # pragma: no cover - set by _load
			return ConfigSourceMap()
		return self._sources.model_copy(deep=True)

	def get_model_by_role(self, role: ModelRole) -> ModelProfile | None:
		"""Return the first model profile carrying ``role``."""
		return self.config.find_model_by_role(role)

	def get_chat_model(self) -> ModelProfile | None:
		"""Return the profile used for commit message generation."""
		return self.get_model_by_role("chat")

	def get_primary_model(self) -> str:
		"""Return the chat model id, falling back to the flat ``model`` field."""
		chat_model = self.get_chat_model()
		if chat_model is not None and chat_model.model:
			return chat_model.model
		return self.config.model

	def get_embeddings_model(self) -> ModelProfile | None:
		"""
		Return the embeddings profile.

		Looks up ``embeddings_provider`` by name, then a profile whose model
		is ``embeddings_model``, then any profile with the ``embed`` role.

		"""
		config = self.config
		if config.embeddings_provider:
			by_name = next((p for p in config.models if p.name == config.embeddings_provider), None)
			if by_name is not None:
				return by_name
		if config.embeddings_model:
			by_model = next((p for p in config.models if p.model == config.embeddings_model), None)
			if by_model is not None:
				return by_model
		return self.get_model_by_role("embed")

	def get_context_providers(self) -> list[Any]:
		"""Return the configured context providers."""
		return list(self.config.context)

	def get_config_files(self) -> dict[str, Any]:
		"""Return both config file paths and which of them exist."""
		active = [
			{"type": target, "path": path}
			for target, path in (("user", self.user_config_file), ("local", self.local_config_file))
			if path.exists()
		]
		return {"user": self.user_config_file, "local": self.local_config_file, "active": active}

	def path_for(self, target: ConfigTarget) -> Path:
		"""Return the file backing ``target``."""
		return self.local_config_file if target == "local" else self.user_config_file

	# Persistence

	def save_config(self, partial: Mapping[str, Any], target: ConfigTarget = "user") -> None:
		"""
		Merge ``partial`` into the chosen config file and reload.

		When ``partial`` sets ``model`` the model-role registry is synced and
		written alongside it. An empty or non-string model is dropped with a
		warning and the registry is left untouched.

		Args:
			partial: Fields to persist, camelCase or snake_case keys
			target: ``user`` or ``local``

		Raises:
			ConfigError: If the file cannot be parsed for merging or written

		"""
		self.initialize()
		update = normalize_keys(partial)

		model_value = update.pop("model", _MISSING)
		update, save_warnings = sanitize_layer(update, "saved values")

		if model_value is not _MISSING:
			if not isinstance(model_value, str) or not model_value.strip():
				save_warnings.append(
					ConfigurationWarning("Invalid model value provided, skipping auto-sync of models array")
				)
			else:
				primary = model_value.strip()
				update["model"] = primary
				base_models = update.get("models", self.config.models)
				update["models"] = sync_model_profiles(base_models, primary, self.config.embeddings_model)
				logger.debug("Synced models array with core model: %s", primary)

		for warning in save_warnings:
			self._warn(warning)
		if not update:
			logger.info("Nothing to save")
			return

		path = self.path_for(target)
		existing = self._read_raw(path)
		if existing is None:
			msg = f"Refusing to overwrite unparseable configuration file {path}"
			raise ConfigError(msg)

		merged = self._merge_raw(existing, self._to_json_layer(update))
		try:
			path.parent.mkdir(parents=True, exist_ok=True)
			path.write_text(json.dumps(merged, indent=2) + "\n", encoding="utf-8")
		except OSError as e:
			msg = f"Failed to save config to {path}: {e}"
			logger.exception(msg)
			raise ConfigError(msg) from e

		logger.info("Configuration saved to %s", path)
		self._load()
		self._initialized = True
		self.warnings.extend(save_warnings)

	def remove_config(self, target: ConfigTarget) -> bool:
		"""
		Delete the chosen config file and reload.

		Returns:
			bool: True if a file was removed

		Raises:
			ConfigError: If the file exists but cannot be removed

		"""
		path = self.path_for(target)
		if not path.exists():
			logger.info("Configuration file %s does not exist", path)
			return False
		try:
			path.unlink()
		except OSError as e:
			msg = f"Failed to remove config {path}: {e}"
			raise ConfigError(msg) from e
		logger.info("Configuration removed from %s", path)
		self.reload()
		return True

	def create_default_config(self, target: ConfigTarget = "user") -> Path:
		"""Write the built-in defaults to the chosen file and return its path."""
		path = self.path_for(target)
		defaults = ResolvedConfig.model_validate(DEFAULT_CONFIG).model_dump(mode="json", by_alias=True)
		try:
			path.parent.mkdir(parents=True, exist_ok=True)
			path.write_text(json.dumps(defaults, indent=2) + "\n", encoding="utf-8")
		except OSError as e:
			msg = f"Failed to create default config at {path}: {e}"
			raise ConfigError(msg) from e
		self.reload()
		return path

	@staticmethod
	def _to_json_layer(layer: Mapping[str, Any]) -> dict[str, Any]:
		"""Serialize a sanitized layer with camelCase keys."""
		out: dict[str, Any] = {}
		for path, value in iter_leaves(layer):
			dumped = _adapter_for(path).dump_python(value, mode="json", by_alias=True)
			if path[0] == "timeouts":
				alias = TimeoutsConfig.model_fields[path[1]].alias or path[1]
				out.setdefault("timeouts", {})[alias] = dumped
			else:
				alias = ResolvedConfig.model_fields[path[0]].alias or path[0]
				out[alias] = dumped
		return out

	@staticmethod
	def _merge_raw(existing: Mapping[str, Any], update: Mapping[str, Any]) -> dict[str, Any]:
		"""Merge serialized values into a raw file object, replacing either key spelling."""
		merged = dict(existing)
		for key, value in update.items():
			field = _TOP_LEVEL_KEYS[key]
			for old_key in [k for k in merged if _TOP_LEVEL_KEYS.get(k) == field and k != key]:
				merged.pop(old_key)
			if field == "timeouts" and isinstance(merged.get(key), dict):
				timeouts = dict(merged[key])
				for sub_key, sub_value in value.items():
					sub_field = _TIMEOUT_KEYS[sub_key]
					for old_sub in [k for k in timeouts if _TIMEOUT_KEYS.get(k) == sub_field and k != sub_key]:
						timeouts.pop(old_sub)
					timeouts[sub_key] = sub_value
				merged[key] = timeouts
			else:
				merged[key] = value
		return merged
