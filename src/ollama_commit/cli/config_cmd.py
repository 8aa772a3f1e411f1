"""Commands for inspecting and editing the configuration."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ollama_commit.config.defaults import CONFIG_KEYS
from ollama_commit.config.schema import VALID_ROLES, VALID_TEMPLATES, ModelProfile

if TYPE_CHECKING:
	from ollama_commit.config import ConfigManager

logger = logging.getLogger(__name__)
console = Console()

LocalFlag = Annotated[bool, typer.Option("--local", "-l", help="Use the project config file instead of the user one")]

SOURCE_LABELS = {
	"environment": "environment variable",
	"project-file": "project config",
	"user-file": "user config",
	"default": "built-in default",
}


def _manager() -> ConfigManager:
	from ollama_commit.config import ConfigManager

	manager = ConfigManager(project_dir=Path.cwd())
	manager.initialize()
	return manager


def _target(local: bool) -> str:
	return "local" if local else "user"


def parse_config_value(key: str, raw: str) -> Any:  # noqa: ANN401
	"""
	Convert a command-line value using the type listed for ``key``.

	Args:
		key: Key as listed by ``config keys`` (camelCase, dotted for timeouts)
		raw: Value typed by the user

	Returns:
		The converted value

	Raises:
		typer.BadParameter: If the key is unknown or the value does not convert

	"""
	meta = next((item for item in CONFIG_KEYS if item["key"] == key), None)
	if meta is None:
		known = ", ".join(item["key"] for item in CONFIG_KEYS)
		msg = f"Unknown configuration key '{key}'. Known keys: {known}"
		raise typer.BadParameter(msg)

	kind = meta["type"]
	if kind == "boolean":
		lowered = raw.strip().lower()
		if lowered not in {"true", "false", "1", "0", "yes", "no"}:
			msg = f"'{key}' expects true or false, got '{raw}'"
			raise typer.BadParameter(msg)
		return lowered in {"true", "1", "yes"}
	if kind == "number":
		try:
			return int(raw)
		except ValueError as e:
			msg = f"'{key}' expects a whole number, got '{raw}'"
			raise typer.BadParameter(msg) from e
	if kind == "array":
		return [{"provider": name.strip()} for name in raw.split(",") if name.strip()]
	if key == "promptTemplate" and raw not in VALID_TEMPLATES:
		msg = f"Unknown template '{raw}'. Available templates: {', '.join(VALID_TEMPLATES)}"
		raise typer.BadParameter(msg)
	return raw


def build_partial(key: str, value: Any) -> dict[str, Any]:  # noqa: ANN401
	"""Turn ``timeouts.connection`` style keys into nested dicts."""
	if "." in key:
		parent, child = key.split(".", 1)
		return {parent: {child: value}}
	return {key: value}


def _profiles_payload(profiles: list[ModelProfile]) -> list[dict[str, Any]]:
	return [profile.model_dump(mode="json", by_alias=True) for profile in profiles]


def register_command(app: typer.Typer) -> None:
	"""Register the config command group with the CLI app."""
	config_app = typer.Typer(help="Show and edit configuration", no_args_is_help=True)
	models_app = typer.Typer(help="Manage model profiles and their roles", no_args_is_help=True)
	prompts_app = typer.Typer(help="Inspect prompt templates and the custom prompt file", no_args_is_help=True)
	config_app.add_typer(models_app, name="models")
	config_app.add_typer(prompts_app, name="prompts")
	app.add_typer(config_app, name="config")

	@config_app.command(name="show")
	def show_command(
		as_json: Annotated[bool, typer.Option("--json", help="Print the resolved configuration as JSON")] = False,
	) -> None:
		"""Show the resolved configuration and where every value comes from."""
		from ollama_commit.config.config_loader import LEAF_PATHS

		manager = _manager()
		config = manager.get_config()
		if as_json:
			typer.echo(json.dumps(config.model_dump(mode="json", by_alias=True), indent=2))
			return

		sources = manager.get_config_sources()
		table = Table(title="Configuration")
		table.add_column("Key", style="cyan")
		table.add_column("Value")
		table.add_column("Source", style="dim")
		for path in LEAF_PATHS:
			if path == ("models",):
				value: Any = f"{len(config.models)} profile(s)"
			else:
				value = config
				for part in path:
					value = getattr(value, part)
			source: Any = sources
			for part in path:
				source = getattr(source, part)
			if path == ("context",):
				value = ", ".join(spec.provider for spec in manager.get_context_providers() if spec.enabled) or "-"
			table.add_row(".".join(path), escape(str(value)), SOURCE_LABELS.get(str(source), str(source)))
		console.print(table)

		files = manager.get_config_files()
		console.print(f"\nUser config:    {files['user']}")
		console.print(f"Project config: {files['local']}")
		if manager.warnings:
			from ollama_commit.utils.cli_utils import show_warning

			show_warning("\n".join(str(warning) for warning in manager.warnings))

	@config_app.command(name="set")
	def set_command(
		key: Annotated[str, typer.Argument(help="Key to set, see 'config keys'")],
		value: Annotated[str, typer.Argument(help="New value")],
		local: LocalFlag = False,
	) -> None:
		"""Set a configuration value."""
		from ollama_commit.errors import ConfigError
		from ollama_commit.utils.cli_utils import exit_with_error

		parsed = parse_config_value(key, value)
		manager = _manager()
		try:
			manager.save_config(build_partial(key, parsed), target=_target(local))
		except ConfigError as e:
			exit_with_error(str(e), exception=e)
		console.print(f"[green]✓[/] Set {escape(key)} = {escape(value)} in {manager.path_for(_target(local))}")

	@config_app.command(name="remove")
	def remove_command(
		target: Annotated[str, typer.Argument(help="Which config to remove: user, local or all")] = "user",
		yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation")] = False,
	) -> None:
		"""Delete a configuration file."""
		from ollama_commit.errors import ConfigError
		from ollama_commit.utils.cli_utils import exit_with_error

		if target not in {"user", "local", "all"}:
			msg = "Target must be one of: user, local, all"
			raise typer.BadParameter(msg)
		if not yes and not typer.confirm(f"Remove the {target} configuration?"):
			raise typer.Exit

		manager = _manager()
		targets = ["user", "local"] if target == "all" else [target]
		for name in targets:
			try:
				removed = manager.remove_config(name)  # type: ignore[arg-type]
			except ConfigError as e:
				exit_with_error(str(e), exception=e)
				return
			path = manager.path_for(name)  # type: ignore[arg-type]
			if removed:
				console.print(f"[green]✓[/] Removed {path}")
			else:
				console.print(f"[dim]No configuration at {path}[/]")

	@config_app.command(name="keys")
	def keys_command() -> None:
		"""List the configuration keys that can be set."""
		from ollama_commit.config.config_loader import env_var_for

		table = Table(title="Configuration keys")
		table.add_column("Key", style="cyan")
		table.add_column("Type")
		table.add_column("Description")
		table.add_column("Example", style="dim")
		table.add_column("Environment variable", style="dim")
		for item in CONFIG_KEYS:
			field_path = tuple(_to_snake(part) for part in item["key"].split("."))
			table.add_row(item["key"], item["type"], item["description"], item["example"], env_var_for(field_path))
		console.print(table)

	@config_app.command(name="create")
	def create_command(
		local: LocalFlag = False,
		force: Annotated[bool, typer.Option("--force", "-f", help="Overwrite an existing file")] = False,
	) -> None:
		"""Write a configuration file containing the defaults."""
		from ollama_commit.errors import ConfigError
		from ollama_commit.utils.cli_utils import exit_with_error

		manager = _manager()
		path = manager.path_for(_target(local))
		if path.exists() and not force:
			console.print(f"[yellow]{path} already exists. Use --force to overwrite it.[/]")
			raise typer.Exit(1)
		try:
			created = manager.create_default_config(_target(local))
		except ConfigError as e:
			exit_with_error(str(e), exception=e)
			return
		console.print(f"[green]✓[/] Created {created}")

	@models_app.command(name="list")
	def models_list_command() -> None:
		"""List model profiles."""
		manager = _manager()
		config = manager.get_config()
		table = Table(title="Model profiles")
		table.add_column("Name", style="cyan")
		table.add_column("Provider")
		table.add_column("Model")
		table.add_column("Roles")
		for profile in config.models:
			table.add_row(profile.name, profile.provider, profile.model, ", ".join(profile.roles))
		console.print(table)
		console.print(f"Primary model: {manager.get_primary_model()}")
		embeddings = manager.get_embeddings_model()
		console.print(f"Embeddings model: {embeddings.model if embeddings else config.embeddings_model}")

	@models_app.command(name="add")
	def models_add_command(
		name: Annotated[str, typer.Argument(help="Profile name")],
		model: Annotated[str, typer.Argument(help="Model id, e.g. llama3")],
		roles: Annotated[str, typer.Option("--roles", "-r", help="Comma-separated roles")] = "chat",
		provider: Annotated[str, typer.Option("--provider", "-p", help="ollama, openai or anthropic")] = "ollama",
		local: LocalFlag = False,
	) -> None:
		"""Add or replace a model profile."""
		from pydantic import ValidationError

		role_list = [role.strip() for role in roles.split(",") if role.strip()]
		unknown = [role for role in role_list if role not in VALID_ROLES]
		if unknown:
			msg = f"Unknown role(s): {', '.join(unknown)}. Valid roles: {', '.join(VALID_ROLES)}"
			raise typer.BadParameter(msg)
		try:
			profile = ModelProfile.model_validate({"name": name, "provider": provider, "model": model, "roles": role_list})
		except ValidationError as e:
			raise typer.BadParameter(str(e)) from e

		manager = _manager()
		profiles = [existing for existing in manager.get_config().models if existing.name != name]
		profiles.append(profile)
		partial: dict[str, Any] = {"models": _profiles_payload(profiles)}
		if profile.has_role("chat") and manager.get_chat_model() is None:
			partial["model"] = model
		manager.save_config(partial, target=_target(local))
		console.print(f"[green]✓[/] Saved profile {escape(name)} ({escape(model)})")

	@models_app.command(name="remove")
	def models_remove_command(
		name: Annotated[str, typer.Argument(help="Profile name")],
		local: LocalFlag = False,
	) -> None:
		"""Remove a model profile."""
		manager = _manager()
		profiles = manager.get_config().models
		remaining = [profile for profile in profiles if profile.name != name]
		if len(remaining) == len(profiles):
			console.print(f"[yellow]No profile named {escape(name)}[/]")
			raise typer.Exit(1)
		manager.save_config({"models": _profiles_payload(remaining)}, target=_target(local))
		console.print(f"[green]✓[/] Removed profile {escape(name)}")

	@models_app.command(name="set-embeddings")
	def models_set_embeddings_command(
		model: Annotated[str, typer.Argument(help="Embeddings model id, e.g. nomic-embed-text")],
		local: LocalFlag = False,
	) -> None:
		"""Set the model used for embeddings."""
		manager = _manager()
		config = manager.get_config()
		profiles: list[ModelProfile] = []
		updated = False
		for profile in config.models:
			if not updated and (profile.name == config.embeddings_provider or profile.has_role("embed")):
				profiles.append(profile.model_copy(update={"model": model}))
				updated = True
			else:
				profiles.append(profile)
		if not updated:
			profiles.append(ModelProfile(name=config.embeddings_provider, model=model, roles=["embed"]))
		manager.save_config(
			{"embeddingsModel": model, "models": _profiles_payload(profiles)},
			target=_target(local),
		)
		console.print(f"[green]✓[/] Embeddings model set to {escape(model)}")

	@prompts_app.command(name="list")
	def prompts_list_command() -> None:
		"""List the built-in prompt templates."""
		from ollama_commit.prompts import TEMPLATE_DESCRIPTIONS

		config = _manager().get_config()
		table = Table(title="Prompt templates")
		table.add_column("Template", style="cyan")
		table.add_column("Description")
		for name, description in TEMPLATE_DESCRIPTIONS.items():
			marker = " [green](active)[/]" if name == config.prompt_template else ""
			table.add_row(f"{name}{marker}", description)
		console.print(table)
		console.print(f"Custom prompt file: {config.prompt_file}")

	@prompts_app.command(name="create")
	def prompts_create_command(
		template: Annotated[str, typer.Option("--template", "-t", help="Template to start from")] = "default",
		force: Annotated[bool, typer.Option("--force", "-f", help="Overwrite an existing prompt file")] = False,
	) -> None:
		"""Write a template to the custom prompt file so it can be edited."""
		from ollama_commit.prompts import create_prompt_file

		if template not in VALID_TEMPLATES:
			msg = f"Unknown template '{template}'. Available templates: {', '.join(VALID_TEMPLATES)}"
			raise typer.BadParameter(msg)
		prompt_file = _manager().get_config().prompt_file
		if not create_prompt_file(prompt_file, template, overwrite=force):
			console.print(f"[yellow]{prompt_file} already exists. Use --force to overwrite it.[/]")
			raise typer.Exit(1)
		console.print(f"[green]✓[/] Wrote the {template} template to {prompt_file}")


def _to_snake(part: str) -> str:
	return "".join(f"_{char.lower()}" if char.isupper() else char for char in part)
