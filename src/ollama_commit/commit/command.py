"""Main commit command implementation for ollama-git-commit."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from ollama_commit.commit.interactive import CommitAction, CommitUI
from ollama_commit.commit.retry import Fatal, Informational, run_with_retry
from ollama_commit.commit.utils import build_commit_command, clean_commit_message
from ollama_commit.errors import CommandExecutionError, ModelUnavailableError
from ollama_commit.prompts.builder import build_commit_prompt, get_system_prompt
from ollama_commit.utils.cli_utils import loading_spinner
from ollama_commit.utils.clipboard import copy_to_clipboard

if TYPE_CHECKING:
	from collections.abc import Callable

	from ollama_commit.config.schema import ResolvedConfig
	from ollama_commit.context import ContextService
	from ollama_commit.git.utils import ChangeSet
	from ollama_commit.interfaces import ChangeSetProvider, ModelClient

logger = logging.getLogger(__name__)


class CommitState(Enum):
	"""States of one commit run."""

	FETCHING_CHANGES = "fetching_changes"
	BUILDING_PROMPT = "building_prompt"
	CALLING_MODEL = "calling_model"
	DISPLAYING_RESULT = "displaying_result"
	ACCEPTED = "accepted"
	CANCELLED = "cancelled"
	REGENERATING = "regenerating"


class RunOutcome(Enum):
	"""How a commit run ended."""

	ACCEPTED = "accepted"
	NO_CHANGES = "no_changes"
	CANCELLED = "cancelled"
	FAILED = "failed"


@dataclass(frozen=True)
class GeneratedMessage:
	"""A cleaned commit message and the change set it describes."""

	message: str
	change_set: ChangeSet


@dataclass(frozen=True)
class CommitResult:
	"""Final result of ``CommitCommand.run``."""

	outcome: RunOutcome
	exit_code: int
	message: str | None = None
	error: str | None = None
	action: CommitAction | None = None
	committed: bool = False
	pushed: bool = False


class CommitCommand:
	"""
	Generates a commit message and resolves what to do with it.

	Fetching changes, building the prompt and calling the model run as one
	retried unit. The user's decision then ends the run or starts over.
	Every collaborator is injected so the flow can be driven without git,
	a model server or a terminal.

	"""

	def __init__(
		self,
		config: ResolvedConfig,
		git: ChangeSetProvider,
		client: ModelClient,
		ui: CommitUI | None = None,
		*,
		model: str | None = None,
		context_service: ContextService | None = None,
		sleep: Callable[[float], None] = time.sleep,
		clipboard: Callable[[str], str | None] = copy_to_clipboard,
	) -> None:
		"""
		Initialize the commit command.

		Args:
		    config: Resolved configuration with CLI overrides applied
		    git: Change-set provider and commit side effects
		    client: Model client
		    ui: Terminal UI (a default one by default)
		    model: Model id; defaults to the chat profile or ``config.model``
		    context_service: Gathers context when context providers are configured
		    sleep: Sleep function used between attempts
		    clipboard: Copies text and returns the tool name or None

		"""
		self.config = config
		self.git = git
		self.client = client
		self.ui = ui or CommitUI(quiet=config.quiet)
		chat_profile = config.find_model_by_role("chat")
		self.model = model or (chat_profile.model if chat_profile else config.model)
		self.context_service = context_service
		self.sleep = sleep
		self.clipboard = clipboard
		self.state = CommitState.FETCHING_CHANGES
		self.commit_count = 0
		self._system_prompt: str | None = None

	@property
	def auto_stage(self) -> bool:
		"""Auto-commit implies auto-stage."""
		return self.config.auto_stage or self.config.auto_commit

	@property
	def system_prompt(self) -> str:
		"""The system prompt, resolved once per run."""
		if self._system_prompt is None:
			self._system_prompt = get_system_prompt(self.config.prompt_file, self.config.prompt_template)
		return self._system_prompt

	def _build_prompt(self, change_set: ChangeSet) -> str:
		context = None
		if self.context_service is not None and self.config.context:
			context = self.context_service.gather(self.config.context, change_set.diff)
		return build_commit_prompt(change_set.per_file_summary, change_set.diff, self.system_prompt, context)

	def _generate_once(self) -> GeneratedMessage:
		"""One attempt: fetch changes, build the prompt and call the model."""
		self.state = CommitState.FETCHING_CHANGES
		if self.auto_stage:
			self.git.stage_all()
		change_set = self.git.get_changes(verbose=self.config.verbose)
		self.ui.show_stats(change_set.stats, staged=change_set.staged)

		self.state = CommitState.BUILDING_PROMPT
		prompt = self._build_prompt(change_set)
		logger.debug("Prompt length: %d characters", len(prompt))

		self.state = CommitState.CALLING_MODEL
		with loading_spinner(f"Generating commit message with {self.model}...", enabled=not self.config.quiet):
			raw = self.client.generate(self.model, prompt)

		message = clean_commit_message(raw, use_emojis=self.config.use_emojis)
		if not message:
			msg = f"Empty response from model '{self.model}' after cleaning"
			raise ModelUnavailableError(msg)
		return GeneratedMessage(message=message, change_set=change_set)

	def _choose_action(self) -> CommitAction:
		"""Ask the user when interactive; a failing prompt counts as non-interactive."""
		if not self.config.interactive:
			return CommitAction.ACCEPT
		try:
			return self.ui.get_user_action(auto_commit=self.config.auto_commit)
		except Exception as e:  # noqa: BLE001
			logger.warning("Interactive prompt failed (%s); falling back to non-interactive mode", e)
			return CommitAction.ACCEPT

	def _commit_and_push(self, message: str) -> tuple[bool, bool]:
		"""Commit and then push. A failed commit skips the push."""
		self.commit_count += 1
		try:
			self.git.commit(message)
		except CommandExecutionError as e:
			logger.debug("Commit failed", exc_info=True)
			self.ui.show_error(f"Commit failed: {e}")
			return False, False
		self.ui.show_success("Changes committed")

		try:
			self.git.push()
		except CommandExecutionError as e:
			logger.debug("Push failed", exc_info=True)
			self.ui.show_error(f"Push failed: {e}")
			return True, False
		self.ui.show_success("Changes pushed")
		return True, True

	def _accept(self, message: str, action: CommitAction) -> CommitResult:
		self.state = CommitState.ACCEPTED
		if not self.config.auto_commit:
			self.ui.show_commit_command(build_commit_command(message))
			return CommitResult(RunOutcome.ACCEPTED, 0, message=message, action=action)

		committed, pushed = self._commit_and_push(message)
		exit_code = 0 if committed and pushed else 1
		return CommitResult(
			RunOutcome.ACCEPTED,
			exit_code,
			message=message,
			action=action,
			committed=committed,
			pushed=pushed,
		)

	def _copy(self, message: str) -> CommitResult:
		self.state = CommitState.ACCEPTED
		tool = self.clipboard(message)
		if tool:
			self.ui.show_success(f"Message copied to clipboard ({tool})")
		else:
			self.ui.show_warning("No clipboard tool available; copy the message above manually")
		return CommitResult(RunOutcome.ACCEPTED, 0, message=message, action=CommitAction.COPY)

	def run(self) -> CommitResult:
		"""
		Run the commit workflow until the user accepts, copies or cancels.

		Returns:
		    CommitResult: exit code 0 for accepted, no-changes and cancelled
		    runs; 1 for fatal errors and failed commits or pushes

		"""
		while True:
			result = run_with_retry(self._generate_once, self.sleep, on_retry=self.ui.show_retry)

			if isinstance(result, Informational):
				self.ui.show_message(f"ℹ️  {result.reason}")
				return CommitResult(RunOutcome.NO_CHANGES, 0)
			if isinstance(result, Fatal):
				logger.debug("Generation failed after %d attempt(s)", result.attempts, exc_info=result.error)
				self.ui.show_error(result.message)
				return CommitResult(RunOutcome.FAILED, 1, error=result.message)

			message = result.value.message
			self.state = CommitState.DISPLAYING_RESULT
			self.ui.display_message(message, self.model)
			action = self._choose_action()

			if action is CommitAction.REGENERATE:
				self.state = CommitState.REGENERATING
				self.ui.show_regenerating()
				continue
			if action is CommitAction.CANCEL:
				self.state = CommitState.CANCELLED
				self.ui.show_cancelled()
				return CommitResult(RunOutcome.CANCELLED, 0, message=message, action=action)
			if action is CommitAction.COPY:
				return self._copy(message)
			return self._accept(message, action)
