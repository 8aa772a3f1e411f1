"""Git utilities for ollama-git-commit."""

from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from ollama_commit.errors import CommandExecutionError, NoChangesSignal, RepositoryError

logger = logging.getLogger(__name__)

# Name-status letters to the verb used in the file summary
STATUS_ACTIONS = {
	"A": "added",
	"D": "deleted",
	"M": "modified",
	"R": "renamed",
	"C": "copied",
}

_DEFINITION_PATTERN = re.compile(r"^\+.*(function|def |const |let |var |interface |class )", re.MULTILINE)
_JSON_VERSION = r'^{sign}+\s*"version":\s*"([^"]+)"'
_TOML_VERSION = r'^{sign}+\s*version\s*=\s*"([^"]+)"'
_PLAIN_VERSION = r"^{sign}+\s*([0-9]+\.[0-9]+\.[0-9]+)"


def run_git_command(command: list[str], cwd: Path | None = None, *, capture_stderr: bool = True) -> str:
	"""
	Run a Git command and return its stripped output.

	Args:
		command: Git command to run
		cwd: Working directory (optional)
		capture_stderr: Capture stderr instead of letting it reach the terminal

	Returns:
		Command output as string

	Raises:
		CommandExecutionError: If the command fails or git is not installed

	"""
	try:
		result = subprocess.run(  # noqa: S603
			command,
			cwd=cwd,
			stdout=subprocess.PIPE,
			stderr=subprocess.PIPE if capture_stderr else None,
			text=True,
			check=True,
		)
	except subprocess.CalledProcessError as e:
		detail = (e.stderr or "").strip() or f"exit status {e.returncode}"
		msg = f"Git command failed: {' '.join(command)}: {detail}"
		logger.debug(msg)
		raise CommandExecutionError(msg) from e
	except OSError as e:
		msg = f"Failed to execute git command: {e}"
		raise CommandExecutionError(msg) from e
	return result.stdout.strip()


@dataclass(frozen=True)
class ChangeStats:
	"""Summary counts from ``git diff --stat``."""

	files: int = 0
	insertions: int = 0
	deletions: int = 0


@dataclass(frozen=True)
class ChangeSet:
	"""The diff chosen for commit message generation."""

	diff: str
	staged: bool
	stats: ChangeStats = field(default_factory=ChangeStats)
	per_file_summary: str = ""


def parse_stat_output(output: str) -> ChangeStats:
	"""Parse the output of ``git diff --stat`` into counts."""
	lines = [line for line in output.splitlines() if line.strip()]
	if not lines:
		return ChangeStats()
	summary = lines[-1]
	insertions = re.search(r"(\d+) insertion", summary)
	deletions = re.search(r"(\d+) deletion", summary)
	return ChangeStats(
		files=max(0, len(lines) - 1),
		insertions=int(insertions.group(1)) if insertions else 0,
		deletions=int(deletions.group(1)) if deletions else 0,
	)


def _match_version(pattern: str, file_diff: str) -> tuple[str | None, str | None]:
	old = re.search(pattern.format(sign="-"), file_diff, re.MULTILINE)
	new = re.search(pattern.format(sign=r"\+"), file_diff, re.MULTILINE)
	return (old.group(1) if old else None, new.group(1) if new else None)


def extract_version_change(path: str, file_diff: str) -> str | None:
	"""
	Describe a version bump in a manifest or version file.

	Recognizes ``package.json``, ``package-lock.json``, ``pyproject.toml``
	and any path containing ``version``.

	Returns:
		A one-line description or None if no version line changed

	"""
	name = Path(path).name
	if name in {"package.json", "package-lock.json"}:
		pattern = _JSON_VERSION
	elif name == "pyproject.toml":
		pattern = _TOML_VERSION
	elif "version" in path.lower():
		pattern = _PLAIN_VERSION
	else:
		return None

	old_version, new_version = _match_version(pattern, file_diff)
	if not new_version:
		return None
	if old_version and old_version != new_version:
		return f"📦 {path}: Bumped version from {old_version} to {new_version}"
	if not old_version:
		return f"📦 {path}: Set version to {new_version}"
	return None


def summarize_file_diff(file_diff: str) -> str:
	"""Return ``(+A -D[, N new functions/vars])`` for a single file diff."""
	lines = file_diff.splitlines()
	additions = sum(1 for line in lines if line.startswith("+") and not line.startswith("+++"))
	deletions = sum(1 for line in lines if line.startswith("-") and not line.startswith("---"))
	definitions = len(_DEFINITION_PATTERN.findall(file_diff))
	summary = f"(+{additions} -{deletions}"
	if definitions:
		summary += f", {definitions} new functions/vars"
	return summary + ")"


class GitService:
	"""Reads change sets from a repository and performs commit side effects."""

	def __init__(self, repo_path: Path | None = None, *, quiet: bool = False) -> None:
		"""
		Initialize the service.

		Args:
			repo_path: Repository directory (defaults to cwd)
			quiet: Capture git's stderr for commit and push instead of streaming it

		"""
		self.repo_path = repo_path or Path.cwd()
		self.quiet = quiet

	def _run(self, *args: str) -> str:
		return run_git_command(["git", *args], cwd=self.repo_path)

	def _run_visible(self, *args: str) -> str:
		return run_git_command(["git", *args], cwd=self.repo_path, capture_stderr=self.quiet)

	def is_repository(self) -> bool:
		"""Return True if ``repo_path`` is inside a git work tree."""
		try:
			self._run("rev-parse", "--git-dir")
		except CommandExecutionError as e:
			logger.debug("Git repository check for %s failed: %s", self.repo_path, e)
			return False
		return True

	def get_changes(self, *, verbose: bool = False) -> ChangeSet:
		"""
		Return the staged diff, or the unstaged diff when nothing is staged.

		Raises:
			RepositoryError: Not inside a git repository
			NoChangesSignal: Nothing staged or unstaged
			CommandExecutionError: A git command failed

		"""
		if not self.is_repository():
			msg = f"Not a git repository: {self.repo_path}"
			raise RepositoryError(msg)

		staged = True
		diff = self._run("diff", "--cached")
		if not diff.strip():
			diff = self._run("diff")
			staged = False
			if not diff.strip():
				msg = "No changes found (staged or unstaged)."
				raise NoChangesSignal(msg)
			if verbose:
				logger.info("Using unstaged changes; stage them before committing")
		elif verbose:
			logger.info("Using staged changes for commit message generation")

		stats = self.get_change_stats(staged=staged)
		summary = self.get_file_summary(staged=staged, verbose=verbose)
		return ChangeSet(diff=diff, staged=staged, stats=stats, per_file_summary=summary)

	def get_change_stats(self, *, staged: bool) -> ChangeStats:
		"""Return diff statistics; failures yield zero counts."""
		args = ["diff", "--cached", "--stat"] if staged else ["diff", "--stat"]
		try:
			return parse_stat_output(self._run(*args))
		except CommandExecutionError:
			logger.debug("Could not compute change statistics", exc_info=True)
			return ChangeStats()

	def _file_diff(self, path: str, *, staged: bool) -> str:
		args = ["diff", "--cached", "--", path] if staged else ["diff", "--", path]
		return self._run(*args)

	def get_file_summary(self, *, staged: bool, verbose: bool = False) -> str:
		"""
		Build the per-file summary included in the prompt.

		Each file gets its action and addition/deletion counts. Version bumps
		in manifests are listed in a separate section. In verbose mode the
		first three added lines of every file are included.

		"""
		args = ["diff", "--cached", "--name-status"] if staged else ["diff", "--name-status"]
		try:
			output = self._run(*args)
		except CommandExecutionError:
			logger.debug("Could not list changed files", exc_info=True)
			return "📁 Error analyzing file changes"

		entries = [line for line in output.splitlines() if line.strip()]
		if not entries:
			return "📁 0 files changed"

		details: list[str] = []
		version_changes: list[str] = []
		for entry in entries:
			status, _, path = entry.partition("\t")
			if status.startswith(("R", "C")) and "\t" in path:
				path = path.split("\t")[-1]
			if path == ".git" or path.startswith((".git/", ".git\\")):
				continue
			action = STATUS_ACTIONS.get(status[:1], "modified")

			change_summary = ""
			file_diff = ""
			if action != "deleted":
				try:
					file_diff = self._file_diff(path, staged=staged)
				except CommandExecutionError:
					logger.debug("Could not diff %s", path)
				if file_diff:
					change_summary = f" {summarize_file_diff(file_diff)}"
					version_info = extract_version_change(path, file_diff)
					if version_info:
						version_changes.append(version_info)

			details.append(f"📄 {path} ({action}){change_summary}")
			if verbose and file_diff:
				key_lines = [line for line in file_diff.splitlines() if line.startswith("+") and not line.startswith("+++")]
				if key_lines[:3]:
					details.append("   Key additions:")
					details.extend(f"   {line}" for line in key_lines[:3])

		result = f"📁 {len(entries)} files changed:\n" + "\n".join(details)
		if version_changes:
			result += "\n\n📦 Version Changes:\n" + "\n".join(version_changes)
		return result

	def stage_all(self) -> None:
		"""Stage every change with ``git add -A``."""
		self._run("add", "-A")
		logger.info("Staged all changes in %s", self.repo_path)

	def commit(self, message: str) -> None:
		"""Create a commit with ``message``."""
		self._run_visible("commit", "-m", message)
		logger.info("Created commit %s: %s", self.get_last_commit_hash()[:7], message.splitlines()[0] if message else "")

	def push(self) -> None:
		"""Push the current branch to its upstream."""
		self._run_visible("push")
		logger.info("Pushed branch %s", self.get_branch_name())

	def get_branch_name(self) -> str:
		"""Return the current branch, or ``unknown`` outside a branch."""
		try:
			return self._run("branch", "--show-current") or "unknown"
		except CommandExecutionError:
			return "unknown"

	def get_last_commit_hash(self) -> str:
		"""Return the ``HEAD`` commit hash, or an empty string."""
		try:
			return self._run("rev-parse", "HEAD")
		except CommandExecutionError:
			return ""
