"""Built-in system prompts for commit message generation."""

from __future__ import annotations

COMMIT_COMMAND_HINT = 'What you write will be passed directly to git commit -m "[message]"'

DEFAULT_PROMPT = f"""Write concise commit messages:
- The first line should be a short summary of the changes
- Mention the files that were changed and what was modified
- Explain the reasoning behind changes
- Use bullet points for multiple changes
- Use appropriate emojis sparingly for categorization
- If there are no changes or the input is blank, return a blank string

Think carefully before writing your commit message.

The output format should be:

Summary of changes
- change description
- change description

{COMMIT_COMMAND_HINT}"""

CONVENTIONAL_PROMPT = """Generate conventional commit messages following the format: type(scope): description

Types: feat, fix, docs, style, refactor, test, chore, perf, ci, build, revert

Rules:
- Use lowercase for type and description
- Keep description under 72 characters
- Add body with bullet points for multiple changes
- Be specific about what changed and why
- Use present tense

Format:
type(scope): short description

- detailed change 1
- detailed change 2"""

SIMPLE_PROMPT = f"""Create simple, clear commit messages:

- Start with a verb (add, fix, update, remove, etc.)
- Mention what files or features were changed
- Keep it concise but informative
- Use normal capitalization
- No special formatting required

Example: "Fix user authentication bug in login component"

{COMMIT_COMMAND_HINT}"""

DETAILED_PROMPT = f"""Generate comprehensive commit messages with full context:

- Start with a clear, descriptive summary (50-72 characters)
- Include the reasoning behind the changes
- List all modified files and their purposes
- Explain any breaking changes or side effects
- Use technical language appropriate for developers
- Include relevant issue numbers if mentioned in diff
- Use emojis sparingly for categorization

Format:
Summary of the main change

Context:
- Why this change was needed
- What problem it solves

Changes:
- Detailed list of modifications
- File-by-file breakdown when helpful

Impact:
- Any breaking changes
- Performance implications
- Testing considerations

{COMMIT_COMMAND_HINT}"""

PROMPT_TEMPLATES: dict[str, str] = {
	"default": DEFAULT_PROMPT,
	"conventional": CONVENTIONAL_PROMPT,
	"simple": SIMPLE_PROMPT,
	"detailed": DETAILED_PROMPT,
}

TEMPLATE_DESCRIPTIONS: dict[str, str] = {
	"default": "Summary line plus bullet points",
	"conventional": "Conventional Commits: type(scope): description",
	"simple": "One clear sentence starting with a verb",
	"detailed": "Summary with context, changes and impact sections",
}


def get_template(name: str) -> str:
	"""
	Return the text of a built-in template.

	Raises:
		KeyError: If ``name`` is not a built-in template

	"""
	if name not in PROMPT_TEMPLATES:
		msg = f"Template '{name}' not found. Available templates: {', '.join(PROMPT_TEMPLATES)}"
		raise KeyError(msg)
	return PROMPT_TEMPLATES[name]
