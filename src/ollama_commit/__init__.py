"""Ollama Git Commit - commit messages for your working tree, written by a local LLM."""

from __future__ import annotations

__version__ = "0.4.0"
__author__ = "ollama-git-commit contributors"
