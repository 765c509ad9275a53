"""Sisyphus hooks - prompt mode detection and todo continuation for Claude Code."""

__version__ = "0.4.0"
