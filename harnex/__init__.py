"""Structural validators and closed-schema telemetry for Claude Code harnesses."""

__version__ = "0.1.0"