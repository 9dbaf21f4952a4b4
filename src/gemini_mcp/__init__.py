"""Gemini exposed as MCP tools over stdio."""

__version__ = "1.0.0"
