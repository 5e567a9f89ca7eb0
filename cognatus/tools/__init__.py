"""MCP-facing tool handlers."""

from cognatus.tools.research_tools import ErrorText, ResearchTools, error_text, reports_errors

__all__ = ["ErrorText", "ResearchTools", "error_text", "reports_errors"]
