"""Cognatus MCP Server - guided scientific-method research over stdio."""

import asyncio
import logging
from typing import Any, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import CallToolResult, TextContent, Tool

from cognatus.analysis import AnalysisType
from cognatus.config import SUPPORTED_CONFIDENCE_LEVELS, Settings
from cognatus.tools import ErrorText, ResearchTools, error_text
from cognatus.workflow import ResearchWorkflow


logger = logging.getLogger("cognatus")


TOOLS = [
    # === RESEARCH STAGES ===
    Tool(
        name="observation",
        description="Problem identification. Records the problem statement and starts the literature review.",
        inputSchema={
            "type": "object",
            "properties": {
                "problem_statement": {
                    "type": "string",
                    "minLength": 10,
                    "description": "The problem or phenomenon under investigation",
                },
            },
            "required": ["problem_statement"],
        },
    ),
    Tool(
        name="literature_review",
        description=(
            "Background research. Records a literature summary; with auto_search, "
            "also suggests search queries derived from the problem statement."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "literature": {"type": "string", "minLength": 20},
                "auto_search": {"type": "boolean", "default": False},
            },
            "required": ["literature"],
        },
    ),
    Tool(
        name="hypothesis_formation",
        description="Form a single testable hypothesis and move on to experiment design.",
        inputSchema={
            "type": "object",
            "properties": {
                "hypothesis": {"type": "string", "minLength": 15},
            },
            "required": ["hypothesis"],
        },
    ),
    Tool(
        name="hypothesis_generation",
        description="Create multiple competing hypotheses. Stays in hypothesis formation.",
        inputSchema={
            "type": "object",
            "properties": {
                "hypotheses": {
                    "type": "array",
                    "items": {"type": "string", "minLength": 15},
                    "minItems": 1,
                },
            },
            "required": ["hypotheses"],
        },
    ),
    Tool(
        name="experiment_design",
        description="Design the testing methodology.",
        inputSchema={
            "type": "object",
            "properties": {
                "experiment": {"type": "string"},
            },
            "required": ["experiment"],
        },
    ),
    Tool(
        name="data_collection",
        description="Record gathered evidence.",
        inputSchema={
            "type": "object",
            "properties": {
                "data": {"type": "string"},
            },
            "required": ["data"],
        },
    ),
    Tool(
        name="analysis",
        description=(
            "Analyze collected data points statistically (descriptive, inferential, "
            "serial correlation, trend regression, hypothesis tests) and move to conclusion."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "data": {
                    "type": "array",
                    "items": {"type": "string"},
                    "minItems": 2,
                    "description": "Data points; numbers are extracted from each entry",
                },
            },
            "required": ["data"],
        },
    ),
    Tool(
        name="conclusion",
        description="Draw conclusions and refine theory. Can be called repeatedly once analysis is done.",
        inputSchema={
            "type": "object",
            "properties": {
                "conclusion": {"type": "string"},
            },
            "required": ["conclusion"],
        },
    ),

    # === EVIDENCE ===
    Tool(
        name="score_hypothesis",
        description="Assign an evidence score to a specific hypothesis.",
        inputSchema={
            "type": "object",
            "properties": {
                "hypothesis_id": {"type": "string"},
                "score": {"type": "number", "minimum": 0, "maximum": 1},
            },
            "required": ["hypothesis_id", "score"],
        },
    ),
    Tool(
        name="check_for_breakthrough",
        description="Average evidence score across all hypotheses, bucketed into an evidence tier.",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="get_state",
        description="Get the current research state, legal next stages and progress.",
        inputSchema={"type": "object", "properties": {}},
    ),

    # === HELPERS (no stage change) ===
    Tool(
        name="literature_search",
        description=(
            "Suggest literature search queries from a query or the recorded problem statement. "
            "Advisory only: no database is searched."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "query": {"type": "string"},
            },
        },
    ),
    Tool(
        name="data_analysis",
        description="Statistical analysis of data points without changing the research stage.",
        inputSchema={
            "type": "object",
            "properties": {
                "data": {"type": "array", "items": {"type": "string"}, "minItems": 1},
                "analysis_type": {
                    "type": "string",
                    "enum": [t.value for t in AnalysisType],
                    "default": AnalysisType.COMPREHENSIVE.value,
                },
                "confidence_level": {
                    "type": "number",
                    "enum": list(SUPPORTED_CONFIDENCE_LEVELS),
                },
            },
            "required": ["data"],
        },
    ),
]


def _reply(text: str, is_error: bool = False) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=is_error)


async def dispatch(handlers: dict, name: str, arguments: Optional[dict[str, Any]]) -> CallToolResult:
    if name not in handlers:
        return _reply(f"Unknown tool: {name}", is_error=True)

    try:
        result = await handlers[name](**(arguments or {}))
    except Exception as e:
        # argument binding failures; handler bodies report their own errors
        logger.exception(f"Error in tool {name}")
        result = error_text(name, e)

    return _reply(str(result), is_error=isinstance(result, ErrorText))


def create_server(settings: Optional[Settings] = None) -> Server:
    """Build a server that owns exactly one research workflow."""
    settings = settings or Settings()
    workflow = ResearchWorkflow(confidence_level=settings.confidence_level)
    handlers = ResearchTools(workflow).handlers()

    server = Server(settings.server_name)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return TOOLS

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> CallToolResult:
        return await dispatch(handlers, name, arguments)

    return server


def configure_logging(settings: Settings) -> None:
    # stdout carries the stdio protocol, so logs go to stderr
    logging.basicConfig(
        level=settings.log_level.value,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def run_server(settings: Settings):
    server = create_server(settings)
    async with stdio_server() as (read_stream, write_stream):
        logger.info(f"{settings.server_name} running on stdio")
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main(settings: Optional[Settings] = None):
    settings = settings or Settings.from_env()
    configure_logging(settings)
    asyncio.run(run_server(settings))


if __name__ == "__main__":
    main()
