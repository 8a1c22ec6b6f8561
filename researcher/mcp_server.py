#!/usr/bin/env python3
"""
Researcher search proxy - MCP stdio server

Offers the search-and-enrich pipeline to agents as two MCP tools:
search_web and fetch_page.
"""

import asyncio
import json
import logging
import sys
from typing import Any, Dict, List, Optional

# MCP Protocol imports
from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from .config.settings import settings
from .search.aggregator import SearchAggregator
from .search.errors import PageContentError, SearchProviderError
from .utils.params import parse_int

logger = logging.getLogger(__name__)

SEARCH_TOOL = "search_web"
FETCH_TOOL = "fetch_page"


class ResearcherMCPServer:
    """MCP server wrapping a SearchAggregator"""

    def __init__(self, aggregator: Optional[SearchAggregator] = None):
        self.aggregator = aggregator or SearchAggregator()
        self.server = Server("researcher-search")
        self._setup_handlers()

        logger.info("Researcher MCP server initialized")
        if settings.config.server.debug:
            logger.debug(f"Configuration: {settings.to_dict()}")

    def _setup_handlers(self):
        """Setup MCP protocol handlers"""

        @self.server.list_tools()
        async def handle_list_tools() -> List[types.Tool]:
            return self.list_tools()

        @self.server.call_tool()
        async def handle_call_tool(name: str, arguments: Dict[str, Any]) -> List[types.TextContent]:
            return await self.call_tool(name, arguments)

    def list_tools(self) -> List[types.Tool]:
        """List available tools"""
        extraction = settings.config.content_extraction
        return [
            types.Tool(
                name=SEARCH_TOOL,
                description="Search the web and return each result with the cleaned text of its page",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "q": {
                            "type": "string",
                            "description": "Search query"
                        },
                        "n_results": {
                            "type": "integer",
                            "description": "Maximum number of results",
                            "minimum": 1,
                            "default": settings.config.search.default_num_results
                        },
                        "max_length": {
                            "type": "integer",
                            "description": "Maximum characters of page text per result",
                            "minimum": 0,
                            "default": extraction.default_max_content_length
                        }
                    },
                    "required": ["q"]
                }
            ),
            types.Tool(
                name=FETCH_TOOL,
                description="Fetch a web page and return its cleaned text",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "url": {
                            "type": "string",
                            "description": "Page URL"
                        },
                        "max_length": {
                            "type": "integer",
                            "description": "Maximum characters of page text",
                            "minimum": 0,
                            "default": extraction.default_max_content_length
                        }
                    },
                    "required": ["url"]
                }
            )
        ]

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> List[types.TextContent]:
        """Run a tool and wrap its JSON payload as text content"""
        if name == SEARCH_TOOL:
            payload = await self._search_web(arguments)
        elif name == FETCH_TOOL:
            payload = await self._fetch_page(arguments)
        else:
            raise ValueError(f"Unknown tool: {name}")

        return [types.TextContent(
            type="text",
            text=json.dumps(payload, indent=2, ensure_ascii=False)
        )]

    async def _search_web(self, args: Dict[str, Any]) -> Dict[str, Any]:
        query = str(args.get("q", "")).strip()
        if not query:
            return {"error": "query parameter is required", "results": []}

        n_results = parse_int(args.get("n_results"), settings.config.search.default_num_results)
        max_length = parse_int(
            args.get("max_length"), settings.config.content_extraction.default_max_content_length
        )

        try:
            response = await self.aggregator.search(query, n_results, max_length)
        except SearchProviderError as e:
            logger.error(f"Search error: {e}")
            return {"error": str(e), "results": []}

        return response.to_dict()

    async def _fetch_page(self, args: Dict[str, Any]) -> Dict[str, Any]:
        url = str(args.get("url", "")).strip()
        if not url:
            return {"error": "url parameter is required"}

        max_length = parse_int(
            args.get("max_length"), settings.config.content_extraction.default_max_content_length
        )

        try:
            content = await self.aggregator.fetch_page_content(url, max_length)
        except PageContentError as e:
            logger.warning(f"Fetch error for {url}: {e}")
            return {"error": str(e)}

        return {"contents": content}

    async def run_server(self):
        """Run the MCP server over stdio"""
        logger.info("Starting MCP server in stdio mode...")
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(read_stream, write_stream, self.server.create_initialization_options())

    async def cleanup(self):
        await self.aggregator.close()


async def serve():
    if not settings.validate_config():
        logger.error("Invalid configuration, exiting")
        sys.exit(1)

    mcp_server = ResearcherMCPServer()
    try:
        await mcp_server.run_server()
    finally:
        await mcp_server.cleanup()


def main():
    """Console entry point"""
    # stdout carries the protocol, so logs go to stderr
    settings.setup_logging()
    asyncio.run(serve())


if __name__ == "__main__":
    main()
