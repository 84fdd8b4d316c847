"""
Café Finder MCP Server.

Transport: stdio.

Expected MCP Tool Return Format:
{
    "ok": bool,
    "results": Any,          # Present if ok is True
    "trusted_intent": str,   # search only
    "error": str            # Present if ok is False
}
"""

import argparse
import logging
import os
from typing import Annotated, Any, Dict, List, Optional

from dotenv import load_dotenv
from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from .common.config import load_config
from .common.errors import FinderError
from .common.schemas.query import SearchContext
from .providers.memory import InMemoryCorpusProvider
from .retriever.engine import SearchEngine

load_dotenv()

logger = logging.getLogger("cafe_finder.server")


class FinderServerApp:
    """
    MCP server application exposing the search engine as tools.

    Args:
        engine: Search engine over a loaded corpus
        mcp_server_name: Advertised MCP server name
    """

    def __init__(self, engine: SearchEngine, mcp_server_name: str = "cafe_finder"):
        self.engine = engine
        self.mcp = FastMCP(name=mcp_server_name)

        # ---------- MCP Tools: Search ---------- #
        @self.mcp.tool(
            name="search",
            description=(
                "Search the Café knowledge corpus: people, tools, FAQs, library resources, "
                "discussions, Love of Product sessions, market signals and competitors. "
                "Returns ranked results per category, the parsed query, and a direct "
                "answer when the top match is strong enough."
            ),
            annotations=ToolAnnotations(readOnlyHint=True, destructiveHint=False)
        )
        async def tool_search(
            query: Annotated[str, Field(description="natural language search query")],
            current_page: Annotated[Optional[str], Field(description="page the user is searching from")] = None,
            current_topics: Annotated[Optional[List[str]], Field(description="topics of the current page")] = None,
        ) -> Dict[str, Any]:
            """
            Run the full search pipeline for one query.

            Args:
                query (str): The user's query.
                current_page (str): Optional page context.
                current_topics (List[str]): Optional topics of the current page.

            Returns:
                Dict[str, Any]: The serialised SearchResponse and the intent
                callers may act on at the configured confidence threshold.
            """
            context = None
            if current_page:
                context = SearchContext(current_page=current_page, current_topics=list(current_topics or []))
            try:
                response = self.engine.search(query, context)
            except FinderError as e:
                return {"ok": False, "error": str(e)}
            return {
                "ok": True,
                "results": response.to_dict(),
                "trusted_intent": self.engine.trusted_intent(response.query).value,
            }

        # ---------- MCP Tools: Quick Search ---------- #
        @self.mcp.tool(
            name="quick_search",
            description="Fast people / FAQ / resource lookup for autocomplete. No reranking or answers.",
            annotations=ToolAnnotations(readOnlyHint=True, destructiveHint=False)
        )
        async def tool_quick_search(
            query: Annotated[str, Field(description="partial or full query text")],
            limit: Annotated[int, Field(description="maximum results per category")] = 5,
        ) -> Dict[str, Any]:
            """
            Autocomplete lookup over people, FAQs and resources.

            Returns:
                Dict[str, Any]: Up to `limit` results per category.
            """
            if limit < 1:
                return {"ok": False, "error": "limit must be a positive integer."}
            try:
                results = self.engine.quick_search(query, limit=limit)
            except FinderError as e:
                return {"ok": False, "error": str(e)}
            return {"ok": True, "results": results.to_dict()}

        # ---------- MCP Tools: Engine Status ---------- #
        @self.mcp.tool(
            name="engine_status",
            description="Report whether the search indexes are built and the active search settings.",
            annotations=ToolAnnotations(readOnlyHint=True, destructiveHint=False)
        )
        async def tool_engine_status() -> Dict[str, Any]:
            config = self.engine.config
            return {
                "ok": True,
                "initialized": self.engine.is_initialized(),
                "max_results_per_type": config.max_results_per_type,
                "quick_search_limit": config.quick_search_limit,
                "synonym_expansion": config.synonym_expansion,
                "answer_synthesis": config.answer_synthesis,
                "intent_confidence_threshold": config.intent_confidence_threshold,
            }

    def run(self) -> None:
        """Runs the MCP server using stdio transport."""
        self.mcp.run(transport="stdio")


def main() -> None:
    config = load_config()

    parser = argparse.ArgumentParser(description="Run the Café Finder MCP server (stdio).")
    parser.add_argument(
        "--server-name",
        default=config.server.name,
        help="Advertised MCP server name.",
    )
    parser.add_argument(
        "--corpus",
        default=config.corpus.path or os.getenv("CAFE_FINDER_CORPUS", ""),
        help="Path to the JSON corpus snapshot.",
    )
    parser.add_argument(
        "--log-level",
        default=config.server.log_level,
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging level.",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.corpus:
        provider = InMemoryCorpusProvider.from_json_file(args.corpus)
    else:
        logger.warning("No corpus configured; serving an empty corpus. Set --corpus or CAFE_FINDER_CORPUS.")
        provider = InMemoryCorpusProvider()

    engine = SearchEngine(provider, config.search)
    engine.initialize()

    app = FinderServerApp(engine=engine, mcp_server_name=args.server_name)
    logger.info("Starting Café Finder MCP server '%s'", args.server_name)
    app.run()


if __name__ == "__main__":
    main()
