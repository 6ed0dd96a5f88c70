"""Smart Library tool server.

Wires the lending and recommendation core to a FastMCP server:

1. build_library: store, audit sink, clock and services from configuration
2. create_server: a FastMCP instance with every library tool registered
3. main: stdio entry point (``smart-library`` console script)

Logging goes to stderr so stdout stays free for the stdio transport.
"""

import logging
import signal
import sys
from dataclasses import dataclass
from typing import Any

from fastmcp import FastMCP

from .clock import Clock, SystemClock
from .config import LibraryConfig, get_config
from .database.audit import AuditSink, InMemoryAuditSink, SqlAuditSink
from .database.seed import seed_library
from .database.session import DatabaseManager
from .database.store import LibraryStore
from .observability import ObservabilityConfig, initialize_observability
from .recommendations.service import RecommendationService
from .services.catalog import CatalogSearch
from .services.lending import LendingEngine
from .services.statistics import LibraryStatistics
from .tools import build_tools

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)],
)

logger = logging.getLogger(__name__)


@dataclass
class Library:
    """Everything the tool handlers operate on."""

    store: LibraryStore
    audit_sink: AuditSink
    clock: Clock
    engine: LendingEngine
    recommendations: RecommendationService
    search: CatalogSearch
    statistics: LibraryStatistics


def build_audit_sink(config: LibraryConfig, clock: Clock) -> AuditSink:
    """In-memory or SQLite audit trail, as configured."""
    if config.audit_backend == "sqlite":
        logger.info("Persisting audit events to %s", config.database_path)
        return SqlAuditSink(DatabaseManager(config.get_database_url()), clock=clock)
    return InMemoryAuditSink(clock=clock)


def build_library(config: LibraryConfig | None = None, clock: Clock | None = None) -> Library:
    """Assemble the store and services for one server process."""
    config = config or get_config()
    clock = clock or SystemClock()

    audit_sink = build_audit_sink(config, clock)
    store = LibraryStore(audit_sink=audit_sink, clock=clock)
    if config.seed_demo_data:
        seed_library(store, item_count=config.demo_item_count, clock=clock)

    return Library(
        store=store,
        audit_sink=audit_sink,
        clock=clock,
        engine=LendingEngine(store, audit_sink=audit_sink, clock=clock),
        recommendations=RecommendationService(
            store, clock=clock, default_count=config.default_recommendation_count
        ),
        search=CatalogSearch(store),
        statistics=LibraryStatistics(store, clock=clock, audit_sink=audit_sink),
    )


def create_server(library: Library, config: LibraryConfig | None = None) -> FastMCP:
    """Create a FastMCP server exposing the library tools."""
    config = config or get_config()
    mcp = FastMCP(
        name=config.server_name,
        version=config.server_version,
        instructions=(
            "Smart Library - lend books, periodicals and theses, track overdue loans "
            "and recommend items to patrons based on their reading history, "
            "interests and age."
        ),
    )

    tools = build_tools(library.engine, library.recommendations, library.search, library.statistics)
    for tool in tools:
        logger.debug("Registering tool: %s", tool["name"])
        try:
            mcp.tool(name=tool["name"], description=tool["description"])(tool["handler"])
        except Exception:
            logger.exception("Failed to register tool %s", tool["name"])
            raise

    logger.info("Registered %d tools", len(tools))
    return mcp


def run_stdio_server(config: LibraryConfig) -> None:
    """Run the server on the stdio transport until terminated."""
    logging.getLogger().setLevel(config.log_level)
    if config.is_development:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Debug mode enabled")
    else:
        logging.getLogger("fastmcp").setLevel(logging.WARNING)

    initialize_observability(ObservabilityConfig(service_name=config.server_name))
    mcp = create_server(build_library(config), config)

    def signal_handler(signum: int, _frame: Any) -> None:
        logger.info("Received signal %s, shutting down", signum)
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        logger.info("Starting %s v%s on stdio transport", config.server_name, config.server_version)
        mcp.run(transport="stdio")
    except Exception:
        logger.exception("Fatal error in library server")
        sys.exit(1)


def main() -> None:
    """Entry point for the ``smart-library`` command."""
    run_stdio_server(get_config())


if __name__ == "__main__":
    main()
