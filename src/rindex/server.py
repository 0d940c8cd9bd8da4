# server.py - HTTP listing endpoint and MCP server for rindex
import asyncio
import functools
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from .service import (
    NOT_DIRECTORY_MESSAGE,
    PATH_NOT_FOUND_MESSAGE,
    QueryOutcome,
    QueryStatus,
    query_directory,
)
from .tools.filesystem.directory import default_worker_count

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal Server Error"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def build_response(outcome: QueryOutcome) -> Response:
    """
    Map a listing outcome onto its HTTP response

    Args:
        outcome: Result of query_directory

    Returns:
        Starlette response with status, content type and body set
    """
    if outcome.status is QueryStatus.SUCCESS:
        return Response(content=outcome.body, status_code=200, media_type="application/json")

    if outcome.status is QueryStatus.PATH_NOT_FOUND:
        return PlainTextResponse(PATH_NOT_FOUND_MESSAGE, status_code=404)

    return PlainTextResponse(NOT_DIRECTORY_MESSAGE, status_code=400)


class RIndexServer:
    """
    Directory listing server

    Serves nginx autoindex style JSON listings of a root directory over
    HTTP, and the same listings as an MCP tool over the streamable-HTTP
    transport.
    """

    def __init__(
        self,
        root: str,
        host: str = "127.0.0.1",
        port: int = 3500,
        workers: Optional[int] = None,
        confine_symlinks: bool = False,
        mcp_path: str = "/_mcp",
        log_level: str = "INFO",
    ):
        """
        Initialize the server

        Args:
            root: Directory to serve
            host: Address to listen on
            port: Port to listen on
            workers: Size of the scan pools (defaults to the CPU count)
            confine_symlinks: Refuse paths whose real location leaves root
            mcp_path: URL path of the MCP endpoint
            log_level: Log level passed to the MCP server

        Raises:
            ValueError: If root is not an existing directory
        """
        if not os.path.isdir(root):
            raise ValueError(f"Root directory does not exist: {root}")

        self.root = os.path.realpath(root)
        self.host = host
        self.port = port
        self.confine_symlinks = confine_symlinks
        self.workers = workers or default_worker_count()

        # Request threads block on per-entry futures, so the two pools stay separate
        self._request_executor = ThreadPoolExecutor(
            max_workers=self.workers, thread_name_prefix="rindex-request"
        )
        self._entry_executor = ThreadPoolExecutor(
            max_workers=self.workers, thread_name_prefix="rindex-entry"
        )

        level = log_level.upper()
        self.mcp = FastMCP(
            "rindex",
            host=self.host,
            port=self.port,
            log_level=level if level in _LOG_LEVELS else "INFO",
            streamable_http_path=mcp_path,
        )

        self._register_routes()
        self._register_tools()

        logger.info(f"rindex server initialized with root: {self.root}")

    async def query(self, request_path: str) -> QueryOutcome:
        """
        Run a listing request on the worker pool

        Args:
            request_path: Decoded URL path relative to the root

        Returns:
            QueryOutcome for the request
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._request_executor,
            functools.partial(
                query_directory,
                self.root,
                request_path,
                executor=self._entry_executor,
                confine_symlinks=self.confine_symlinks,
            ),
        )

    def _register_routes(self):
        """Register the HTTP listing endpoint"""

        @self.mcp.custom_route("/{path:path}", methods=["GET"])
        async def autoindex(request: Request) -> Response:
            request_path = request.path_params.get("path", "")
            try:
                outcome = await self.query(request_path)
            except Exception:
                # Details stay in the server log only
                logger.exception(f"Error listing directory /{request_path}")
                return PlainTextResponse(INTERNAL_ERROR_MESSAGE, status_code=500)

            return build_response(outcome)

    def _register_tools(self):
        """Register the listing tool with the MCP server"""

        @self.mcp.tool()
        async def list_directory(path: str = "") -> Dict[str, Any]:
            """
            List the immediate children of a directory under the served root

            Args:
                path: Path relative to the served root

            Returns:
                Dictionary with the sorted entries, or an error message
            """
            try:
                outcome = await self.query(path)
            except Exception:
                logger.exception(f"Error listing directory {path}")
                return {"success": False, "error": INTERNAL_ERROR_MESSAGE, "path": path}

            if outcome.status is QueryStatus.PATH_NOT_FOUND:
                return {"success": False, "error": PATH_NOT_FOUND_MESSAGE, "path": path}

            if outcome.status is QueryStatus.NOT_DIRECTORY:
                return {"success": False, "error": NOT_DIRECTORY_MESSAGE, "path": path}

            return {"success": True, "data": [entry.to_dict() for entry in outcome.entries]}

    def app(self) -> Starlette:
        """Return the ASGI application serving listings and the MCP endpoint"""
        return self.mcp.streamable_http_app()

    def start(self):
        """Start serving until interrupted"""
        logger.info(f"Server started at http://{self.host}:{self.port}")
        try:
            self.mcp.run(transport="streamable-http")
        except Exception as e:
            logger.error(f"Error running server: {str(e)}")
            raise
        finally:
            self.close()

    def close(self):
        """Shut down the worker pools"""
        self._request_executor.shutdown(wait=False, cancel_futures=True)
        self._entry_executor.shutdown(wait=False, cancel_futures=True)
