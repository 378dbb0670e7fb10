import argparse
import logging
import socket
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from mcp.server.fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from image_api_client import ImageAPIClient
from managers.config_manager import ConfigManager, MissingCredentialError
from managers.generation_orchestrator import GenerationOrchestrator
from managers.task_poller import TaskPoller
from models.config import ServerConfig
from tools.generation import ImageGenerationHandler, register_generation_tools

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("MCP_Server")

MAX_PORT_ATTEMPTS = 10
TRANSPORTS = ("stdio", "streamable-http")
NOT_FOUND_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


def find_available_port(host: str, start_port: int, max_attempts: int = MAX_PORT_ATTEMPTS) -> int:
    """Return the first port in [start_port, start_port + max_attempts) that can be bound"""
    for attempt in range(max_attempts):
        port = start_port + attempt
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            try:
                sock.bind((host, port))
            except OSError:
                logger.info("Port %s is in use, trying next port...", port)
                continue
        return port
    raise RuntimeError(f"Could not find available port, last attempt: {start_port + max_attempts - 1}")


def build_status_payload(config: ServerConfig, handler: ImageGenerationHandler) -> dict:
    return {
        "status": "ok",
        "activeConnections": handler.active_requests,
        "serverInfo": {
            "name": config.server_name,
            "version": config.server_version,
        },
    }


def create_server(config: ServerConfig, client: Optional[ImageAPIClient] = None) -> FastMCP:
    """Wire the API client, poller, orchestrator and tool into a FastMCP server"""
    client = client or ImageAPIClient(config.base_url, config.api_key, timeout=config.request_timeout)
    poller = TaskPoller(client, interval=config.poll_interval, max_attempts=config.max_attempts)
    orchestrator = GenerationOrchestrator(client, poller)
    handler = ImageGenerationHandler(orchestrator, open_browser=config.open_browser)

    @asynccontextmanager
    async def app_lifespan(server: FastMCP) -> AsyncIterator[None]:
        """Manage application lifecycle"""
        logger.info("4o-image MCP server started v%s", config.server_version)
        logger.info("Server name: %s", config.server_name)
        logger.info("Image API: %s", config.base_url)
        try:
            yield
        finally:
            logger.info("Shutting down MCP server")

    mcp = FastMCP(config.server_name, lifespan=app_lifespan, host=config.host, port=config.port)
    register_generation_tools(mcp, handler)

    @mcp.custom_route("/status", methods=["GET"])
    async def status(request: Request) -> JSONResponse:
        payload = build_status_payload(config, handler)
        logger.info("Status check: %s active connections", payload["activeConnections"])
        return JSONResponse(payload)

    @mcp.custom_route("/{path:path}", methods=NOT_FOUND_METHODS)
    async def not_found(request: Request) -> JSONResponse:
        return JSONResponse({"error": "Resource not found"}, status_code=404)

    return mcp


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="4o-image MCP server")
    parser.add_argument("--transport", choices=TRANSPORTS, default="stdio", help="MCP transport (default: stdio)")
    parser.add_argument("--port", type=int, default=None, help="HTTP port for streamable-http (overrides MCP_PORT)")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    try:
        config = ConfigManager().build_config()
    except MissingCredentialError as e:
        logger.error("Error: %s", e)
        return 1

    if args.port is not None:
        config.port = args.port

    if args.transport == "streamable-http":
        try:
            config.port = find_available_port(config.host, config.port)
        except RuntimeError as e:
            logger.error("Failed to start server: %s", e)
            return 1
        logger.info("HTTP port: %s", config.port)

    mcp = create_server(config)
    try:
        mcp.run(transport=args.transport)
    except Exception:
        logger.exception("Server startup error")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
