"""Image generation tool for the 4o-image MCP Server"""

import logging
import threading
from typing import Optional, Union

from anyio import to_thread
from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult, TextContent

from managers.generation_orchestrator import GenerationOrchestrator
from models.task import ProgressUpdate
from tools.helpers import (
    WEBSITE_URL,
    build_failure_text,
    build_success_text,
    decode_image_base64,
    open_in_browser,
)

logger = logging.getLogger("MCP_Server")

TOOL_NAME = "generateImage"
TOOL_DESCRIPTION = f"""Generate images using the 4o-image API and automatically open the results in your browser.

The tool supports two modes:
1. Text-to-image - Create new images using just a text prompt
2. Image editing - Provide a base image and prompt for editing or style transfer

The response includes a direct link to the generated image.

Visit our website: {WEBSITE_URL}"""


class ImageGenerationHandler:
    """Turns one tool invocation into a generation request and a text reply"""

    def __init__(self, orchestrator: GenerationOrchestrator, open_browser: bool = True):
        self.orchestrator = orchestrator
        self.open_browser = open_browser
        self._active_requests = 0
        self._lock = threading.Lock()

    @property
    def active_requests(self) -> int:
        with self._lock:
            return self._active_requests

    def process(self, prompt: str, image_base64: Optional[str] = None) -> str:
        image = None
        if image_base64:
            try:
                image = decode_image_base64(image_base64)
            except ValueError as e:
                return f"Error converting image: {e}"

        with self._lock:
            self._active_requests += 1
        try:
            outcome = self.orchestrator.generate(image, prompt, observer=self._log_progress)
        finally:
            with self._lock:
                self._active_requests -= 1

        if not outcome.success:
            return build_failure_text(outcome.error)

        opened = open_in_browser(outcome.image_url) if self.open_browser else False
        return build_success_text(prompt, outcome.image_url, opened_in_browser=opened)

    def _log_progress(self, update: ProgressUpdate):
        logger.info("Image task %s (progress %s)", update.status, update.progress)


def error_result(message: str) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=message)], isError=True)


def register_generation_tools(mcp: FastMCP, handler: ImageGenerationHandler):
    """Register the generateImage tool with the MCP server"""

    # Returned CallToolResults pass through FastMCP untouched only without an output schema
    @mcp.tool(name=TOOL_NAME, description=TOOL_DESCRIPTION, structured_output=False)
    async def generate_image(prompt: str, imageBase64: Optional[str] = None) -> Union[str, CallToolResult]:
        """Generate an image from a prompt and an optional Base64 base image.

        Args:
            prompt: Text description of the desired image content
            imageBase64: Optional base image (Base64 encoded) for image editing or upscaling
        """
        try:
            # Submit and poll block; keep them off the event loop
            return await to_thread.run_sync(handler.process, prompt, imageBase64)
        except Exception as exc:
            logger.exception("Tool '%s' failed", TOOL_NAME)
            return error_result(f"Error: {exc}")

    logger.info("Registered MCP tool '%s'", TOOL_NAME)
    return generate_image
