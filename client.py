"""
Smoke-test client for the 4o-image MCP Server using HTTP/JSON-RPC protocol.

Start the server with ``python server.py --transport streamable-http`` and
point this client at its /mcp endpoint.
"""
import argparse
import base64
import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import requests

DEFAULT_ENDPOINT = "http://127.0.0.1:3000/mcp"
REQUEST_TIMEOUT = 300  # generation polls for up to ~2.5 minutes
SESSION_HEADER = "mcp-session-id"
REQUEST_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json, text/event-stream",
}


def parse_sse_response(response_text: str) -> dict:
    """Parse Server-Sent Events (SSE) response format."""
    lines = response_text.replace("\r\n", "\n").split("\n")
    for line in lines:
        line = line.strip()
        if line.startswith("data: "):
            json_str = line[6:]  # Remove "data: " prefix
            try:
                return json.loads(json_str)
            except json.JSONDecodeError:
                continue
    raise ValueError("No valid JSON data found in SSE response")


def build_request(method: str, params: Dict[str, Any], request_id: Optional[int] = 1) -> dict:
    request = {"jsonrpc": "2.0", "method": method, "params": params}
    if request_id is not None:
        request["id"] = request_id
    return request


class MCPClient:
    """Minimal streamable-http MCP client"""

    def __init__(self, endpoint: str = DEFAULT_ENDPOINT, session: Optional[requests.Session] = None):
        self.endpoint = endpoint
        self.session = session or requests.Session()
        self.session_id: Optional[str] = None
        self._next_id = 1

    def _post(self, payload: dict) -> requests.Response:
        headers = dict(REQUEST_HEADERS)
        if self.session_id:
            headers[SESSION_HEADER] = self.session_id
        response = self.session.post(self.endpoint, json=payload, headers=headers, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        return response

    def request(self, method: str, params: Dict[str, Any]) -> dict:
        """Send a JSON-RPC request and return the parsed response."""
        request_id = self._next_id
        self._next_id += 1
        response = self._post(build_request(method, params, request_id))
        if SESSION_HEADER in response.headers:
            self.session_id = response.headers[SESSION_HEADER]

        content_type = response.headers.get("content-type", "")
        if "text/event-stream" in content_type:
            return parse_sse_response(response.text)
        return response.json()

    def initialize(self) -> dict:
        result = self.request("initialize", {
            "protocolVersion": "2025-03-26",
            "capabilities": {},
            "clientInfo": {"name": "4o-image-smoke-client", "version": "1.0.0"},
        })
        self._post(build_request("notifications/initialized", {}, request_id=None))
        return result

    def list_tools(self) -> list:
        result = self.request("tools/list", {})
        return result.get("result", {}).get("tools", [])

    def call_tool(self, name: str, arguments: Dict[str, Any]) -> dict:
        result = self.request("tools/call", {"name": name, "arguments": arguments})
        if "error" in result:
            raise RuntimeError(json.dumps(result["error"]))
        return result.get("result", {})


def extract_text(tool_result: dict) -> str:
    """Join the text blocks of a tools/call result."""
    parts = [
        item.get("text", "")
        for item in tool_result.get("content", [])
        if isinstance(item, dict) and item.get("type") == "text"
    ]
    return "\n".join(parts)


def print_section(title: str, width: int = 60):
    """Print a formatted section header."""
    print("\n" + "=" * width)
    print(title.center(width))
    print("=" * width)


def run_smoke_test(endpoint: str, prompt: str, image_path: Optional[Path] = None) -> bool:
    client = MCPClient(endpoint)

    print_section("4o-image MCP Server Smoke Test")
    client.initialize()

    tools = client.list_tools()
    print(f"\nAvailable tools ({len(tools)}):")
    for tool in tools:
        description = tool.get("description", "No description").split("\n")[0].strip()
        print(f"  • {tool.get('name', 'unknown')}: {description}")

    arguments: Dict[str, Any] = {"prompt": prompt}
    if image_path is not None:
        arguments["imageBase64"] = base64.b64encode(image_path.read_bytes()).decode("ascii")

    print_section("Calling generateImage...")
    result = client.call_tool("generateImage", arguments)
    print(extract_text(result))
    return not result.get("isError", False)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Smoke-test client for the 4o-image MCP Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python client.py -p "a beautiful sunset"
  python client.py -p "make it watercolor" --image photo.jpg
        """
    )
    parser.add_argument("-p", "--prompt", type=str, default="a lighthouse at dusk, oil painting")
    parser.add_argument("--image", type=Path, default=None, help="Optional base image to edit")
    parser.add_argument("--endpoint", type=str, default=DEFAULT_ENDPOINT)
    args = parser.parse_args()

    try:
        ok = run_smoke_test(args.endpoint, args.prompt, args.image)
    except KeyboardInterrupt:
        print("\n\n⚠️  Test interrupted by user.")
        sys.exit(1)
    except (requests.RequestException, ValueError, RuntimeError) as e:
        print(f"\n❌ Smoke test failed: {e}")
        sys.exit(1)
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
