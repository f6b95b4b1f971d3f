"""
Run Tools — drive the MCP servers from the command line.

This script:
1. Starts the selected MCP tool server (stdio subprocess)
2. Performs the initialize handshake and discovers its tools
3. Lists them, or calls one with JSON arguments
4. Prints the result

Usage:
    # List tools published by the Neurosift tools API
    python run_tools.py --server neurosift-tools --list

    # Analyze a plot
    python run_tools.py --server plot-vision --call analyze_plot --args '{"image_path": "/tmp/plot.png"}'
"""

from __future__ import annotations

import argparse
import json
import signal
import sys

from neurosift_mcp.config import configure_logging
from neurosift_mcp.manager import ToolServerManager

MCP_SERVERS = {
    "neurosift-tools": [sys.executable, "-m", "neurosift_mcp.servers.neurosift_tools"],
    "plot-vision": [sys.executable, "-m", "neurosift_mcp.servers.plot_vision"],
}


def print_tools(tools: list[dict]) -> None:
    print(f"\nAvailable tools ({len(tools)}):\n")
    for tool in tools:
        print(f"  {tool['name']:<35} {tool.get('description', '')}")
        schema = tool.get("inputSchema", {})
        required = set(schema.get("required", []))
        for pname, pinfo in schema.get("properties", {}).items():
            marker = "*" if pname in required else " "
            print(f"    {marker} {pname} ({pinfo.get('type', 'any')}): {pinfo.get('description', '')}")
    print()


def print_result(result: dict) -> None:
    for block in result.get("content", []):
        print(block.get("text", ""))
    if result.get("isError"):
        print("\n(tool reported an error)", file=sys.stderr)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Start an MCP tool server and list or call its tools.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_tools.py --server neurosift-tools --list
  python run_tools.py --server plot-vision --call analyze_plot --args '{"image_path": "/tmp/plot.png"}'
        """,
    )
    parser.add_argument("--server", "-s", choices=sorted(MCP_SERVERS), required=True, help="Which MCP server to start")
    parser.add_argument("--list", action="store_true", help="List the server's tools and exit")
    parser.add_argument("--call", "-c", type=str, help="Tool name to call")
    parser.add_argument("--args", "-a", type=str, default="{}", help="Tool arguments as a JSON object")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug output")

    args = parser.parse_args()
    configure_logging("DEBUG" if args.verbose else "WARNING")

    if not args.list and not args.call:
        parser.error("--list or --call is required")

    try:
        arguments = json.loads(args.args)
    except json.JSONDecodeError as e:
        parser.error(f"--args is not valid JSON: {e}")
    if not isinstance(arguments, dict):
        parser.error("--args must be a JSON object")

    manager = ToolServerManager()

    # Graceful shutdown on Ctrl+C
    def shutdown(sig, frame):
        print("\nShutting down MCP servers...", file=sys.stderr)
        manager.stop_all()
        sys.exit(0)
    signal.signal(signal.SIGINT, shutdown)

    manager.register_server(args.server, MCP_SERVERS[args.server])

    try:
        tools = manager.start(args.server)
        if args.list:
            print_tools(tools)
        if args.call:
            print_result(manager.call(args.server, args.call, arguments))
    except RuntimeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        manager.stop_all()

    return 0


if __name__ == "__main__":
    sys.exit(main())
