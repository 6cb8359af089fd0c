#!/usr/bin/env python3
"""
ShieldAPI MCP Server
====================

Exposes ShieldAPI security intelligence as native MCP tools.
Handles x402 USDC micropayments automatically, with demo fallback.

Usage:
    python main.py                  # Serve over stdio (DEMO unless a wallet key is set)
    python main.py --list-tools     # Print the tool catalog and exit
    python main.py --help           # Show help

Environment:
    SHIELDAPI_URL                   Base URL (default https://shield.vainplex.dev)
    SHIELDAPI_WALLET_PRIVATE_KEY    EVM key paying for requests; unset = DEMO mode
    SHIELDAPI_NETWORK               x402 network: base | base-sepolia
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Ensure project root is in path
sys.path.insert(0, str(Path(__file__).parent))

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from api.client import create_shield_client
from core.errors import StartupError
from infra.logging import configure_logging
from infra.security_config import SUPPORTED_NETWORKS, load_settings
from infra.server import SERVER_VERSION, ShieldMCPServer
from tools.registry import SHIELD_TOOLS

# stdout is the MCP channel: everything human-readable goes to stderr
console = Console(stderr=True)


def print_tools() -> None:
    """Print the tool catalog."""
    table = Table(title=f"ShieldAPI MCP tools (v{SERVER_VERSION})")
    table.add_column("Tool", style="bold cyan")
    table.add_column("Parameter", style="green")
    table.add_column("Endpoint", style="dim")
    table.add_column("Description")

    for tool in SHIELD_TOOLS:
        table.add_row(tool.name, tool.parameter_name, f"/api/{tool.endpoint}", tool.description)

    console.print(table)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="ShieldAPI MCP server (x402 micropayments, demo fallback)"
    )
    parser.add_argument(
        "--config",
        default="shieldapi.yaml",
        help="YAML config file (optional, default: shieldapi.yaml)"
    )
    parser.add_argument(
        "--base-url",
        help="ShieldAPI base URL (overrides SHIELDAPI_URL)"
    )
    parser.add_argument(
        "--network",
        choices=SUPPORTED_NETWORKS,
        help="x402 payment network (overrides SHIELDAPI_NETWORK)"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Console log level"
    )
    parser.add_argument(
        "--log-file",
        help="Also write JSON logs to this file"
    )
    parser.add_argument(
        "--list-tools",
        action="store_true",
        help="Print the tool catalog and exit"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    if args.list_tools:
        print_tools()
        return 0

    try:
        settings = load_settings(
            config_path=args.config,
            overrides={
                "base_url": args.base_url,
                "network": args.network,
                "log_level": args.log_level,
            },
        )
        configure_logging(
            level=getattr(logging, settings.log_level),
            log_file=args.log_file,
            console=console,
        )
        # Payment stack is initialized here, before any call is accepted
        client = create_shield_client(settings)
    except StartupError as e:
        console.print(f"[bold red]Fatal:[/bold red] {escape(str(e))}")
        return 1

    server = ShieldMCPServer(client)
    try:
        asyncio.run(server.run())
    except KeyboardInterrupt:
        pass

    return 0


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
