#!/usr/bin/env python3
"""
Command-line interface for the NovaMart storefront core.

Usage:
    python cli.py [command] [options]

Commands:
    demo        Run a scripted shopping session
    serve       Start the reference API server
    seed        Re-seed the catalog (remote, or the local mock database)
    test        Run the test suite

Examples:
    python cli.py demo
    python cli.py demo --live --durable
    python cli.py serve --port 5000
    python cli.py seed
"""

import argparse
import asyncio
import subprocess
import sys

from storefront.config import build_store, configure_logging, load_settings


def run_demo(live: bool, durable: bool) -> None:
    """Run the scripted session, mock-only unless --live is given."""
    from storefront.demo import run_shopping_session

    settings = load_settings()
    if not live:
        settings = settings.model_copy(update={"api_url": None})
    configure_logging(settings.log_level)
    asyncio.run(run_shopping_session(settings, durable=durable))


def run_seed() -> None:
    """Regenerate the catalog through the gateway."""
    settings = load_settings()
    configure_logging(settings.log_level)

    async def seed() -> None:
        store = build_store(settings)
        try:
            count = await store.gateway.seed_catalog()
            print(f"Seeded {count} products ({store.gateway.mode} backend)")
        finally:
            await store.gateway.aclose()

    asyncio.run(seed())


def run_tests(args: list[str]) -> None:
    """Run the test suite."""
    cmd = [sys.executable, "-m", "pytest"] + args
    sys.exit(subprocess.run(cmd).returncode)


def run_server(host: str, port: int, reload: bool) -> None:
    """Start the API server."""
    cmd = [sys.executable, "-m", "uvicorn", "api.main:app", f"--host={host}", f"--port={port}"]
    if reload:
        cmd.append("--reload")

    print(f"Starting server at http://{host}:{port}")
    print(f"API docs available at http://{host}:{port}/docs")
    subprocess.run(cmd)


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="NovaMart storefront CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s demo
  %(prog)s demo --live
  %(prog)s seed
  %(prog)s test -v
  %(prog)s serve --reload
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Demo command
    demo_parser = subparsers.add_parser("demo", help="Run a scripted shopping session")
    demo_parser.add_argument(
        "--live",
        action="store_true",
        help="Try the remote service at NOVAMART_API_URL first",
    )
    demo_parser.add_argument(
        "--durable",
        action="store_true",
        help="Keep session state under NOVAMART_DATA_DIR",
    )

    # Seed command
    subparsers.add_parser("seed", help="Re-seed the catalog")

    # Test command
    test_parser = subparsers.add_parser("test", help="Run the test suite")
    test_parser.add_argument(
        "pytest_args",
        nargs="*",
        default=[],
        help="Arguments to pass to pytest",
    )

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    serve_parser.add_argument("--port", type=int, default=5000, help="Port to bind to")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    args = parser.parse_args()

    if args.command == "demo":
        run_demo(args.live, args.durable)
    elif args.command == "seed":
        run_seed()
    elif args.command == "test":
        run_tests(args.pytest_args)
    elif args.command == "serve":
        run_server(args.host, args.port, args.reload)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
