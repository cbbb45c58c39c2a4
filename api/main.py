"""
ELLM FastAPI Server Main Entry Point
Main entry point for running the ELLM API server

Usage:
    python -m api.main
    uvicorn api.server:app --host 0.0.0.0 --port 8000
"""

import argparse
import logging
import sys

from api.server import run_server

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main():
    """Main entry point for the ELLM API server."""
    parser = argparse.ArgumentParser(description="ELLM FastAPI Server")
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host to bind to (default: 0.0.0.0)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to bind to (default: 8000)"
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development"
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of worker processes (default: 1)"
    )
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="Log level (default: info)"
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML session configuration"
    )

    args = parser.parse_args()

    logger.info(f"Starting ELLM API server on {args.host}:{args.port}")
    logger.info(f"Log level: {args.log_level}")
    logger.info(f"Workers: {args.workers}")

    # Every worker holds its own in-memory session
    if args.workers > 1:
        logger.warning("Knowledge is not shared between worker processes")

    try:
        run_server(
            host=args.host,
            port=args.port,
            reload=args.reload,
            workers=args.workers,
            config_path=args.config,
            log_level=args.log_level
        )
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
