"""Command-line entry point: python main.py --port 3000 --cache-dir cache"""

import argparse
import os


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the PoE gem calculator API.")
    parser.add_argument("--host", default="0.0.0.0", help="Host to bind the server to")
    parser.add_argument("--port", type=int, default=3000, help="Port to run the server on")
    parser.add_argument("--cache-dir", default=None, help="Cache directory path (env: CACHE_DIR)")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=("debug", "info", "warning", "error"),
        help="Log level (env: LOG_LEVEL)",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    # Settings are read from the environment when the app module is imported
    if args.cache_dir:
        os.environ["CACHE_DIR"] = args.cache_dir
    if args.log_level:
        os.environ["LOG_LEVEL"] = args.log_level.upper()

    import uvicorn

    uvicorn.run("app:app", host=args.host, port=args.port, log_level=os.getenv("LOG_LEVEL", "info").lower())


if __name__ == "__main__":
    main()
