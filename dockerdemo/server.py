"""Process bootstrap: run the API under uvicorn on HOST:PORT."""

import argparse
import sys

import uvicorn

from dockerdemo.config.settings import settings
from dockerdemo.utils.log import app_logger


def run_server(host: str, port: int) -> None:
    app_logger.info("server.starting", host=host, port=port)
    uvicorn.run("dockerdemo.main:app", host=host, port=port, log_level=settings.LOG_LEVEL.lower())


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Run the Docker demo API server")
    parser.add_argument("--host", default=settings.HOST, help="Bind address (default: HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, default=settings.PORT, help="Bind port (default: PORT or 3000)")
    args = parser.parse_args(argv)

    # uvicorn exits the process with status 1 when the port cannot be bound
    run_server(args.host, args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
