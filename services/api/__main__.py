"""Objects API server entry point.

Usage:
    python -m services.api --port 3000
"""

from __future__ import annotations

import argparse
import os

import uvicorn


def main() -> None:
    parser = argparse.ArgumentParser(description="Objects API server")
    parser.add_argument("--host", default=os.getenv("HOST", "0.0.0.0"), help="Bind host (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "3000")), help="Bind port (default: 3000)")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload for development")
    args = parser.parse_args()

    uvicorn.run("services.api.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
