#!/usr/bin/env python3
"""
scripts/serve.py
=================
Start the rwsteps server.

Usage:
    python scripts/serve.py --host 0.0.0.0 --port 8000 --reload
"""
import argparse
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))


def main():
    from rwsteps.core.config import ServerConfig
    defaults = ServerConfig()

    parser = argparse.ArgumentParser(description="rwsteps REST server")
    parser.add_argument("--host",   default=defaults.host, help="Bind host")
    parser.add_argument("--port",   default=defaults.port, type=int, help="Bind port")
    parser.add_argument("--reload", action="store_true", help="Hot reload")
    args = parser.parse_args()

    print(f"Starting rwsteps server on {args.host}:{args.port}")

    try:
        from rwsteps.deployment.server.app import serve
    except ImportError:
        print("Server requires: pip install fastapi uvicorn")
        sys.exit(1)
    serve(host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
