#!/usr/bin/env python3
"""
Dr.Leak — Запуск API сервера

Запуск:
    python scripts/run_api.py
    python scripts/run_api.py --port 8080
    python scripts/run_api.py --assets engine_assets --reload
"""

import os
import argparse

import uvicorn


def main():
    parser = argparse.ArgumentParser(description='Dr.Leak API Server')
    parser.add_argument('--host', default='0.0.0.0', help='Host (default: 0.0.0.0)')
    parser.add_argument('--port', type=int, default=8000, help='Port (default: 8000)')
    parser.add_argument('--assets', default=None, help='Директорія бази знань')
    parser.add_argument('--reload', action='store_true', help='Enable auto-reload')
    parser.add_argument('--workers', type=int, default=1, help='Number of workers')

    args = parser.parse_args()

    # Конфігурація API читається з environment при імпорті
    if args.assets:
        os.environ["ASSETS_DIR"] = args.assets

    print("=" * 60)
    print("💧 Dr.Leak — API Server")
    print("=" * 60)
    print(f"   Host: {args.host}")
    print(f"   Port: {args.port}")
    print(f"   Assets: {args.assets or os.getenv('ASSETS_DIR') or 'auto'}")
    print(f"   Reload: {args.reload}")
    print("=" * 60)

    uvicorn.run(
        "dr_leak.api.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        workers=args.workers if not args.reload else 1,
        log_level="info",
    )


if __name__ == "__main__":
    main()
