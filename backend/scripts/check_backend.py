#!/usr/bin/env python3
"""
Pre-flight checks before starting the When To Meet API. Run from backend/:
  python scripts/check_backend.py [--port 8000]

Checks the configured storage backend can read both blobs, the app imports, and the port is free.
"""
import argparse
import socket
import sys
from pathlib import Path

backend_dir = Path(__file__).resolve().parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))


def check_env() -> str:
    if (backend_dir / ".env").exists():
        return ".env found"
    return "no backend/.env, using defaults (STORAGE_BACKEND=memory)"


def check_storage() -> str:
    from whentomeet.config import settings
    from whentomeet.core.constants import LOGICAL_KEYS
    from whentomeet.storage import build_blob_store

    store = build_blob_store(settings)
    try:
        present = [key for key in LOGICAL_KEYS if store.get(key) is not None]
    finally:
        dispose = getattr(store, "dispose", None)
        if dispose is not None:
            dispose()
    return f"storage={store.backend_id}, blobs present: {', '.join(present) or 'none yet'}"


def check_app_import() -> str:
    from whentomeet.main import app

    routes = sorted({r.path for r in app.routes if r.path.startswith("/api")})
    return f"app imports, routes: {', '.join(routes)}"


def check_port(port: int) -> str:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", port))
    return f"port {port} is free"


def main() -> int:
    parser = argparse.ArgumentParser(description="Check the backend can start")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()

    checks = [
        ("env", check_env),
        ("storage", check_storage),
        ("app", check_app_import),
        ("port", lambda: check_port(args.port)),
    ]
    failed = 0
    for name, check in checks:
        try:
            print(f"OK   {name}: {check()}")
        except Exception as e:
            failed += 1
            print(f"FAIL {name}: {e}")

    if failed:
        print(f"\n{failed} check(s) failed")
        return 1
    print(f"\nAll checks passed. Start with: uvicorn whentomeet.main:app --reload --port {args.port}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
