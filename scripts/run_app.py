#!/usr/bin/env python3
"""Utility to verify dependencies and launch the news proxy API.

This script handles:
- Installing the project and its dependencies (pip install -e .)
- Checking the GNews environment variables
- Starting the FastAPI backend under uvicorn
- Graceful shutdown on Ctrl+C
"""

from __future__ import annotations

import argparse
import os
import subprocess
import sys
import time
import urllib.error
import urllib.request
from pathlib import Path
from typing import Sequence

ROOT_DIR = Path(__file__).resolve().parents[1]
PYPROJECT_FILE = ROOT_DIR / "pyproject.toml"
UVICORN_APP = "news_proxy.api.server:app"
APP_DIR = ROOT_DIR / "src"


def ensure_dependencies(skip_install: bool, upgrade: bool = False) -> None:
    """Ensure the project and its dependencies are installed.

    Args:
        skip_install: If True, skip dependency installation entirely.
        upgrade: If True, upgrade packages to latest versions.
    """

    if skip_install:
        print("[deps] Skipping dependency check (requested).")
        return

    if not PYPROJECT_FILE.exists():
        raise FileNotFoundError(f"Could not find project file at {PYPROJECT_FILE}.")

    print(f"[deps] Installing project from {ROOT_DIR} ...")
    cmd = [sys.executable, "-m", "pip", "install", "-e", str(ROOT_DIR)]
    if upgrade:
        cmd.append("--upgrade")
    subprocess.check_call(cmd, cwd=ROOT_DIR)  # noqa: S603,S607 - controlled input
    print("[deps] Dependencies are ready.")


def check_env_vars() -> list[str]:
    """Check for required environment variables and return list of missing ones."""
    required = ["GNEWS_API_KEY"]
    optional = ["GNEWS_BASE_URL", "CACHE_TTL", "PORT"]

    missing = [var for var in required if not os.environ.get(var)]

    if missing:
        print(f"[env] WARNING: Missing required environment variables: {', '.join(missing)}")
        print("[env] Please set these in your .env file or environment.")

    for var in optional:
        if not os.environ.get(var):
            print(f"[env] Note: Optional variable {var} not set, using default.")

    return missing


def start_process(label: str, command: Sequence[str], env: dict[str, str]) -> subprocess.Popen:
    """Launch a child process and return the handle."""

    print(f"[{label}] {' '.join(command)}")
    return subprocess.Popen(  # noqa: S603 - command constructed above
        command,
        cwd=ROOT_DIR,
        env=env,
    )


def wait_for_backend(base_url: str, timeout: float) -> bool:
    """Poll the backend health endpoint until it responds or timeout occurs."""

    health_url = f"{base_url.rstrip('/')}/health"
    deadline = time.time() + timeout
    print(f"[backend] Waiting for health check at {health_url} ...")
    while time.time() < deadline:
        try:
            with urllib.request.urlopen(health_url, timeout=3):  # noqa: S310
                print("[backend] Health check succeeded.")
                return True
        except urllib.error.URLError:
            time.sleep(1.0)
    print("[backend] Health check timed out; the server may still be starting.")
    return False


def shutdown_process(proc: subprocess.Popen | None, label: str) -> None:
    if proc is None or proc.poll() is not None:
        return

    print(f"[{label}] Stopping...")
    proc.terminate()
    try:
        proc.wait(timeout=10)
    except subprocess.TimeoutExpired:
        print(f"[{label}] Terminate timed out. Killing...")
        proc.kill()


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Install the news proxy if needed, then start the FastAPI server."
    )
    parser.add_argument(
        "--skip-install",
        action="store_true",
        help="Skip running 'pip install -e .' before launching.",
    )
    parser.add_argument(
        "--upgrade-deps",
        action="store_true",
        help="Upgrade all dependencies to latest versions.",
    )
    parser.add_argument(
        "--host",
        default=os.environ.get("HOST", "127.0.0.1"),
        help="Host/interface for the FastAPI server (default: $HOST or 127.0.0.1).",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("PORT", "3000")),
        help="Port for the FastAPI server (default: $PORT or 3000).",
    )
    parser.add_argument(
        "--startup-timeout",
        type=float,
        default=30.0,
        help="Seconds to wait for the health endpoint before giving up on it.",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable uvicorn auto-reload.",
    )
    parser.add_argument(
        "--skip-env-check",
        action="store_true",
        help="Skip checking for required environment variables.",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()

    if not args.skip_env_check:
        missing = check_env_vars()
        if missing:
            print("[env] Continuing anyway, but upstream requests will be rejected.")

    try:
        ensure_dependencies(skip_install=args.skip_install, upgrade=args.upgrade_deps)
    except (subprocess.CalledProcessError, FileNotFoundError) as exc:
        print(f"[deps] Dependency installation failed: {exc}")
        return 1

    base_url = f"http://{args.host}:{args.port}"

    backend_cmd = [
        sys.executable,
        "-m",
        "uvicorn",
        UVICORN_APP,
        "--app-dir",
        str(APP_DIR),
        "--host",
        args.host,
        "--port",
        str(args.port),
    ]
    if args.reload:
        backend_cmd.append("--reload")

    backend_proc = None
    try:
        backend_proc = start_process("backend", backend_cmd, os.environ.copy())
        wait_for_backend(base_url, args.startup_timeout)

        print("[runner] News proxy is running. Press Ctrl+C to stop.")
        print(f"[runner] API: {base_url}/api/news")
        print(f"[runner] API Docs: {base_url}/docs")

        while True:
            status = backend_proc.poll()
            if status is not None:
                print(f"[backend] exited with status {status}.")
                break
            time.sleep(0.5)
    except KeyboardInterrupt:
        print("\n[runner] Caught KeyboardInterrupt. Shutting down...")
    finally:
        shutdown_process(backend_proc, "backend")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
