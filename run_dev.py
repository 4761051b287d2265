#!/usr/bin/env python3
"""
Run webrelay locally with auto-reload.

Creates .env from env.example on first run so the Maileroo and image host
keys have somewhere to live.
"""

import os
import shutil
import subprocess
import sys
from pathlib import Path


def ensure_env_file() -> bool:
    """Return True if .env is ready, copying the template when it is missing."""
    env_file = Path(".env")
    template = Path("env.example")

    if env_file.exists():
        return True

    if template.exists():
        shutil.copyfile(template, env_file)
        print("Created .env from env.example.")
        print("Set MAILEROO_API_KEY and MAIL_FROM_ADDRESS before sending mail.")
        return False

    print("No .env or env.example found. Configuration will come from the environment only.")
    return True


def main():
    if not ensure_env_file():
        sys.exit(1)

    port = os.environ.get("PORT", "8000")
    print(f"Starting local server at http://localhost:{port}")

    try:
        subprocess.run([
            sys.executable, "-m", "uvicorn",
            "webrelay.main:app",
            "--host", "0.0.0.0",
            "--port", port,
            "--reload"
        ])
    except KeyboardInterrupt:
        print("\nShutting down development server...")


if __name__ == "__main__":
    main()
