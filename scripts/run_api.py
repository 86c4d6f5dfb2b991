#!/usr/bin/env python
"""
Run the Cart Pricing API with uvicorn.

Usage:
    python scripts/run_api.py

Set CART_PRICING_RELOAD=1 to restart the server on source changes.
"""
import subprocess
import sys
import os
from pathlib import Path


def uvicorn_command(env):
    host = env.get("CART_PRICING_HOST", "0.0.0.0")
    port = env.get("CART_PRICING_PORT", "3000")

    cmd = [
        sys.executable, "-m", "uvicorn",
        "cart_pricing.api.main:app",
        "--host", host,
        "--port", port,
    ]
    if env.get("CART_PRICING_RELOAD", "").lower() in ("1", "true", "yes"):
        cmd.append("--reload")
    return cmd


def main():
    project_root = Path(__file__).parent.parent
    os.chdir(project_root)

    # Ensure src is in python path
    env = os.environ.copy()
    src_path = str(project_root / "src")
    if "PYTHONPATH" in env:
        env["PYTHONPATH"] = f"{src_path}{os.pathsep}{env['PYTHONPATH']}"
    else:
        env["PYTHONPATH"] = src_path

    cmd = uvicorn_command(env)
    print(f"Starting Cart Pricing API (FastAPI): {' '.join(cmd[2:])}")
    try:
        subprocess.run(cmd, env=env)
    except KeyboardInterrupt:
        print("\nAPI stopped.")

if __name__ == "__main__":
    main()
