#!/usr/bin/env python3
"""Check that ffprobe and ffmpeg are installed and runnable.

Run this on a new host before starting the API; uploads fail with a
500 when either tool is missing.

Usage:
    python scripts/check_media_tools.py
"""
import asyncio
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))


async def check_tool(binary: str) -> str:
    """Run ``<binary> -version`` and return the first output line."""
    from src.core.config import settings
    from src.ingest.toolkit import SubprocessToolkit

    toolkit = SubprocessToolkit(timeout=settings.media_tool_timeout_seconds)
    result = await toolkit.run([binary, "-version"])
    if not result.ok:
        raise RuntimeError(f"{binary} exited with {result.returncode}: {result.stderr_tail()}")
    return result.stdout.decode("utf-8", errors="replace").splitlines()[0]


def main() -> None:
    """Main entry point."""
    from src.core.config import settings

    print("=" * 50)
    print("Tubely Media Tool Check")
    print("=" * 50)
    print()

    failed = False
    for binary in (settings.ffprobe_bin, settings.ffmpeg_bin):
        try:
            print(f"{binary}: {asyncio.run(check_tool(binary))}")
        except Exception as e:
            print(f"{binary}: FAILED ({e})")
            failed = True

    if failed:
        sys.exit(1)

    print()
    print("All media tools available!")


if __name__ == "__main__":
    main()
