from __future__ import annotations

import subprocess
import sys
from pathlib import Path

from tunny_core.logging_setup import configure_logging, get_logger

try:
    # Normal package import path.
    from . import binary_path
except ImportError:
    # Script/frozen entrypoint path.
    from tunny_launcher import binary_path


log = get_logger("launcher")


def run(binary: Path, args: list[str]) -> int:
    """Run ``binary`` with inherited stdio and environment; return its exit code."""
    code = subprocess.call([str(binary), *args])
    if code < 0:
        # Killed by a signal: report it the way a shell would.
        return 128 - code
    return code


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    configure_logging(console=True)

    binary = binary_path()
    if not binary.is_file():
        log.error(f"tunny binary not found at {binary}; run 'tunny-install' first", extra={"event": "binary_missing"})
        return 1

    try:
        return run(binary, args)
    except OSError as exc:
        log.error(f"Could not start {binary}: {exc}", extra={"event": "spawn_failed"})
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
