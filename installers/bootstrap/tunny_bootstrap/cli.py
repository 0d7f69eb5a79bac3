"""CLI that downloads and installs the native tunny binary."""

from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path

from tunny_core.config import ProvisionConfig, apply_env, load_config, normalize, resolve_defaults
from tunny_core.logging_setup import configure_logging

from .service import execute


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tunny-install", description="Download and install the tunny binary")
    parser.add_argument("--version", default=None, help="Release version to install (default: package version)")
    parser.add_argument("--base-url", default=None, help="Release base URL; '{version}' is substituted")
    parser.add_argument("--install-root", default=None, help="Directory receiving the binary")
    parser.add_argument("--os", dest="system", default=None, help="Override detected operating system")
    parser.add_argument("--arch", dest="machine", default=None, help="Override detected CPU architecture")
    parser.add_argument("--config", default=None, help="Optional JSON settings file")
    parser.add_argument("--max-redirects", type=int, default=None, help="Redirect hops to follow (0-5)")
    parser.add_argument("--verify-checksum", action="store_true", help="Check the archive against published checksums")
    parser.add_argument("--log-file", default=None, help="Also write JSON-lines logs to this file")
    parser.add_argument("--json", action="store_true", help="Print a JSON summary")
    parser.add_argument("--quiet", action="store_true", help="Only print errors")
    return parser


def build_config(args: argparse.Namespace, environ=None) -> ProvisionConfig:
    environ = os.environ if environ is None else environ
    cfg = load_config(Path(args.config).expanduser() if args.config else None)
    apply_env(cfg, environ)

    if args.version:
        cfg.version = args.version
    if args.base_url:
        cfg.release_base_url = args.base_url
    if args.install_root:
        cfg.install_root = Path(args.install_root).expanduser().resolve()
    if args.system:
        cfg.system = args.system
    if args.machine:
        cfg.machine = args.machine
    if args.max_redirects is not None:
        cfg.max_redirects = args.max_redirects
    if args.verify_checksum:
        cfg.verify_checksum = True

    return resolve_defaults(normalize(cfg), environ=environ)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(
        log_file=Path(args.log_file).expanduser() if args.log_file else None,
        console=True,
        level=logging.ERROR if args.quiet else logging.INFO,
    )

    cfg = build_config(args)
    outcome = execute(cfg)

    if args.json:
        payload: dict[str, object] = {
            "success": outcome.exit_code == 0,
            "stages": [s.value for s in outcome.stages],
            "config": cfg.to_dict(),
        }
        if outcome.result is not None:
            payload.update({
                "target_os": outcome.result.target.os_name,
                "target_arch": outcome.result.target.arch,
                "version": outcome.result.target.version,
                "url": outcome.result.release.download_url,
                "path": str(outcome.result.binary.path),
                "bytes": outcome.result.byte_size,
            })
        if outcome.error is not None:
            payload["error"] = str(outcome.error)
            payload["failed_stage"] = outcome.error.stage
        print(json.dumps(payload, indent=2, default=str))

    return outcome.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
