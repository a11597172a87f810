"""Command-line entry point for the bulk provisioning worker.

Example:
    studio-provision 55InstancesSQLIAAS2023 56 --start 56
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from studio_tests.config import load_config
from studio_tests.errors import ConfigLoadError
from studio_tests.provisioning import BulkProvisioningWorker, ProvisioningRequest

logger = logging.getLogger("studio_tests")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="studio-provision",
        description="Create numbered Integration Studio instances from a template project",
    )
    parser.add_argument("template", help="Name of the template project to clone")
    parser.add_argument("count", type=int, help="Last instance index to create (inclusive)")
    parser.add_argument("--start", type=int, default=1, help="First instance index (default: 1)")
    parser.add_argument("--config", type=Path, default=None,
                        help="Credentials JSON (default: STUDIO_CONFIG_FILE or config/CoreFunctionalTestsConfig.json)")
    parser.add_argument("--reuse-session", action="store_true",
                        help="Reuse a saved auth.json instead of logging in again")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    parser.add_argument("--delay", type=float, default=None,
                        help="Seconds to wait between instances (default: STUDIO_INSTANCE_DELAY or 5)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
    )

    try:
        config = load_config(args.config)
        request = ProvisioningRequest(args.template, args.count, args.start)
    except (ConfigLoadError, ValueError) as exc:
        logger.error(str(exc))
        return 1

    if args.headed:
        config.headless = False
    if args.delay is not None:
        if args.delay < 0:
            logger.error("--delay must not be negative")
            return 1
        config.instance_delay = args.delay

    worker = BulkProvisioningWorker(config, force_reauth=not args.reuse_session)
    try:
        asyncio.run(worker.run(request))
    except Exception:
        # Details and the resume hint were already logged by the worker.
        state = worker.failed_state.value if worker.failed_state else worker.state.value
        logger.error(f"Provisioning aborted in state '{state}'")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
