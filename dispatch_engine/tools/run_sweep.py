"""Run one assignment sweep and exit — for cron / external schedulers.

Usage:
    python -m dispatch_engine.tools.run_sweep
"""

from __future__ import annotations

import asyncio
import logging
import sys

from dispatch_engine.infrastructure.scheduler import run_sweep_once

logging.basicConfig(level=logging.INFO, format="%(levelname)s | %(message)s")
logger = logging.getLogger(__name__)


def main():
    results = asyncio.run(run_sweep_once())
    assigned = sum(1 for r in results if r.worker_id is not None)
    failed = sum(1 for r in results if r.error is not None)
    logger.info("Sweep finished: %d processed, %d assigned, %d failed", len(results), assigned, failed)
    # Non-zero exit only when every order errored, so cron can alert
    if results and failed == len(results):
        sys.exit(1)


if __name__ == "__main__":
    main()
