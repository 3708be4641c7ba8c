"""Run the auto-checkout sweep once.

Meant for cron shortly after midnight, e.g.::

    5 0 * * *  APP_ENV=production python scripts/run_auto_checkout.py

Exit status is 1 when any gym failed.
"""
from __future__ import annotations

import argparse
import importlib
import logging
import sys

from dotenv import load_dotenv

from gym_attendance.config import get_settings_module
from gym_attendance.container import build_container_from_settings
from gym_attendance.logging_setup import configure_logging

logger = logging.getLogger("gym_attendance.scripts.auto_checkout")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Close attendance sessions left open before today.")
    parser.add_argument("--gym-id", help="only sweep this gym (default: all gyms)")
    args = parser.parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container_from_settings(settings)
    service = container.auto_checkout_service

    if args.gym_id:
        results = [service.run_for_gym(args.gym_id)]
    else:
        results = service.run_for_all_gyms()

    for r in results:
        logger.info("gym %s: %s", r.gym_id, r.message)

    return 0 if all(r.success for r in results) else 1


if __name__ == "__main__":
    sys.exit(main())
