"""Protean Engine runner for the Groupbuy domain.

With ``PROTEAN_ENV=production`` events are processed asynchronously, and
the Engine is what runs the event handlers: cart drain/restore,
notification fan-out and the rider proximity check.

Usage:
    PROTEAN_ENV=production python src/server.py
    python src/server.py --test-mode   # Drain pending messages and exit
"""

import argparse
import asyncio

from groupbuy.domain import groupbuy
from groupbuy.utils.logging import configure_logging
from protean.server.engine import Engine


async def run(test_mode: bool = False):
    groupbuy.init()
    engine = Engine(groupbuy, test_mode=test_mode)
    await engine.run()


def main():
    parser = argparse.ArgumentParser(description="Groupbuy Engine runner")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Process pending messages once and stop",
    )
    args = parser.parse_args()

    configure_logging()
    asyncio.run(run(test_mode=args.test_mode))


if __name__ == "__main__":
    main()
