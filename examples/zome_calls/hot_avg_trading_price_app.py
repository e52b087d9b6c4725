#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Fetch the average HOT trading price for a year from the holotoken zome.

Uses the client as an async context manager and drives each step by hand.
"""

import asyncio
import logging
import os

from holocall import RemoteCallClient, create_config
from holocall.core.utils import HolocallError, format_exception_summary

logger = logging.getLogger("holocall.examples.holotoken")

TRADE_YEAR = os.getenv("HOLOTOKEN_TRADE_YEAR", "2021")


async def main() -> None:
    config = create_config(zome_name="holotoken", fn_name="fetch_averagehot")
    try:
        async with RemoteCallClient(config) as client:
            cell_id = await client.resolve_context()
            price = await client.invoke(
                cell_id,
                config.zome_name,
                config.fn_name,
                {"tradeyear": TRADE_YEAR},
            )
    except HolocallError as exc:
        logger.error("Got an error: %s", format_exception_summary(exc))
        return
    logger.info("Average trading price: %s", price)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
