#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Ask the squareroots zome for the square root of a number.
"""

import asyncio
import logging
from dataclasses import dataclass

from holocall import RemoteCallClient, create_config
from holocall.core.utils import HolocallError, format_exception_summary

logger = logging.getLogger("holocall.examples.squareroot")


@dataclass
class ZomeInput:
    number: float


@dataclass
class ZomeOutput:
    square_root: float


async def main() -> None:
    config = create_config(
        zome_name="squareroots",
        fn_name="square_root",
        payload=ZomeInput(number=7),
    )
    try:
        output = await RemoteCallClient(config).run(output_type=ZomeOutput)
    except HolocallError as exc:
        logger.error("Got an error: %s", format_exception_summary(exc))
        return
    logger.info("Square root: %s", output)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
