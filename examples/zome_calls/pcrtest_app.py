#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Book a PCR test through the pcrtests zome.
"""

import logging
from dataclasses import dataclass

from holocall import zome_function
from holocall.core.utils import HolocallError, format_exception_summary

logger = logging.getLogger("holocall.examples.pcrtest")


@dataclass
class Booking:
    booking_day: str


@zome_function(zome_name="pcrtests", fn_name="book_pcrtest", output_type=Booking)
def book_pcrtest(payload: dict) -> Booking:
    # Stub only: the decorator performs the conductor round trip.
    raise NotImplementedError


class PcrTestDemo:
    def run(self) -> None:
        try:
            booking = book_pcrtest({"patientinfo": "ab"})
        except HolocallError as exc:
            logger.error("Got an error: %s", format_exception_summary(exc))
            return
        logger.info("Result of the pcr test: %s", booking)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    PcrTestDemo().run()
