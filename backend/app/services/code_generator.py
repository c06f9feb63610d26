"""Human-readable code generation for bookings and shipments.

Both generators are advisory: they pick a code that is very likely free, but
the unique index on the target table is what guarantees uniqueness. Callers
must be ready for the insert or update to report a code conflict anyway.
"""

from __future__ import annotations

import logging
import random
import re
import time
from collections.abc import Callable, Iterable

logger = logging.getLogger(__name__)

BOOKING_SEQUENCE_START = 10001
DEFAULT_MAX_ATTEMPTS = 10
DEFAULT_INITIAL = "U"

SHIPMENT_PREFIX = "SH"
SHIPMENT_SEQUENCE_CAP = 100
_SHIPMENT_CODE_RE = re.compile(r"^SH(\d+)$")


def code_initial(seed: str | None) -> str:
    """Return the uppercased first letter of ``seed``, or ``U`` if it has none."""
    if seed:
        first = seed.strip().upper()[:1]
        if "A" <= first <= "Z":
            return first
    return DEFAULT_INITIAL


def _now_ms() -> int:
    return int(time.time() * 1000)


def fallback_booking_code(seed: str | None) -> str:
    """Timestamp based code: letter + last 6 digits of epoch ms + 3 random digits."""
    initial = code_initial(seed)
    timestamp = str(_now_ms())[-6:]
    return f"{initial}{timestamp}{random.randint(0, 999):03d}"


class BookingCodeGenerator:
    """Generate booking codes such as ``U10001`` or ``D10002``.

    The sequence for a letter starts at 10001 and follows the number of codes
    already issued with that letter. When a candidate is taken (a concurrent
    insert got there first) the next number is tried, up to ``max_attempts``
    times, before falling back to a timestamp based code.
    """

    def __init__(
        self,
        count_with_prefix: Callable[[str], int],
        code_exists: Callable[[str], bool],
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        self.count_with_prefix = count_with_prefix
        self.code_exists = code_exists
        self.max_attempts = max(max_attempts, 1)

    def generate(self, seed: str | None, offset: int = 0) -> str:
        """Generate a code for ``seed``.

        Args:
            seed: The requester's display name; only its first letter is used.
            offset: Extra numbers to skip, used when a previous candidate from
                this generator lost a race at the storage layer.

        Returns:
            A sequential code, or the timestamp fallback if every sequential
            candidate is taken or the lookups fail.
        """
        initial = code_initial(seed)
        try:
            count = self.count_with_prefix(initial)
            for attempt in range(self.max_attempts):
                candidate = f"{initial}{count + BOOKING_SEQUENCE_START + offset + attempt}"
                if not self.code_exists(candidate):
                    return candidate
            logger.warning(
                "No free sequential booking code for %s after %d attempts",
                initial,
                self.max_attempts,
            )
        except Exception:
            logger.exception("Booking code lookup failed, using timestamp fallback")
        return fallback_booking_code(initial)


class ShipmentCodeGenerator:
    """Generate shipment codes ``SH01``, ``SH02``, ...

    Shipment creation is admin-only, so a simple max + 1 with a linear scan for
    the next free slot below 100 is enough.
    """

    def __init__(
        self,
        existing_codes: Callable[[], Iterable[str]],
        code_exists: Callable[[str], bool],
    ):
        self.existing_codes = existing_codes
        self.code_exists = code_exists

    def generate(self) -> str:
        try:
            numbers = [
                int(match.group(1))
                for match in (_SHIPMENT_CODE_RE.match(code or "") for code in self.existing_codes())
                if match and int(match.group(1)) > 0
            ]
            next_number = max(numbers) + 1 if numbers else 1
            candidate = self._format(next_number)
            if not self.code_exists(candidate):
                return candidate

            for number in range(next_number + 1, SHIPMENT_SEQUENCE_CAP):
                candidate = self._format(number)
                if not self.code_exists(candidate):
                    return candidate
            # Every two-digit slot above the maximum is taken
            return self._format(max(next_number, SHIPMENT_SEQUENCE_CAP - 1) + 1)
        except Exception:
            logger.exception("Shipment code lookup failed, using timestamp fallback")
            return self._format(_now_ms() % SHIPMENT_SEQUENCE_CAP)

    @staticmethod
    def _format(number: int) -> str:
        return f"{SHIPMENT_PREFIX}{number:02d}"
