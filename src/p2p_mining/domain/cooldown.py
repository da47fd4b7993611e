"""Claim cooldown state: a pure function of next_claim_at and the clock.

    Idle     next_claim_at unset, or now >= next_claim_at
    Cooling  now < next_claim_at
"""

from datetime import datetime
from enum import Enum

from src.p2p_common.datetime_utils import seconds_until


class ClaimState(str, Enum):
    IDLE = "idle"
    COOLING = "cooling"


def derive_state(next_claim_at: datetime | None, now: datetime) -> ClaimState:
    if next_claim_at is None or now >= next_claim_at:
        return ClaimState.IDLE
    return ClaimState.COOLING


def time_remaining(next_claim_at: datetime | None, now: datetime) -> int:
    return seconds_until(next_claim_at, now)
