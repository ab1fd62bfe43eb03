from __future__ import annotations

import base64
import struct
import time
from dataclasses import dataclass, field
from typing import Callable


# Largest prime below 2**32.
_SEED_MODULUS = 4294967291


def process_seed() -> int:
    return time.time_ns() % _SEED_MODULUS


@dataclass(frozen=True)
class ReqIdGenerator:
    """Builds short request ids: 4-byte process seed + 8-byte nanosecond clock.

    The seed is only 32 bits and is shared by every id minted in this process,
    so uniqueness across processes rests on the clock. Good enough to correlate
    log lines; not a secure or globally unique token.
    """

    seed: int = field(default_factory=process_seed)
    clock: Callable[[], int] = time.time_ns

    def __call__(self) -> str:
        raw = struct.pack("<IQ", self.seed & 0xFFFFFFFF, self.clock() & 0xFFFFFFFFFFFFFFFF)
        return base64.urlsafe_b64encode(raw).decode("ascii")


PROCESS_REQID = ReqIdGenerator()


def gen_reqid() -> str:
    return PROCESS_REQID()
