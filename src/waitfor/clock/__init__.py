"""Time keepers: the system clock and deterministic test doubles."""

from waitfor.clock.fake import FakeTimeKeeper, ThreadableTimeKeeper
from waitfor.clock.system import SystemTimeKeeper, system_time_keeper

__all__ = [
    "FakeTimeKeeper",
    "SystemTimeKeeper",
    "ThreadableTimeKeeper",
    "system_time_keeper",
]
