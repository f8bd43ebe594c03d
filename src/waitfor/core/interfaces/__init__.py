"""Abstract interfaces for pluggable collaborators."""

from waitfor.core.interfaces.time_keeper import TimeKeeper

__all__ = ["TimeKeeper"]
