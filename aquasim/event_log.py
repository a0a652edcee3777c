"""
Simulation event log helpers.

Event log entries live in the snapshot (state.logs) and are what a player
sees. Diagnostic logging for developers goes through the stdlib logging
module in each module instead.
"""

from dataclasses import replace
from typing import Iterable

from .data_types import LogEntry, SimulationState

SEVERITIES = ('info', 'warning')


def create_log(tick: int, source: str, severity: str, message: str) -> LogEntry:
    """Build a log entry, rejecting unknown severities"""
    if severity not in SEVERITIES:
        raise ValueError(f"Unknown log severity: {severity}")
    return LogEntry(tick=tick, source=source, severity=severity, message=message)


def append_logs(state: SimulationState, entries: Iterable[LogEntry]) -> SimulationState:
    """Return a new state with entries appended; same state when there are none"""
    entries = tuple(entries)
    if not entries:
        return state
    return replace(state, logs=state.logs + entries)
