"""Concrete operation kinds."""

from __future__ import annotations

from taskmaster.operations.http import HttpOperation, HttpResult
from taskmaster.operations.simulated import SimulatedOperation
from taskmaster.operations.sql import SqlOperation, SqlResult

__all__ = [
    "HttpOperation",
    "HttpResult",
    "SimulatedOperation",
    "SqlOperation",
    "SqlResult",
]
