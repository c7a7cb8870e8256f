"""
Trace module for describing and replaying locker scenarios.
"""

from .schema import (
    Trace, TraceAction, TraceAssertion, TraceSetup,
    ValidationError,
)
from .parser import parse_trace, load_trace

__all__ = [
    # Schema
    "Trace",
    "TraceAction",
    "TraceAssertion",
    "TraceSetup",
    "ValidationError",
    # Parser
    "parse_trace",
    "load_trace",
]
