"""
Locker scenario framework.

YAML traces describe accounts, a sequence of locker calls at given
heights and assertions about the end state; the runner replays them.
"""

from .traces import (
    Trace,
    TraceAction,
    TraceAssertion,
    TraceSetup,
    ValidationError,
    parse_trace,
    load_trace,
)
from .assertions import (
    AssertionResult,
    evaluate_assertion,
    evaluate_all_assertions,
    format_assertion_results,
    register_assertion_handler,
)
from .runner import (
    ActionOutcome,
    TraceRunner,
    TraceRunResult,
    run_trace,
)

__all__ = [
    # Traces
    "Trace",
    "TraceAction",
    "TraceAssertion",
    "TraceSetup",
    "ValidationError",
    "parse_trace",
    "load_trace",
    # Assertions
    "AssertionResult",
    "evaluate_assertion",
    "evaluate_all_assertions",
    "format_assertion_results",
    "register_assertion_handler",
    # Runner
    "ActionOutcome",
    "TraceRunner",
    "TraceRunResult",
    "run_trace",
]
