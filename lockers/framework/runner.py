"""
Trace Runner

Replays a trace against a fresh locker protocol. This is the main
integration point that ties together:
- Trace parsing
- Ledger, clock and protocol setup
- Action execution at the requested heights
- Assertion evaluation
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..transactions.errors import LockerError
from ..transactions.locker_protocol import LockerProtocol, create_protocol
from .assertions.evaluator import (
    AssertionResult,
    evaluate_all_assertions,
    assertions_passed,
)
from .traces.schema import Trace, TraceAction


logger = logging.getLogger(__name__)


@dataclass
class ActionOutcome:
    """What happened when one trace action ran."""
    action: TraceAction
    result: Any = None
    error_kind: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error_kind is None

    @property
    def as_expected(self) -> bool:
        return self.error_kind == self.action.expect_error

    def __str__(self) -> str:
        a = self.action
        if self.succeeded:
            outcome = f"ok ({self.result!r})"
        else:
            outcome = f"{self.error_kind}: {self.error_message}"
        return f"@{a.height} {a.actor} {a.action} -> {outcome}"


@dataclass
class TraceRunResult:
    """Result of running a trace."""
    trace_name: str
    completed: bool
    final_height: int
    assertion_results: List[AssertionResult]
    all_passed: bool
    outcomes: List[ActionOutcome] = field(default_factory=list)
    event_count: int = 0
    error: Optional[str] = None

    @property
    def unexpected_outcomes(self) -> List[ActionOutcome]:
        return [o for o in self.outcomes if not o.as_expected]

    def __str__(self) -> str:
        status = "PASSED" if self.all_passed else "FAILED"
        lines = [
            f"Trace '{self.trace_name}': {status}",
            f"  Actions: {len(self.outcomes)}, Unexpected: {len(self.unexpected_outcomes)}",
            f"  Final height: {self.final_height}, Events: {self.event_count}",
            f"  Assertions: {sum(1 for a in self.assertion_results if a.passed)}"
            f"/{len(self.assertion_results)} passed",
        ]
        if self.error:
            lines.append(f"  Error: {self.error}")
        return "\n".join(lines)


class TraceRunner:
    """
    Runs a trace against a locker protocol.

    Handles:
    - Funding the trace's accounts and applying its config
    - Advancing the height clock to each action
    - Recording each action's result or error kind
    - Evaluating assertions
    """

    def __init__(self, trace: Trace):
        self.trace = trace
        self.protocol: LockerProtocol = create_protocol(
            balances=trace.setup.accounts,
            config=trace.setup.config,
            start_height=trace.setup.start_height,
        )
        self.outcomes: List[ActionOutcome] = []

    def run(self) -> TraceRunResult:
        """Run the trace to completion."""
        try:
            for action in self.trace.actions:
                self.outcomes.append(self._execute_trace_action(action))
        except (TypeError, ValueError) as e:
            # Malformed params (unknown keyword, wrong arity) abort the run
            logger.error("Trace %s aborted: %s", self.trace.name, e)
            return TraceRunResult(
                trace_name=self.trace.name,
                completed=False,
                final_height=self.protocol.height,
                assertion_results=[],
                all_passed=False,
                outcomes=self.outcomes,
                event_count=len(self.protocol.audit),
                error=str(e),
            )

        assertion_results = evaluate_all_assertions(self.trace.assertions, self._get_state())
        all_passed = assertions_passed(assertion_results) and all(o.as_expected for o in self.outcomes)

        return TraceRunResult(
            trace_name=self.trace.name,
            completed=True,
            final_height=self.protocol.height,
            assertion_results=assertion_results,
            all_passed=all_passed,
            outcomes=self.outcomes,
            event_count=len(self.protocol.audit),
        )

    def _execute_trace_action(self, action: TraceAction) -> ActionOutcome:
        """Advance to the action's height and run it."""
        self.protocol.clock.advance_to(action.height)
        try:
            result = self.protocol.execute(action.action, action.actor, **action.params)
        except LockerError as e:
            outcome = ActionOutcome(action=action, error_kind=e.kind, error_message=e.message)
        else:
            outcome = ActionOutcome(action=action, result=result)

        if outcome.as_expected:
            logger.debug("%s", outcome)
        else:
            logger.warning("Unexpected outcome in %s: %s", self.trace.name, outcome)
        return outcome

    def _get_state(self) -> Dict[str, Any]:
        """Get run state for assertion evaluation."""
        return {
            "protocol": self.protocol,
            "outcomes": self.outcomes,
            "height": self.protocol.height,
        }


def run_trace(trace: Trace) -> TraceRunResult:
    """Convenience function to run a trace."""
    return TraceRunner(trace).run()
