"""
Assertion Evaluator

Evaluates trace assertions against the state a trace run leaves behind.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from ..traces.schema import TraceAssertion
from .registry import ASSERTION_HANDLERS


logger = logging.getLogger(__name__)


@dataclass
class AssertionResult:
    """Result of evaluating a single assertion."""
    assertion_type: str
    description: str
    passed: bool
    message: str

    def __str__(self) -> str:
        status = "PASS" if self.passed else "FAIL"
        return f"[{status}] {self.description}: {self.message}"


def evaluate_assertion(
    assertion: TraceAssertion,
    state: Dict[str, Any],
) -> AssertionResult:
    """
    Evaluate a single assertion against run state.

    Args:
        assertion: The assertion to evaluate
        state: Run state (protocol, outcomes)

    Returns:
        AssertionResult with pass/fail status
    """
    handler = ASSERTION_HANDLERS.get(assertion.type)

    if handler is None:
        return AssertionResult(
            assertion_type=assertion.type,
            description=assertion.description,
            passed=False,
            message=f"Unknown assertion type: {assertion.type}",
        )

    try:
        passed, message = handler(assertion.params, state)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        logger.warning("Assertion %s raised %s", assertion.type, e)
        return AssertionResult(
            assertion_type=assertion.type,
            description=assertion.description,
            passed=False,
            message=f"Error evaluating assertion: {e}",
        )

    return AssertionResult(
        assertion_type=assertion.type,
        description=assertion.description,
        passed=passed,
        message=message,
    )


def evaluate_all_assertions(
    assertions: List[TraceAssertion],
    state: Dict[str, Any],
) -> List[AssertionResult]:
    """Evaluate all assertions against run state."""
    return [evaluate_assertion(a, state) for a in assertions]


def assertions_passed(results: List[AssertionResult]) -> bool:
    """Check if all assertions passed."""
    return all(r.passed for r in results)


def format_assertion_results(results: List[AssertionResult]) -> str:
    """Format assertion results for display."""
    lines = ["Assertion Results:", "-" * 50]
    lines.extend(str(result) for result in results)
    passed = sum(1 for r in results if r.passed)
    lines.append("-" * 50)
    lines.append(f"Total: {passed} passed, {len(results) - passed} failed")
    return "\n".join(lines)
