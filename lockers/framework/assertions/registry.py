"""
Assertion Handler Registry

Maps assertion types to their evaluation functions.
"""

from typing import Any, Callable, Dict


# Type for assertion handlers
# Handler(assertion_params, run_state) -> (passed, message)
AssertionHandler = Callable[[Dict[str, Any], Dict[str, Any]], tuple]


# Global registry of assertion handlers
ASSERTION_HANDLERS: Dict[str, AssertionHandler] = {}


def register_assertion_handler(assertion_type: str):
    """
    Decorator to register an assertion handler.

    Usage:
        @register_assertion_handler("locker_status")
        def check_locker_status(params, state):
            ...
            return (True, "Locker 1 is resolved")
    """
    def decorator(func: AssertionHandler) -> AssertionHandler:
        ASSERTION_HANDLERS[assertion_type] = func
        return func
    return decorator


def _locker(params: Dict[str, Any], state: Dict[str, Any]):
    protocol = state["protocol"]
    locker_id = params.get("locker_id")
    if not protocol.repository.exists(locker_id):
        return None
    return protocol.repository.get(locker_id)


# =============================================================================
# Built-in Assertion Handlers
# =============================================================================

@register_assertion_handler("locker_status")
def check_locker_status(params: Dict[str, Any], state: Dict[str, Any]) -> tuple:
    """
    Check that a locker is in the expected status.

    Params:
        locker_id: The locker to inspect
        expected: Status value (e.g. "resolved")
    """
    record = _locker(params, state)
    expected = params.get("expected")
    if record is None:
        return (False, f"Locker {params.get('locker_id')} not found")

    actual = record.status.value
    if actual == expected:
        return (True, f"Locker {record.locker_id} is {expected}")
    return (False, f"Locker {record.locker_id} is {actual}, expected {expected}")


@register_assertion_handler("locker_quantity")
def check_locker_quantity(params: Dict[str, Any], state: Dict[str, Any]) -> tuple:
    """
    Check the quantity still held for a locker.

    Params:
        locker_id: The locker to inspect
        expected: Expected quantity
    """
    record = _locker(params, state)
    expected = params.get("expected")
    if record is None:
        return (False, f"Locker {params.get('locker_id')} not found")

    if record.quantity == expected:
        return (True, f"Locker {record.locker_id} holds {expected}")
    return (False, f"Locker {record.locker_id} holds {record.quantity}, expected {expected}")


@register_assertion_handler("termination_height")
def check_termination_height(params: Dict[str, Any], state: Dict[str, Any]) -> tuple:
    """
    Check a locker's termination height.

    Params:
        locker_id: The locker to inspect
        expected: Expected termination height
    """
    record = _locker(params, state)
    expected = params.get("expected")
    if record is None:
        return (False, f"Locker {params.get('locker_id')} not found")

    if record.termination_height == expected:
        return (True, f"Locker {record.locker_id} terminates at {expected}")
    return (False, f"Locker {record.locker_id} terminates at {record.termination_height}, expected {expected}")


@register_assertion_handler("balance")
def check_balance(params: Dict[str, Any], state: Dict[str, Any]) -> tuple:
    """
    Check an account's ledger balance.

    Params:
        account: Account id
        expected: Expected balance
    """
    account = params.get("account")
    expected = params.get("expected")
    actual = state["protocol"].ledger.balance(account)

    if actual == expected:
        return (True, f"{account} holds {expected}")
    return (False, f"{account} holds {actual}, expected {expected}")


@register_assertion_handler("custody_consistent")
def check_custody_consistent(params: Dict[str, Any], state: Dict[str, Any]) -> tuple:
    """Check that custody balance equals the sum of locker quantities."""
    protocol = state["protocol"]
    held = sum(r.quantity for r in protocol.lockers())
    custody = protocol.custody_balance()

    if held == custody:
        return (True, f"Custody balance {custody} matches locker quantities")
    return (False, f"Custody balance {custody} != locker quantities {held}")


@register_assertion_handler("event_emitted")
def check_event_emitted(params: Dict[str, Any], state: Dict[str, Any]) -> tuple:
    """
    Check that an audit event was written.

    Params:
        name: Event name
        locker_id: Optional locker the event must belong to
    """
    name = params.get("name")
    locker_id = params.get("locker_id")
    events = state["protocol"].audit.by_name(name)
    if locker_id is not None:
        events = [e for e in events if e.locker_id == locker_id]

    if events:
        return (True, f"Event {name} emitted {len(events)} time(s)")
    return (False, f"Event {name} was not emitted")


@register_assertion_handler("event_count")
def check_event_count(params: Dict[str, Any], state: Dict[str, Any]) -> tuple:
    """
    Check how many audit events were written.

    Params:
        expected: Expected count
        name: Optional event name filter
        locker_id: Optional locker filter
    """
    events = list(state["protocol"].audit)
    if params.get("name") is not None:
        events = [e for e in events if e.name == params["name"]]
    if params.get("locker_id") is not None:
        events = [e for e in events if e.locker_id == params["locker_id"]]

    expected = params.get("expected")
    if len(events) == expected:
        return (True, f"{expected} matching event(s)")
    return (False, f"{len(events)} matching event(s), expected {expected}")


@register_assertion_handler("action_failed")
def check_action_failed(params: Dict[str, Any], state: Dict[str, Any]) -> tuple:
    """
    Check that a specific action failed with the given error kind.

    Params:
        index: Position of the action in the (height-sorted) trace
        kind: Expected error kind (e.g. "InvalidState")
    """
    outcomes = state.get("outcomes", [])
    index = params.get("index")
    kind = params.get("kind")

    if not isinstance(index, int) or not 0 <= index < len(outcomes):
        return (False, f"No action at index {index}")

    outcome = outcomes[index]
    if outcome.error_kind is None:
        return (False, f"Action {index} ({outcome.action.action}) succeeded")
    if kind and outcome.error_kind != kind:
        return (False, f"Action {index} failed with {outcome.error_kind}, expected {kind}")
    return (True, f"Action {index} failed with {outcome.error_kind}")


@register_assertion_handler("all_actions_succeeded")
def check_all_actions_succeeded(params: Dict[str, Any], state: Dict[str, Any]) -> tuple:
    """Check that every action matched its expectation (success or expect_error)."""
    mismatched = [o for o in state.get("outcomes", []) if not o.as_expected]

    if not mismatched:
        return (True, f"All {len(state.get('outcomes', []))} actions behaved as expected")
    first = mismatched[0]
    return (False, f"{len(mismatched)} unexpected outcome(s), first: {first}")


@register_assertion_handler("audit_log_valid")
def check_audit_log_valid(params: Dict[str, Any], state: Dict[str, Any]) -> tuple:
    """Check the audit log's hash links."""
    audit = state["protocol"].audit
    if audit.verify():
        return (True, f"Audit log of {len(audit)} events verifies")
    return (False, "Audit log hash chain is broken")
