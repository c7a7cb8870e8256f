"""
YAML trace parser.
"""

from typing import Any, Dict, List

import yaml

from .schema import (
    Trace, TraceAction, TraceAssertion, TraceSetup,
    ValidationError,
)
from ...config import config_from_dict
from ...transactions.errors import ERROR_KINDS
from ...transactions.locker_protocol import LockerProtocol


def parse_trace(yaml_content: str) -> Trace:
    """Parse a trace from YAML content."""
    try:
        data = yaml.safe_load(yaml_content)
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid YAML: {e}") from e
    if not isinstance(data, dict):
        raise ValidationError("Trace must be a YAML mapping")
    return _parse_trace_dict(data)


def load_trace(file_path: str) -> Trace:
    """Load a trace from a YAML file."""
    with open(file_path, 'r') as f:
        return parse_trace(f.read())


def _parse_trace_dict(data: Dict[str, Any]) -> Trace:
    """Parse a trace from a dictionary."""
    # Validate required fields
    required = ["name", "description", "setup", "actions", "assertions"]
    for field in required:
        if field not in data:
            raise ValidationError(f"Missing required field: {field}")

    setup = _parse_setup(data["setup"] or {})
    actions = _parse_actions(data["actions"] or [], setup.start_height)
    assertions = _parse_assertions(data["assertions"] or [])

    return Trace(
        name=data["name"],
        description=data["description"],
        setup=setup,
        actions=actions,
        assertions=assertions,
    )


def _parse_setup(data: Dict[str, Any]) -> TraceSetup:
    """Parse the setup block."""
    accounts = {}
    for account, balance in (data.get("accounts") or {}).items():
        if not isinstance(balance, int) or isinstance(balance, bool) or balance < 0:
            raise ValidationError(f"Invalid balance for {account}: {balance!r}")
        accounts[str(account)] = balance

    start_height = data.get("start_height", 0)
    if not isinstance(start_height, int) or isinstance(start_height, bool) or start_height < 0:
        raise ValidationError(f"Invalid start_height: {start_height!r}")

    config = config_from_dict(data.get("config"))

    return TraceSetup(accounts=accounts, config=config, start_height=start_height)


def _parse_actions(data: List[Dict[str, Any]], start_height: int) -> List[TraceAction]:
    """Parse action list."""
    actions = []
    for action_data in data:
        for key in ("height", "actor", "action"):
            if key not in action_data:
                raise ValidationError(f"Action missing required field: {key}")

        height = action_data["height"]
        if not isinstance(height, int) or isinstance(height, bool) or height < start_height:
            raise ValidationError(f"Action height must be an integer >= {start_height}: {height!r}")

        action_name = action_data["action"]
        if action_name not in LockerProtocol.ACTIONS:
            raise ValidationError(
                f"Invalid action: {action_name}. Valid actions: {list(LockerProtocol.ACTIONS)}"
            )

        expect_error = action_data.get("expect_error")
        if expect_error is not None and expect_error not in ERROR_KINDS:
            raise ValidationError(
                f"Invalid expect_error: {expect_error}. Valid kinds: {sorted(ERROR_KINDS)}"
            )

        actions.append(TraceAction(
            height=height,
            actor=str(action_data["actor"]),
            action=action_name,
            params=action_data.get("params") or {},
            expect_error=expect_error,
        ))

    # Sort by height (stable, so same-height actions keep file order)
    actions.sort(key=lambda a: a.height)

    return actions


def _parse_assertions(data: List[Dict[str, Any]]) -> List[TraceAssertion]:
    """Parse assertion list."""
    assertions = []
    for assert_data in data:
        if "type" not in assert_data:
            raise ValidationError("Assertion missing required field: type")
        assertion = TraceAssertion(
            type=assert_data["type"],
            description=assert_data.get("description", assert_data["type"]),
            params={k: v for k, v in assert_data.items() if k not in ["type", "description"]},
        )
        assertions.append(assertion)

    return assertions
