"""
Trace schema definitions.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ...config import ProtocolConfig, ValidationError


@dataclass
class TraceAction:
    """A single call in a trace."""
    height: int
    actor: str
    action: str
    params: Dict[str, Any] = field(default_factory=dict)
    expect_error: Optional[str] = None


@dataclass
class TraceSetup:
    """Initial state for a trace."""
    accounts: Dict[str, int] = field(default_factory=dict)
    config: ProtocolConfig = field(default_factory=ProtocolConfig)
    start_height: int = 0


@dataclass
class TraceAssertion:
    """An assertion to check at the end of a trace."""
    type: str
    description: str
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Trace:
    """A recorded sequence of locker calls for replay."""
    name: str
    description: str
    setup: TraceSetup
    actions: List[TraceAction]
    assertions: List[TraceAssertion]


__all__ = [
    "TraceAction",
    "TraceSetup",
    "TraceAssertion",
    "Trace",
    "ValidationError",
]
