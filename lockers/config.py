"""
Protocol configuration.

The controller identity and every numeric bound the locker engine enforces
live here, injected into the protocol at construction time. Configuration
can be read from YAML; trace files embed the same block under setup.config.
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

import yaml


# =============================================================================
# Parameters
# =============================================================================

DEFAULT_CONTROLLER = "controller"
DEFAULT_CUSTODY_ACCOUNT = "custody"
DEFAULT_DURATION = 1008             # heights from creation to termination
MAX_EXTENSION = 1440                # per extend_lifecycle call
MIN_PAUSE = 10
MAX_PAUSE = 1440
WITHDRAWAL_DELAY = 24               # heights after genesis before timelock withdrawal
HIGH_VALUE_THRESHOLD = 1_000_000    # graduated release requires quantity above this
EMERGENCY_THRESHOLD = 5_000_000     # emergency extraction requires quantity above this
MAX_GRADUATED_PERCENTAGE = 50
MAX_REASON_LENGTH = 256


class ValidationError(Exception):
    """Error during configuration or trace validation."""
    pass


@dataclass(frozen=True)
class ProtocolConfig:
    """Deployment-time configuration of a locker protocol instance."""
    controller: str = DEFAULT_CONTROLLER
    custody_account: str = DEFAULT_CUSTODY_ACCOUNT
    default_duration: int = DEFAULT_DURATION
    max_extension: int = MAX_EXTENSION
    min_pause: int = MIN_PAUSE
    max_pause: int = MAX_PAUSE
    withdrawal_delay: int = WITHDRAWAL_DELAY
    high_value_threshold: int = HIGH_VALUE_THRESHOLD
    emergency_threshold: int = EMERGENCY_THRESHOLD
    max_graduated_percentage: int = MAX_GRADUATED_PERCENTAGE
    max_reason_length: int = MAX_REASON_LENGTH

    def __post_init__(self):
        self.validate()

    def validate(self):
        """Check field types and ranges."""
        for f in fields(self):
            value = getattr(self, f.name)
            if f.type in (str, "str"):
                if not isinstance(value, str) or not value:
                    raise ValidationError(f"{f.name} must be a non-empty string, got {value!r}")
            elif not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise ValidationError(f"{f.name} must be a non-negative integer, got {value!r}")

        if self.controller == self.custody_account:
            raise ValidationError("controller and custody_account must differ")
        if self.default_duration == 0:
            raise ValidationError("default_duration must be positive")
        if self.max_extension == 0:
            raise ValidationError("max_extension must be positive")
        if self.min_pause > self.max_pause:
            raise ValidationError(f"min_pause {self.min_pause} exceeds max_pause {self.max_pause}")
        if not 0 < self.max_graduated_percentage <= 100:
            raise ValidationError("max_graduated_percentage must be in (0, 100]")

    def with_controller(self, controller: str) -> 'ProtocolConfig':
        return replace(self, controller=controller)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def config_from_dict(data: Optional[Dict[str, Any]], base: Optional[ProtocolConfig] = None) -> ProtocolConfig:
    """Build a config from a dictionary, rejecting unknown keys."""
    base = base or ProtocolConfig()
    if not data:
        return base
    if not isinstance(data, dict):
        raise ValidationError(f"Config must be a mapping, got {type(data).__name__}")

    known = {f.name for f in fields(ProtocolConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValidationError(f"Unknown config fields: {unknown}. Valid fields: {sorted(known)}")

    return replace(base, **data)


def parse_config(yaml_content: str) -> ProtocolConfig:
    """Parse a config from YAML content."""
    try:
        data = yaml.safe_load(yaml_content)
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid YAML: {e}") from e
    return config_from_dict(data)


def load_config(file_path: str) -> ProtocolConfig:
    """Load a config from a YAML file."""
    with open(file_path, 'r') as f:
        return parse_config(f.read())
