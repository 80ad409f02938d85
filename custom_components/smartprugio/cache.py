"""Cached device state for SmartPrugio accessories.

The cache is the only state the UI reads. It is folded from remote
snapshots and from optimistic local writes, and it never takes a value
that falls outside the accepted ranges. Rejected values are skipped
silently: the cloud reports "-" and other transitional values routinely.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .const import (
    ATTR_CURRENT_TEMPERATURE,
    ATTR_POWER,
    ATTR_TARGET_TEMPERATURE,
    DEFAULT_CURRENT_TEMPERATURE,
    DEFAULT_TARGET_TEMPERATURE,
    MAX_TARGET_TEMPERATURE,
    MIN_TARGET_TEMPERATURE,
    POWER_OFF,
    POWER_ON,
)

if TYPE_CHECKING:
    from .models import DeviceSnapshot

_LOGGER = logging.getLogger(__name__)

FIELD_POWER = "power"
FIELD_TARGET_TEMPERATURE = "target_temperature"
FIELD_CURRENT_TEMPERATURE = "current_temperature"


@dataclass(slots=True)
class CachedDeviceState:
    """Last known state of one device."""

    power: bool = False
    target_temperature: float = DEFAULT_TARGET_TEMPERATURE
    current_temperature: float = DEFAULT_CURRENT_TEMPERATURE


def parse_temperature(raw: Any) -> float | None:
    """Parse a remote temperature string, returning None if not a finite number."""
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def is_valid_target_temperature(value: float) -> bool:
    """Return True if ``value`` is an acceptable heating set point."""
    return MIN_TARGET_TEMPERATURE <= value <= MAX_TARGET_TEMPERATURE


def is_valid_current_temperature(value: float) -> bool:
    """Return True if ``value`` is a real reading (0 means unknown)."""
    return value > 0


class DeviceStateCache:
    """Fold remote snapshots and optimistic writes into a CachedDeviceState."""

    def __init__(self, device_id: str, state: CachedDeviceState | None = None) -> None:
        self.device_id = device_id
        self.state = state or CachedDeviceState()

    @property
    def power(self) -> bool:
        return self.state.power

    @property
    def target_temperature(self) -> float:
        return self.state.target_temperature

    @property
    def current_temperature(self) -> float:
        return self.state.current_temperature

    def apply_power(self, raw: str | None) -> bool:
        """Apply a remote POWER value; only exact "ON"/"OFF" are accepted."""
        if raw == POWER_ON:
            self.state.power = True
        elif raw == POWER_OFF:
            self.state.power = False
        else:
            _LOGGER.debug("%s: skipping power value %r", self.device_id, raw)
            return False
        return True

    def apply_target_temperature(self, raw: Any) -> bool:
        """Apply a remote HTEMPERATURE value if it parses and is in range."""
        value = parse_temperature(raw)
        if value is None or not is_valid_target_temperature(value):
            _LOGGER.debug("%s: skipping target temperature %r", self.device_id, raw)
            return False
        self.state.target_temperature = value
        return True

    def apply_current_temperature(self, raw: Any) -> bool:
        """Apply a remote CTEMPERATURE value if it parses and is positive."""
        value = parse_temperature(raw)
        if value is None or not is_valid_current_temperature(value):
            _LOGGER.debug("%s: skipping current temperature %r", self.device_id, raw)
            return False
        self.state.current_temperature = value
        return True

    def apply_snapshot(self, snapshot: DeviceSnapshot) -> None:
        """Apply every supported attribute of a snapshot."""
        self.apply_power(snapshot.get(ATTR_POWER))
        self.apply_target_temperature(snapshot.get(ATTR_TARGET_TEMPERATURE))
        self.apply_current_temperature(snapshot.get(ATTR_CURRENT_TEMPERATURE))

    def apply_optimistic(self, field: str, value: Any) -> bool:
        """Set ``field`` speculatively after a user-initiated change.

        Target temperatures are clamped into the accepted range; other
        invalid values are skipped like remote ones.
        """
        if field == FIELD_POWER:
            self.state.power = bool(value)
            return True

        parsed = parse_temperature(value)
        if parsed is None:
            _LOGGER.debug("%s: skipping optimistic %s %r", self.device_id, field, value)
            return False

        if field == FIELD_TARGET_TEMPERATURE:
            self.state.target_temperature = min(
                max(parsed, MIN_TARGET_TEMPERATURE), MAX_TARGET_TEMPERATURE
            )
            return True

        if field == FIELD_CURRENT_TEMPERATURE:
            if not is_valid_current_temperature(parsed):
                return False
            self.state.current_temperature = parsed
            return True

        error_msg = f"Unknown cached field: {field}"
        raise ValueError(error_msg)
