"""Data models for SmartPrugio integration."""

from dataclasses import dataclass, field

# Attribute code -> raw value for one device at one point in time
DeviceSnapshot = dict[str, str | None]


@dataclass(frozen=True, slots=True)
class DeviceAttribute:
    """A single attribute reported for a device, e.g. ("POWER", "ON")."""

    code: str
    value: str | None


@dataclass(frozen=True, slots=True)
class RemoteDevice:
    """A device entry from a control list response."""

    device_id: str
    attributes: tuple[DeviceAttribute, ...] = ()

    def attribute(self, code: str) -> str | None:
        """Return the first value reported for ``code``, or None."""
        for attribute in self.attributes:
            if attribute.code == code:
                return attribute.value
        return None

    def snapshot(self) -> DeviceSnapshot:
        """Return the attributes flattened into a code -> value mapping."""
        values: DeviceSnapshot = {}
        for attribute in self.attributes:
            values.setdefault(attribute.code, attribute.value)
        return values


@dataclass(frozen=True, slots=True)
class DeviceGroup:
    """A group of devices as returned by the control list endpoint."""

    devices: tuple[RemoteDevice, ...] = ()


@dataclass(frozen=True, slots=True)
class DeviceList:
    """Typed view of a control list response for one category."""

    category: str
    groups: tuple[DeviceGroup, ...] = field(default_factory=tuple)
