"""Light entities for SmartPrugio lights."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from homeassistant.components.light import ColorMode, LightEntity
from homeassistant.helpers.device_registry import DeviceInfo

from .const import (
    CATEGORY_LIGHTS,
    CONF_LIGHT_DEVICE_ID,
    CONF_MIN_CONTROL_INTERVAL_MS,
    CONF_POLL_INTERVAL,
    DEFAULT_MIN_CONTROL_INTERVAL_MS,
    DEFAULT_POLL_INTERVAL,
    DOMAIN,
    MANUFACTURER,
)
from .controller import SmartPrugioLightController

if TYPE_CHECKING:
    from collections.abc import Callable

    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the light entity of a SmartPrugio config entry."""
    entry_data = hass.data[DOMAIN][entry.entry_id]
    config = entry_data["config"]

    device_id = config.get(CONF_LIGHT_DEVICE_ID)
    if not device_id:
        _LOGGER.debug("No light configured for entry %s", entry.entry_id)
        return

    controller = SmartPrugioLightController(
        hass,
        entry_data["client"],
        device_id,
        name=entry.title,
        min_control_interval_ms=config.get(
            CONF_MIN_CONTROL_INTERVAL_MS, DEFAULT_MIN_CONTROL_INTERVAL_MS
        ),
        poll_interval=config.get(CONF_POLL_INTERVAL, DEFAULT_POLL_INTERVAL),
    )
    async_add_entities([SmartPrugioLightEntity(controller, entry.title)])


class SmartPrugioLightEntity(LightEntity):
    """On/off light backed by a SmartPrugioLightController."""

    _attr_has_entity_name = True
    _attr_name = None
    _attr_should_poll = False
    _attr_color_mode = ColorMode.ONOFF
    _attr_supported_color_modes = {ColorMode.ONOFF}

    def __init__(self, controller: SmartPrugioLightController, name: str) -> None:
        """Initialize the light entity.

        Args:
            controller: Controller owning the cached state of the light.
            name: Device name shown in Home Assistant.

        """
        self._controller = controller
        self._attr_unique_id = f"{DOMAIN}_{controller.device_id}"
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, controller.device_id)},
            name=name,
            manufacturer=MANUFACTURER,
            model=CATEGORY_LIGHTS,
            serial_number=controller.device_id,
        )
        self._unsub_updates: Callable[[], None] | None = None

    @property
    def is_on(self) -> bool:
        """Return the cached power state."""
        return self._controller.is_on

    async def async_added_to_hass(self) -> None:
        """Subscribe to controller pushes and start polling."""
        await super().async_added_to_hass()
        self._unsub_updates = self._controller.register_update_callback(
            self._handle_characteristic_update
        )
        self._controller.start()

    async def async_will_remove_from_hass(self) -> None:
        """Unsubscribe and stop background work."""
        await super().async_will_remove_from_hass()

        if self._unsub_updates is not None:
            self._unsub_updates()
            self._unsub_updates = None
        await self._controller.async_shutdown()

    def _handle_characteristic_update(self, characteristic: str, value: Any) -> None:
        _LOGGER.debug("%s: %s -> %s", self._controller.name, characteristic, value)
        self.async_write_ha_state()

    async def async_turn_on(self, **kwargs: Any) -> None:  # noqa: ANN401
        """Turn the light on."""
        await self._controller.async_handle_set(True)
        self.async_write_ha_state()

    async def async_turn_off(self, **kwargs: Any) -> None:  # noqa: ANN401
        """Turn the light off."""
        await self._controller.async_handle_set(False)
        self.async_write_ha_state()

    async def async_update(self) -> None:
        """Read the light's state from the cloud."""
        await self._controller.async_handle_get()
