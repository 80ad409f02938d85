"""Climate entities for SmartPrugio boilers.

The boiler only heats, so the entity offers OFF and HEAT. Every other mode
a caller may request is applied as HEAT by the controller.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from homeassistant.components.climate import (
    ClimateEntity,
    ClimateEntityFeature,
    HVACAction,
    HVACMode,
)
from homeassistant.const import ATTR_TEMPERATURE, UnitOfTemperature
from homeassistant.helpers.device_registry import DeviceInfo

from .const import (
    CATEGORY_HEATING,
    CONF_HEATING_DEVICE_ID,
    CONF_MIN_CONTROL_INTERVAL_MS,
    CONF_POLL_INTERVAL,
    DEFAULT_MIN_CONTROL_INTERVAL_MS,
    DEFAULT_POLL_INTERVAL,
    DOMAIN,
    MANUFACTURER,
    MAX_TARGET_TEMPERATURE,
    MIN_TARGET_TEMPERATURE,
    SUPPORTED_HVAC_MODES,
    TARGET_TEMPERATURE_STEP,
)
from .controller import SmartPrugioThermostatController

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
    """Set up the climate entity of a SmartPrugio config entry."""
    entry_data = hass.data[DOMAIN][entry.entry_id]
    config = entry_data["config"]

    device_id = config.get(CONF_HEATING_DEVICE_ID)
    if not device_id:
        _LOGGER.debug("No heating device configured for entry %s", entry.entry_id)
        return

    controller = SmartPrugioThermostatController(
        hass,
        entry_data["client"],
        device_id,
        name=entry.title,
        min_control_interval_ms=config.get(
            CONF_MIN_CONTROL_INTERVAL_MS, DEFAULT_MIN_CONTROL_INTERVAL_MS
        ),
        poll_interval=config.get(CONF_POLL_INTERVAL, DEFAULT_POLL_INTERVAL),
    )
    async_add_entities([SmartPrugioThermostatEntity(controller, entry.title)])


class SmartPrugioThermostatEntity(ClimateEntity):
    """Climate entity for a SmartPrugio boiler.

    All state is read from the controller's cache; the controller pushes a
    refresh whenever a reconciliation lands.
    """

    _attr_has_entity_name = True
    _attr_name = None
    _attr_should_poll = False
    _attr_temperature_unit = UnitOfTemperature.CELSIUS
    _attr_target_temperature_step = TARGET_TEMPERATURE_STEP
    _attr_min_temp = MIN_TARGET_TEMPERATURE
    _attr_max_temp = MAX_TARGET_TEMPERATURE
    _attr_hvac_modes = SUPPORTED_HVAC_MODES
    _attr_supported_features = (
        ClimateEntityFeature.TARGET_TEMPERATURE
        | ClimateEntityFeature.TURN_OFF
        | ClimateEntityFeature.TURN_ON
    )

    def __init__(
        self, controller: SmartPrugioThermostatController, name: str
    ) -> None:
        """Initialize the climate entity.

        Args:
            controller: Controller owning the cached state of the boiler.
            name: Device name shown in Home Assistant.

        """
        self._controller = controller
        self._attr_unique_id = f"{DOMAIN}_{controller.device_id}"
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, controller.device_id)},
            name=name,
            manufacturer=MANUFACTURER,
            model=CATEGORY_HEATING,
            serial_number=controller.device_id,
        )
        self._unsub_updates: Callable[[], None] | None = None

    @property
    def current_temperature(self) -> float:
        """Return the last known room temperature."""
        return self._controller.cache.current_temperature

    @property
    def target_temperature(self) -> float:
        """Return the cached heating set point."""
        return self._controller.cache.target_temperature

    @property
    def hvac_mode(self) -> HVACMode:
        """Return HEAT while the boiler is on, OFF otherwise."""
        return self._controller.target_mode

    @property
    def hvac_action(self) -> HVACAction:
        """Return what the boiler is currently doing."""
        if self._controller.current_mode == HVACMode.HEAT:
            return HVACAction.HEATING
        return HVACAction.OFF

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

    async def async_set_temperature(self, **kwargs: Any) -> None:  # noqa: ANN401
        """Set the target temperature.

        Args:
            **kwargs: Keyword arguments containing temperature data.

        """
        temperature = kwargs.get(ATTR_TEMPERATURE)
        if temperature is None:
            return

        await self._controller.async_handle_set_target_temperature(temperature)
        self.async_write_ha_state()

    async def async_set_hvac_mode(self, hvac_mode: HVACMode) -> None:
        """Set the HVAC mode; anything but OFF heats."""
        await self._controller.async_handle_set_target_mode(hvac_mode)
        self.async_write_ha_state()

    async def async_turn_on(self) -> None:
        """Turn heating on."""
        await self._controller.async_handle_set_active(1)
        self.async_write_ha_state()

    async def async_turn_off(self) -> None:
        """Turn heating off."""
        await self._controller.async_handle_set_active(0)
        self.async_write_ha_state()

    async def async_update(self) -> None:
        """Read all boiler attributes from the cloud in one request."""
        await self._controller.async_handle_get_active()
