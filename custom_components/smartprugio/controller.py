"""Accessory controllers for SmartPrugio devices.

A controller sits between the UI binding and the cloud client. It answers
get requests from its cache after a best-effort remote read, applies set
requests optimistically, rate-limits writes, and reconciles the cache with
the cloud after writes and on a polling interval. Remote failures never
leave the controller: the UI always gets the last known value.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from homeassistant.components.climate import HVACMode

from .api import SmartPrugioRemoteUnavailable, extract_snapshot
from .cache import (
    FIELD_POWER,
    FIELD_TARGET_TEMPERATURE,
    DeviceStateCache,
    parse_temperature,
)
from .const import (
    ATTR_POWER,
    ATTR_TARGET_TEMPERATURE,
    CATEGORY_HEATING,
    CATEGORY_LIGHTS,
    CHAR_ACTIVE,
    CHAR_CURRENT_MODE,
    CHAR_CURRENT_TEMPERATURE,
    CHAR_ON,
    CHAR_TARGET_MODE,
    CHAR_TARGET_TEMPERATURE,
    DEFAULT_MIN_CONTROL_INTERVAL_MS,
    DEFAULT_POLL_INTERVAL,
    POWER_OFF,
    POWER_ON,
    RECONCILE_DELAY,
)
from .rate_limiter import ControlRateLimiter
from .scheduler import RECONCILE_TASK, PollingScheduler, TaskScheduler

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from homeassistant.core import HomeAssistant

    from .api import SmartPrugioClient
    from .models import DeviceSnapshot

    UpdateCallback = Callable[[str, Any], None]

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class CharacteristicHandlers:
    """Get/set handlers bound to one UI characteristic."""

    on_get: Callable[[], Awaitable[Any]]
    on_set: Callable[[Any], Awaitable[None]] | None = None


def round_half_up(value: Any) -> int | None:
    """Round a set point to the nearest integer, halves rounding up."""
    parsed = parse_temperature(value)
    if parsed is None:
        return None
    return math.floor(parsed + 0.5)


class SmartPrugioController:
    """Common plumbing for SmartPrugio accessory controllers."""

    category: str

    def __init__(
        self,
        hass: HomeAssistant,
        client: SmartPrugioClient,
        device_id: str,
        name: str | None = None,
        min_control_interval_ms: float = DEFAULT_MIN_CONTROL_INTERVAL_MS,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        """Initialize the controller.

        Args:
            hass: Home Assistant instance running the polling timer.
            client: Cloud client shared by the accessories of an account.
            device_id: Remote device identifier, e.g. "Lt03_pow01".
            name: Display name used in log messages.
            min_control_interval_ms: Minimum milliseconds between writes.
            poll_interval: Seconds between reconciliations, 0 disables.

        """
        self._client = client
        self.device_id = device_id
        self.name = name or device_id
        self.cache = DeviceStateCache(device_id)
        self.rate_limiter = ControlRateLimiter(min_control_interval_ms)
        self.scheduler = TaskScheduler(hass, device_id)
        self.poller = PollingScheduler(
            self.scheduler, self.async_reconcile, poll_interval
        )
        self._update_callbacks: list[UpdateCallback] = []
        self.characteristics: dict[str, CharacteristicHandlers] = (
            self._build_characteristics()
        )

    def _build_characteristics(self) -> dict[str, CharacteristicHandlers]:
        raise NotImplementedError

    async def async_reconcile(self) -> None:
        """Refresh the whole cache from the cloud and push it to the UI."""
        raise NotImplementedError

    def register_update_callback(self, callback: UpdateCallback) -> Callable[[], None]:
        """Register a callback for characteristic value pushes.

        Args:
            callback: Called with the characteristic name and its new value.

        Returns:
            A function to unregister the callback.

        """
        self._update_callbacks.append(callback)

        def unregister() -> None:
            if callback in self._update_callbacks:
                self._update_callbacks.remove(callback)

        return unregister

    def start(self) -> bool:
        """Start background polling; returns False when disabled."""
        return self.poller.start()

    async def async_shutdown(self) -> None:
        """Stop polling and drop pending reconciliations."""
        await self.scheduler.async_shutdown()

    async def async_get(self, characteristic: str) -> Any:
        """Dispatch a UI get request for ``characteristic``."""
        return await self.characteristics[characteristic].on_get()

    async def async_set(self, characteristic: str, value: Any) -> None:
        """Dispatch a UI set request for ``characteristic``."""
        handlers = self.characteristics[characteristic]
        if handlers.on_set is None:
            error_msg = f"Characteristic {characteristic} is read-only"
            raise ValueError(error_msg)
        await handlers.on_set(value)

    def _push(self, characteristic: str, value: Any) -> None:
        for callback in list(self._update_callbacks):
            try:
                callback(characteristic, value)
            except Exception:
                _LOGGER.exception(
                    "%s: error in update callback for %s", self.name, characteristic
                )

    async def _async_fetch_snapshot(self) -> DeviceSnapshot | None:
        tree = await self._client.async_list_devices(self.category)
        snapshot = extract_snapshot(tree, self.device_id)
        if snapshot is None:
            _LOGGER.debug(
                "%s: device %s not found in %s list",
                self.name,
                self.device_id,
                self.category,
            )
        return snapshot

    async def _async_control(self, attribute_pairs: list[tuple[str, Any]]) -> bool:
        try:
            await self._client.async_control_device(
                self.category, self.device_id, attribute_pairs
            )
        except SmartPrugioRemoteUnavailable as err:
            _LOGGER.error("%s: %s control failed: %s", self.name, self.category, err)
            return False
        return True

    def _schedule_reconcile(self) -> None:
        self.scheduler.schedule_once(
            RECONCILE_TASK, RECONCILE_DELAY, self.async_reconcile
        )


class SmartPrugioLightController(SmartPrugioController):
    """Controller for a single on/off light."""

    category = CATEGORY_LIGHTS

    def _build_characteristics(self) -> dict[str, CharacteristicHandlers]:
        return {
            CHAR_ON: CharacteristicHandlers(
                self.async_handle_get, self.async_handle_set
            ),
        }

    @property
    def is_on(self) -> bool:
        return self.cache.power

    async def async_handle_get(self) -> bool:
        """Read the light's power from the cloud and return the cached value."""
        try:
            snapshot = await self._async_fetch_snapshot()
        except SmartPrugioRemoteUnavailable as err:
            _LOGGER.warning("%s: LIGHTS read failed: %s", self.name, err)
            return self.cache.power

        if snapshot is not None:
            self.cache.apply_power(snapshot.get(ATTR_POWER))

        self._push(CHAR_ON, self.cache.power)
        return self.cache.power

    async def async_handle_set(self, value: Any) -> None:
        """Switch the light on or off.

        Rate-limited requests only update the cache. Accepted ones are sent
        to the cloud and followed by a delayed reconciliation, since the
        light changes state some time after the control is acknowledged.
        """
        on = bool(value)
        if not self.rate_limiter.allow():
            self.cache.apply_optimistic(FIELD_POWER, on)
            return

        if await self._async_control([(ATTR_POWER, POWER_ON if on else POWER_OFF)]):
            self.cache.apply_optimistic(FIELD_POWER, on)

        self._schedule_reconcile()

    async def async_reconcile(self) -> None:
        try:
            snapshot = await self._async_fetch_snapshot()
        except SmartPrugioRemoteUnavailable as err:
            # next cycle retries
            _LOGGER.debug("%s: LIGHTS reconcile failed: %s", self.name, err)
            return

        _LOGGER.debug(
            "LIGHTS status %s: %s",
            self.device_id,
            None if snapshot is None else snapshot.get(ATTR_POWER),
        )
        if snapshot is not None:
            self.cache.apply_power(snapshot.get(ATTR_POWER))

        self._push(CHAR_ON, self.cache.power)


class SmartPrugioThermostatController(SmartPrugioController):
    """Controller for a heating-only boiler.

    The boiler knows POWER and a heating set point. Any mode other than
    OFF is reported and handled as HEAT.
    """

    category = CATEGORY_HEATING

    def _build_characteristics(self) -> dict[str, CharacteristicHandlers]:
        return {
            CHAR_CURRENT_TEMPERATURE: CharacteristicHandlers(
                self.async_handle_get_current_temperature
            ),
            CHAR_TARGET_TEMPERATURE: CharacteristicHandlers(
                self.async_handle_get_target_temperature,
                self.async_handle_set_target_temperature,
            ),
            CHAR_ACTIVE: CharacteristicHandlers(
                self.async_handle_get_active, self.async_handle_set_active
            ),
            CHAR_TARGET_MODE: CharacteristicHandlers(
                self.async_handle_get_target_mode, self.async_handle_set_target_mode
            ),
            CHAR_CURRENT_MODE: CharacteristicHandlers(
                self.async_handle_get_current_mode
            ),
        }

    @property
    def active(self) -> int:
        return 1 if self.cache.power else 0

    @property
    def target_mode(self) -> HVACMode:
        return HVACMode.HEAT if self.cache.power else HVACMode.OFF

    @property
    def current_mode(self) -> HVACMode:
        return HVACMode.HEAT if self.cache.power else HVACMode.OFF

    async def _async_read(self, what: str) -> None:
        try:
            snapshot = await self._async_fetch_snapshot()
        except SmartPrugioRemoteUnavailable as err:
            _LOGGER.warning("%s: HEATING %s read failed: %s", self.name, what, err)
            return

        if snapshot is not None:
            self.cache.apply_snapshot(snapshot)

    async def async_handle_get_current_temperature(self) -> float:
        await self._async_read("current temperature")
        return self.cache.current_temperature

    async def async_handle_get_target_temperature(self) -> float:
        await self._async_read("target temperature")
        return self.cache.target_temperature

    async def async_handle_get_active(self) -> int:
        await self._async_read("active")
        return self.active

    async def async_handle_get_target_mode(self) -> HVACMode:
        return self.target_mode

    async def async_handle_get_current_mode(self) -> HVACMode:
        return self.current_mode

    async def async_handle_set_target_temperature(self, value: Any) -> None:
        """Set the heating set point, which also turns the boiler on.

        POWER=ON and the new set point go out in one control request. A
        rejected or failed write leaves the optimistic set point visible
        until the post-write reconciliation replaces it.
        """
        target = round_half_up(value)
        if target is None:
            _LOGGER.debug("%s: ignoring target temperature %r", self.name, value)
            return

        self.cache.apply_optimistic(FIELD_TARGET_TEMPERATURE, target)
        self.cache.apply_optimistic(FIELD_POWER, True)

        if not self.rate_limiter.allow():
            return

        await self._async_control(
            [
                (ATTR_POWER, POWER_ON),
                (ATTR_TARGET_TEMPERATURE, int(self.cache.target_temperature)),
            ]
        )
        self._schedule_reconcile()

    async def async_handle_set_active(self, value: Any) -> None:
        """Turn heating on (1) or off (0).

        Unlike the light, the optimistic power state is kept even if the
        write fails; the post-write reconciliation corrects it.
        """
        on = value == 1
        self.cache.apply_optimistic(FIELD_POWER, on)

        if not self.rate_limiter.allow():
            return

        sent = await self._async_control(
            [(ATTR_POWER, POWER_ON if on else POWER_OFF)]
        )
        if sent and on:
            self._push(CHAR_TARGET_MODE, HVACMode.HEAT)

        self._schedule_reconcile()

    async def async_handle_set_target_mode(self, mode: Any) -> None:
        """Apply a mode request; COOL, AUTO and HEAT_COOL all become HEAT."""
        if mode == HVACMode.OFF:
            await self.async_handle_set_active(0)
            return

        await self.async_handle_set_active(1)
        self._push(CHAR_TARGET_MODE, HVACMode.HEAT)

    async def async_reconcile(self) -> None:
        try:
            snapshot = await self._async_fetch_snapshot()
        except SmartPrugioRemoteUnavailable as err:
            # next cycle retries
            _LOGGER.debug("%s: HEATING reconcile failed: %s", self.name, err)
            return

        if snapshot is None:
            return

        self.cache.apply_snapshot(snapshot)
        _LOGGER.debug("HEATING status %s: %s", self.device_id, self.cache.state)

        self._push(CHAR_TARGET_TEMPERATURE, self.cache.target_temperature)
        self._push(CHAR_CURRENT_TEMPERATURE, self.cache.current_temperature)
        self._push(CHAR_ACTIVE, self.active)
        self._push(CHAR_CURRENT_MODE, self.current_mode)
        self._push(CHAR_TARGET_MODE, self.target_mode)
