from __future__ import annotations

import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_TOKEN, Platform
from homeassistant.core import HomeAssistant

from .api import SmartPrugioClient, SmartPrugioConfigError, create_session_client
from .const import (
    CONF_APP_VERSION,
    CONF_AUTH,
    CONF_BASE_URL,
    CONF_USER_AGENT,
    DOMAIN,
)

_LOGGER = logging.getLogger(__name__)

PLATFORMS = [Platform.CLIMATE, Platform.LIGHT]


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info("Setting up SmartPrugio integration for entry %s", entry.entry_id)

    session = create_session_client(hass)
    try:
        client = SmartPrugioClient(
            session,
            entry.data.get(CONF_TOKEN),
            entry.data.get(CONF_AUTH),
            base_url=entry.data.get(CONF_BASE_URL),
            app_version=entry.data.get(CONF_APP_VERSION),
            user_agent=entry.data.get(CONF_USER_AGENT),
        )
    except SmartPrugioConfigError as err:
        _LOGGER.error("Invalid configuration for entry %s: %s", entry.entry_id, err)
        return False

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = {
        "session": session,
        "client": client,
        "config": dict(entry.data),
    }
    _LOGGER.debug("Stored client for entry %s (%s)", entry.entry_id, client.base_url)

    try:
        await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
        _LOGGER.info(
            "Successfully setup SmartPrugio integration for entry %s", entry.entry_id
        )
        return True
    except Exception as err:
        _LOGGER.error("Failed to setup platforms for entry %s: %s", entry.entry_id, err)
        return False


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info("Unloading SmartPrugio integration for entry %s", entry.entry_id)

    try:
        unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
        if unload_ok:
            if DOMAIN in hass.data and entry.entry_id in hass.data[DOMAIN]:
                entry_data = hass.data[DOMAIN].pop(entry.entry_id)
                await entry_data["session"].aclose()
                _LOGGER.debug("Cleaned up data for entry %s", entry.entry_id)
            _LOGGER.info(
                "Successfully unloaded SmartPrugio integration for entry %s",
                entry.entry_id,
            )
        else:
            _LOGGER.warning(
                "Failed to unload some platforms for entry %s", entry.entry_id
            )

        return unload_ok
    except Exception as err:
        _LOGGER.error(
            "Error unloading SmartPrugio integration for entry %s: %s",
            entry.entry_id,
            err,
        )
        return False
