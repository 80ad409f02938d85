"""
Configuration flow for SmartPrugio integration.

This module handles the setup and configuration of the SmartPrugio
integration through Home Assistant's config flow system.
"""

import logging
import os
from typing import Any

import voluptuous as vol
from homeassistant.config_entries import ConfigFlow, ConfigFlowResult
from homeassistant.const import CONF_NAME, CONF_TOKEN
from homeassistant.helpers.httpx_client import get_async_client

from . import api
from .const import (
    CATEGORY_HEATING,
    CATEGORY_LIGHTS,
    CONF_APP_VERSION,
    CONF_AUTH,
    CONF_BASE_URL,
    CONF_HEATING_DEVICE_ID,
    CONF_LIGHT_DEVICE_ID,
    CONF_MIN_CONTROL_INTERVAL_MS,
    CONF_POLL_INTERVAL,
    CONF_USER_AGENT,
    DEFAULT_APP_VERSION,
    DEFAULT_BASE_URL,
    DEFAULT_MIN_CONTROL_INTERVAL_MS,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_USER_AGENT,
    DOMAIN,
    ENV_AUTH,
    ENV_TOKEN,
    ERROR_CANNOT_CONNECT,
    ERROR_DEVICE_NOT_FOUND,
    ERROR_MISSING_CREDENTIALS,
    ERROR_MISSING_DEVICE,
    ERROR_UNKNOWN,
    MANUFACTURER,
)

_LOGGER = logging.getLogger(__name__)


def build_user_schema() -> vol.Schema:
    """Build the form schema, suggesting credentials from the environment."""
    return vol.Schema(
        {
            vol.Required(CONF_NAME, default=MANUFACTURER): str,
            vol.Optional(CONF_LIGHT_DEVICE_ID): str,
            vol.Optional(CONF_HEATING_DEVICE_ID): str,
            vol.Required(
                CONF_TOKEN,
                description={"suggested_value": os.environ.get(ENV_TOKEN)},
            ): str,
            vol.Required(
                CONF_AUTH,
                description={"suggested_value": os.environ.get(ENV_AUTH)},
            ): str,
            vol.Optional(CONF_BASE_URL, default=DEFAULT_BASE_URL): str,
            vol.Optional(CONF_APP_VERSION, default=DEFAULT_APP_VERSION): str,
            vol.Optional(CONF_USER_AGENT, default=DEFAULT_USER_AGENT): str,
            vol.Optional(
                CONF_MIN_CONTROL_INTERVAL_MS, default=DEFAULT_MIN_CONTROL_INTERVAL_MS
            ): vol.All(vol.Coerce(int), vol.Range(min=0)),
            vol.Optional(CONF_POLL_INTERVAL, default=DEFAULT_POLL_INTERVAL): vol.All(
                vol.Coerce(int), vol.Range(min=0)
            ),
        }
    )


class SmartPrugioConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle configuration flow for SmartPrugio integration."""

    VERSION = 1

    async def _async_validate(self, user_input: dict[str, Any]) -> None:
        """
        Check the credentials and that every configured device exists.

        Raises:
            SmartPrugioConfigError: If token or auth is missing.
            SmartPrugioRemoteUnavailable: If the cloud cannot be reached.
            LookupError: If a configured device is not listed.

        """
        client = api.SmartPrugioClient(
            get_async_client(self.hass),
            user_input.get(CONF_TOKEN),
            user_input.get(CONF_AUTH),
            base_url=user_input.get(CONF_BASE_URL),
            app_version=user_input.get(CONF_APP_VERSION),
            user_agent=user_input.get(CONF_USER_AGENT),
        )

        for category, key in (
            (CATEGORY_LIGHTS, CONF_LIGHT_DEVICE_ID),
            (CATEGORY_HEATING, CONF_HEATING_DEVICE_ID),
        ):
            device_id = user_input.get(key)
            if not device_id:
                continue
            tree = await client.async_list_devices(category)
            if api.find_device(tree, device_id) is None:
                error_msg = f"{category} device {device_id} not found"
                raise LookupError(error_msg)

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """
        Handle the initial step of the config flow.

        Args:
            user_input: User input data containing credentials and device ids.

        Returns:
            ConfigFlowResult indicating the next step or errors.

        """
        errors: dict[str, str] = {}

        if user_input is not None:
            light_id = user_input.get(CONF_LIGHT_DEVICE_ID) or ""
            heating_id = user_input.get(CONF_HEATING_DEVICE_ID) or ""

            if not light_id and not heating_id:
                errors["base"] = ERROR_MISSING_DEVICE
            else:
                try:
                    await self._async_validate(user_input)
                except api.SmartPrugioConfigError as err:
                    _LOGGER.warning(
                        "Missing credentials (%s): %s", ERROR_MISSING_CREDENTIALS, err
                    )
                    errors["base"] = ERROR_MISSING_CREDENTIALS
                except api.SmartPrugioRemoteUnavailable:
                    _LOGGER.exception("Connection error (%s)", ERROR_CANNOT_CONNECT)
                    errors["base"] = ERROR_CANNOT_CONNECT
                except LookupError as err:
                    _LOGGER.warning("%s (%s)", err, ERROR_DEVICE_NOT_FOUND)
                    errors["base"] = ERROR_DEVICE_NOT_FOUND
                except Exception:
                    _LOGGER.exception(
                        "Unexpected error during validation (%s)", ERROR_UNKNOWN
                    )
                    errors["base"] = ERROR_UNKNOWN

            if not errors:
                await self.async_set_unique_id(f"{light_id}_{heating_id}")
                self._abort_if_unique_id_configured()

                return self.async_create_entry(
                    title=user_input[CONF_NAME],
                    data=user_input,
                )

        return self.async_show_form(
            step_id="user",
            data_schema=build_user_schema(),
            errors=errors,
        )
