"""Pytest configuration and fixtures for SmartPrugio tests."""

import asyncio
from typing import Any
from unittest.mock import AsyncMock, Mock

import pytest

from custom_components.smartprugio.api import SmartPrugioClient, parse_device_list
from custom_components.smartprugio.const import CATEGORY_HEATING, CATEGORY_LIGHTS

LIGHT_ID = "Lt03_pow01"
HEATING_ID = "Ht03"


def create_list_payload(devices: dict[str, dict[str, str]]) -> list[dict[str, Any]]:
    """Create a control list response.

    Args:
        devices: Mapping of device id to its attribute code -> value pairs.

    Returns:
        A list shaped like the cloud's control list response, with the
        devices split over two groups.

    """
    device_list = [
        {
            "device_id": device_id,
            "device_attr_list": [
                {"device_attr_cd": code, "attr_cont": value}
                for code, value in attributes.items()
            ],
        }
        for device_id, attributes in devices.items()
    ]
    return [
        {
            "device_grp_list": [
                {"device_list": [{"device_id": "other", "device_attr_list": []}]},
                {"device_list": device_list},
            ],
        },
    ]


@pytest.fixture
def sample_lights_payload() -> list[dict[str, Any]]:
    """Fixture providing a LIGHTS list response with the test light on."""
    return create_list_payload({LIGHT_ID: {"POWER": "ON"}})


@pytest.fixture
def sample_heating_payload() -> list[dict[str, Any]]:
    """Fixture providing a HEATING list response for the test boiler."""
    return create_list_payload(
        {
            HEATING_ID: {
                "POWER": "ON",
                "HTEMPERATURE": "24",
                "CTEMPERATURE": "21.5",
            },
        }
    )


@pytest.fixture
def sample_control_response() -> dict[str, Any]:
    """Fixture providing a control acknowledgement."""
    return {"result_cd": "0000", "result_msg": "OK"}


@pytest.fixture
def mock_hass() -> Mock:
    """Create a mock Home Assistant instance that runs background tasks."""
    hass = Mock()
    hass.data = {}
    hass.async_create_background_task = Mock(
        side_effect=lambda target, name, **kwargs: asyncio.create_task(target)
    )
    return hass


@pytest.fixture
def mock_client() -> Mock:
    """Create a mock SmartPrugio client with empty responses."""
    client = Mock(spec=SmartPrugioClient)
    client.async_list_devices = AsyncMock(
        side_effect=lambda category: parse_device_list(category, [])
    )
    client.async_control_device = AsyncMock(return_value={"result_cd": "0000"})
    return client


@pytest.fixture
def lights_tree(sample_lights_payload: list[dict[str, Any]]) -> Any:
    """Fixture providing the parsed LIGHTS tree."""
    return parse_device_list(CATEGORY_LIGHTS, sample_lights_payload)


@pytest.fixture
def heating_tree(sample_heating_payload: list[dict[str, Any]]) -> Any:
    """Fixture providing the parsed HEATING tree."""
    return parse_device_list(CATEGORY_HEATING, sample_heating_payload)
