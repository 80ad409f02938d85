"""API client for the SmartPrugio cloud.

This module provides the HTTP client used to list and control SmartPrugio
devices, plus pure helpers that parse the nested list response into a
typed tree and look attributes up in it.
"""

import logging
from typing import Any

import httpx
from homeassistant.core import HomeAssistant
from homeassistant.helpers.httpx_client import create_async_httpx_client

from .const import (
    CERTIFICATION_TYPE,
    CONTROL_PATH,
    DEFAULT_APP_VERSION,
    DEFAULT_BASE_URL,
    DEFAULT_USER_AGENT,
    READ_TIMEOUT,
    WRITE_TIMEOUT,
)
from .models import (
    DeviceAttribute,
    DeviceGroup,
    DeviceList,
    DeviceSnapshot,
    RemoteDevice,
)

_LOGGER = logging.getLogger(__name__)

# HTTP status codes
HTTP_OK = 200
HTTP_MULTIPLE_CHOICES = 300


class SmartPrugioError(Exception):
    """Base exception for SmartPrugio integration errors."""


class SmartPrugioConfigError(SmartPrugioError):
    """Exception raised when the client is built without credentials."""


class SmartPrugioRemoteUnavailable(SmartPrugioError):
    """Exception raised when the remote API cannot serve a request.

    Covers timeouts, transport errors, non-2xx responses and payloads
    that do not have the expected shape.
    """


def create_headers(
    token: str,
    auth: str,
    app_version: str | None = None,
    user_agent: str | None = None,
) -> dict[str, str]:
    """Create HTTP headers for SmartPrugio API requests.

    Args:
        token: Session token sent in the ``token`` header.
        auth: Value of the ``Authorization`` header.
        app_version: App version the cloud expects; defaults to a known build.
        user_agent: User agent string; defaults to the mobile app's.

    Returns:
        Dictionary containing HTTP headers for API requests.

    """
    return {
        "app_version": app_version or DEFAULT_APP_VERSION,
        "User-Agent": user_agent or DEFAULT_USER_AGENT,
        "Accept": "application/json",
        "Accept-Language": "en-US,en;q=0.9",
        "token": token,
        "Authorization": auth,
        "Connection": "keep-alive",
        "Content-Type": "application/json",
    }


def is_http_error(status: int) -> bool:
    """Check if HTTP status code is anything other than 2xx.

    Args:
        status: HTTP status code to check.

    Returns:
        True if the status code is outside the 2xx range, False otherwise.

    """
    return not HTTP_OK <= status < HTTP_MULTIPLE_CHOICES


def validate_response(response: httpx.Response) -> Any:
    """Validate HTTP response and return parsed JSON data.

    Args:
        response: HTTP response object to validate.

    Returns:
        Parsed JSON data from response.

    Raises:
        SmartPrugioRemoteUnavailable: If the status is not 2xx or the body
            is not JSON.

    """
    if is_http_error(response.status_code):
        error_msg = f"Request failed: {response.status_code}"
        raise SmartPrugioRemoteUnavailable(error_msg)

    try:
        return response.json()
    except ValueError as err:
        error_msg = f"Malformed response body: {err}"
        raise SmartPrugioRemoteUnavailable(error_msg) from err


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _parse_attribute(data: dict[str, Any]) -> DeviceAttribute:
    value = data.get("attr_cont")
    return DeviceAttribute(
        code=str(data.get("device_attr_cd", "")),
        value=None if value is None else str(value),
    )


def _parse_device(data: dict[str, Any]) -> RemoteDevice:
    return RemoteDevice(
        device_id=str(data.get("device_id", "")),
        attributes=tuple(
            _parse_attribute(attr)
            for attr in _as_list(data.get("device_attr_list"))
            if isinstance(attr, dict)
        ),
    )


def _parse_group(data: dict[str, Any]) -> DeviceGroup:
    return DeviceGroup(
        devices=tuple(
            _parse_device(device)
            for device in _as_list(data.get("device_list"))
            if isinstance(device, dict)
        ),
    )


def parse_device_list(category: str, payload: Any) -> DeviceList:
    """Parse a control list response into a typed tree.

    The response is a JSON array whose first element carries
    ``device_grp_list[].device_list[].device_attr_list[]``. Missing or
    empty lists are tolerated and yield an empty tree.

    Args:
        category: Category the list was requested for.
        payload: Decoded JSON body.

    Returns:
        DeviceList with every group, device and attribute in the response.

    Raises:
        SmartPrugioRemoteUnavailable: If the payload is not a JSON array of
            objects.

    """
    if not isinstance(payload, list):
        error_msg = f"Unexpected {category} list payload: {type(payload).__name__}"
        raise SmartPrugioRemoteUnavailable(error_msg)

    if not payload:
        return DeviceList(category=category)

    if not isinstance(payload[0], dict):
        error_msg = (
            f"Unexpected {category} list entry: {type(payload[0]).__name__}"
        )
        raise SmartPrugioRemoteUnavailable(error_msg)

    return DeviceList(
        category=category,
        groups=tuple(
            _parse_group(group)
            for group in _as_list(payload[0].get("device_grp_list"))
            if isinstance(group, dict)
        ),
    )


def find_device(tree: DeviceList, device_id: str) -> RemoteDevice | None:
    """Return the first device in ``tree`` with ``device_id``, or None."""
    for group in tree.groups:
        for device in group.devices:
            if device.device_id == device_id:
                return device
    return None


def find_attribute(tree: DeviceList, device_id: str, code: str) -> str | None:
    """Return the raw value of ``code`` for ``device_id``.

    None means either the device is not in the tree or it does not report
    the attribute; use ``extract_snapshot`` to tell the two apart.
    """
    device = find_device(tree, device_id)
    if device is None:
        return None
    return device.attribute(code)


def extract_snapshot(tree: DeviceList, device_id: str) -> DeviceSnapshot | None:
    """Return the attribute snapshot for ``device_id``, or None if not found."""
    device = find_device(tree, device_id)
    if device is None:
        return None
    return device.snapshot()


def build_control_payload(
    category: str,
    device_id: str,
    attribute_pairs: list[tuple[str, Any]],
) -> dict[str, Any]:
    """Build the body of a control request.

    Args:
        category: Device category (``LIGHTS`` or ``HEATING``).
        device_id: Target device identifier.
        attribute_pairs: ``(attribute code, value)`` pairs to set together.

    Returns:
        Dictionary ready to be sent as JSON.

    """
    return {
        "certf_tp_cd": CERTIFICATION_TYPE,
        "ctl_tp_cd": category,
        "device_tp_cd": category,
        "device_id": device_id,
        "device_attr_list": [
            {"device_attr_cd": code, "set_cont": str(value)}
            for code, value in attribute_pairs
        ],
    }


def create_session_client(hass: HomeAssistant) -> httpx.AsyncClient:
    """Create the HTTP client shared by every accessory of a config entry.

    Args:
        hass: Home Assistant instance.

    Returns:
        httpx AsyncClient managed by Home Assistant.

    """
    return create_async_httpx_client(hass, timeout=WRITE_TIMEOUT)


class SmartPrugioClient:
    """Client for the SmartPrugio device control endpoint.

    The client holds no state besides its credentials, so every accessory
    using the same account shares one instance. It never retries; callers
    decide what a failure means.
    """

    def __init__(
        self,
        session: httpx.AsyncClient,
        token: str | None,
        auth: str | None,
        base_url: str | None = None,
        app_version: str | None = None,
        user_agent: str | None = None,
    ) -> None:
        """Initialize the client.

        Raises:
            SmartPrugioConfigError: If token or auth is missing.

        """
        if not token or not auth:
            error_msg = "Missing token/auth. Set them in the integration configuration."
            raise SmartPrugioConfigError(error_msg)

        self._session = session
        self._base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self._headers = create_headers(token, auth, app_version, user_agent)

    @property
    def base_url(self) -> str:
        """Return the API base URL."""
        return self._base_url

    @property
    def headers(self) -> dict[str, str]:
        """Return a copy of the headers sent with every request."""
        return dict(self._headers)

    async def async_list_devices(self, category: str) -> DeviceList:
        """Fetch every device of ``category`` with its attributes.

        Args:
            category: Device category (``LIGHTS`` or ``HEATING``).

        Returns:
            DeviceList parsed from the response.

        Raises:
            SmartPrugioRemoteUnavailable: On timeout, transport error,
                non-2xx status or malformed payload.

        """
        url = f"{self._base_url}{CONTROL_PATH}"
        params = {"certf_tp_cd": CERTIFICATION_TYPE, "ctl_tp_cd": category}

        _LOGGER.debug("Listing %s devices", category)
        try:
            response = await self._session.get(
                url,
                params=params,
                headers=self._headers,
                timeout=READ_TIMEOUT,
            )
        except httpx.TimeoutException as err:
            error_msg = f"Timeout while listing {category} devices"
            raise SmartPrugioRemoteUnavailable(error_msg) from err
        except httpx.HTTPError as err:
            error_msg = f"Connection error while listing {category} devices: {err}"
            raise SmartPrugioRemoteUnavailable(error_msg) from err

        tree = parse_device_list(category, validate_response(response))
        _LOGGER.debug(
            "Retrieved %d %s device groups", len(tree.groups), category
        )
        return tree

    async def async_control_device(
        self,
        category: str,
        device_id: str,
        attribute_pairs: list[tuple[str, Any]],
    ) -> Any:
        """Set one or more attributes of a device in a single request.

        Args:
            category: Device category (``LIGHTS`` or ``HEATING``).
            device_id: Target device identifier.
            attribute_pairs: ``(attribute code, value)`` pairs to set.

        Returns:
            The decoded acknowledgement returned by the cloud.

        Raises:
            SmartPrugioRemoteUnavailable: On timeout, transport error,
                non-2xx status or malformed payload.

        """
        url = f"{self._base_url}{CONTROL_PATH}"
        payload = build_control_payload(category, device_id, attribute_pairs)

        _LOGGER.debug(
            "Sending %s control to device %s: %s",
            category,
            device_id,
            payload["device_attr_list"],
        )
        try:
            response = await self._session.post(
                url,
                json=payload,
                headers=self._headers,
                timeout=WRITE_TIMEOUT,
            )
        except httpx.TimeoutException as err:
            error_msg = f"Timeout while controlling {category} device {device_id}"
            raise SmartPrugioRemoteUnavailable(error_msg) from err
        except httpx.HTTPError as err:
            error_msg = (
                f"Connection error while controlling {category} device "
                f"{device_id}: {err}"
            )
            raise SmartPrugioRemoteUnavailable(error_msg) from err

        result = validate_response(response)
        _LOGGER.info("%s control accepted for %s: %s", category, device_id, result)
        return result
