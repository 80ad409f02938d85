"""Constants for SmartPrugio integration.

This module contains all the constants used throughout the integration,
including API endpoints, configuration keys, attribute codes and the
acceptance bounds for cached temperatures.
"""

from homeassistant.components.climate import HVACMode

DOMAIN = "smartprugio"
MANUFACTURER = "SmartPrugio"

DEFAULT_BASE_URL = "https://svc.smartprugio.com:18888"
DEFAULT_APP_VERSION = "1.7.0-v84"
DEFAULT_USER_AGENT = "Smart Home/24"

ENV_TOKEN = "SMARTPRUGIO_TOKEN"
ENV_AUTH = "SMARTPRUGIO_AUTH"

CERTIFICATION_TYPE = "KAKAO"
CONTROL_PATH = "/v1/control/device"

CATEGORY_LIGHTS = "LIGHTS"
CATEGORY_HEATING = "HEATING"

ATTR_POWER = "POWER"
ATTR_TARGET_TEMPERATURE = "HTEMPERATURE"
ATTR_CURRENT_TEMPERATURE = "CTEMPERATURE"

POWER_ON = "ON"
POWER_OFF = "OFF"

READ_TIMEOUT = 8.0
WRITE_TIMEOUT = 5.0

DEFAULT_MIN_CONTROL_INTERVAL_MS = 600
DEFAULT_POLL_INTERVAL = 10  # seconds, 0 disables polling
RECONCILE_DELAY = 0.8  # seconds after an accepted write

MIN_TARGET_TEMPERATURE = 5.0
MAX_TARGET_TEMPERATURE = 40.0
TARGET_TEMPERATURE_STEP = 1.0

DEFAULT_CURRENT_TEMPERATURE = 20.0
DEFAULT_TARGET_TEMPERATURE = 22.0

CONF_LIGHT_DEVICE_ID = "light_device_id"
CONF_HEATING_DEVICE_ID = "heating_device_id"
CONF_AUTH = "auth"
CONF_BASE_URL = "base_url"
CONF_APP_VERSION = "app_version"
CONF_USER_AGENT = "user_agent"
CONF_MIN_CONTROL_INTERVAL_MS = "min_control_interval_ms"
CONF_POLL_INTERVAL = "poll_interval"

ERROR_MISSING_CREDENTIALS = "missing_credentials"
ERROR_MISSING_DEVICE = "missing_device"
ERROR_CANNOT_CONNECT = "cannot_connect"
ERROR_DEVICE_NOT_FOUND = "device_not_found"
ERROR_UNKNOWN = "unknown_error"

# Characteristic names pushed to UI refresh callbacks
CHAR_ON = "on"
CHAR_CURRENT_TEMPERATURE = "current_temperature"
CHAR_TARGET_TEMPERATURE = "target_temperature"
CHAR_ACTIVE = "active"
CHAR_TARGET_MODE = "target_mode"
CHAR_CURRENT_MODE = "current_mode"

SUPPORTED_HVAC_MODES = [HVACMode.OFF, HVACMode.HEAT]
