"""Internal constants shared across the library."""

BASE_URL = "https://eapi.charge.space/api/v5"
USER_AGENT = "pychargeamps"

#: Lower bound for the polling interval, in seconds.
MIN_REFRESH_INTERVAL = 15
DEFAULT_REFRESH_INTERVAL = 30
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_NAMESPACE = "chargeamps.0"

#: Connector ids assumed when a charge point payload lists no connectors.
FALLBACK_CONNECTOR_IDS: tuple[str, ...] = ("1", "2")

# ------------------------------------------------------------------
# State tree layout
# ------------------------------------------------------------------

CONTROL_CHANNEL = "Control"
REBOOT_STATE = "Reboot"
REMOTE_START_PREFIX = "RemoteStart_"
REMOTE_STOP_PREFIX = "RemoteStop_"
STATUS_CHANNEL = "status"
SETTINGS_CHANNEL = "settings"
CONNECTORS_CHANNEL = "connectors"
