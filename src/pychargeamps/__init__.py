"""pychargeamps - Async bridge between the Charge Amps cloud API and a local state tree."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pychargeamps")
except PackageNotFoundError:
    __version__ = "0+local"
from pychargeamps.adapter import ChargeAmpsAdapter
from pychargeamps.client import ChargeAmpsClient
from pychargeamps.config import ChargeAmpsConfig, clamp_interval
from pychargeamps.dispatcher import CommandDispatcher, decode_identifier
from pychargeamps.exceptions import (
    ChargeAmpsAuthenticationError,
    ChargeAmpsCommandError,
    ChargeAmpsConfigError,
    ChargeAmpsError,
    ChargeAmpsSessionExpiredError,
    ChargeAmpsTransportError,
)
from pychargeamps.models import (
    AuthToken,
    ChargePoint,
    Command,
    Connector,
    Invalid,
    Reboot,
    RemoteStart,
    RemoteStop,
    SettingUpdate,
    StateObject,
    StateValue,
)
from pychargeamps.session import Session
from pychargeamps.state import InMemoryStateStore, StateMirror, StateStore
from pychargeamps.sync import SyncLoop

__all__ = [
    "__version__",
    "AuthToken",
    "ChargeAmpsAdapter",
    "ChargeAmpsAuthenticationError",
    "ChargeAmpsClient",
    "ChargeAmpsCommandError",
    "ChargeAmpsConfig",
    "ChargeAmpsConfigError",
    "ChargeAmpsError",
    "ChargeAmpsSessionExpiredError",
    "ChargeAmpsTransportError",
    "ChargePoint",
    "Command",
    "CommandDispatcher",
    "Connector",
    "InMemoryStateStore",
    "Invalid",
    "Reboot",
    "RemoteStart",
    "RemoteStop",
    "Session",
    "SettingUpdate",
    "StateMirror",
    "StateObject",
    "StateStore",
    "StateValue",
    "SyncLoop",
    "clamp_interval",
    "decode_identifier",
]
