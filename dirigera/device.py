"""Devices connected to a Dirigera hub.

Every device the hub knows about (including the hub itself) is returned in the
same JSON shape: a `type` telling what kind of device it is, shared metadata
and an `attributes` object whose keys depend on the device. `Device` maps all
of them onto one class; attributes a device doesn't report are `None`.
"""
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .exceptions import DirigeraDeserializationException

_LOGGER = logging.getLogger(__name__)


def parse_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp as sent by the hub."""
    if not isinstance(value, str):
        raise ValueError(f"Invalid date format: {value!r}")
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def parse_optional_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse a timestamp, returning None for missing or unparseable values."""
    if value is None:
        return None
    try:
        return parse_datetime(value)
    except ValueError:
        return None


class DeviceKind(Enum):
    """Kind of device, from the `type` key."""

    Blind = "blind"
    Controller = "controller"
    Gateway = "gateway"
    Light = "light"
    Outlet = "outlet"
    Sensor = "sensor"
    Unknown = -1

    @classmethod
    def parse(cls, value: str) -> "DeviceKind":
        try:
            return cls(value)
        except ValueError:
            _LOGGER.debug(f"Unknown device kind: {value}")
            return cls.Unknown


class DeviceType(Enum):
    """Device type enum, from the `deviceType` key.

    This does not always match the `DeviceKind`, a remote is a `Controller`
    with device type `LightController`.
    """

    LightController = "lightController"
    Light = "light"
    Gateway = "gateway"
    MotionSensor = "motionSensor"
    Outlet = "outlet"
    Unknown = -1

    @classmethod
    def parse(cls, value: str) -> "DeviceType":
        try:
            return cls(value)
        except ValueError:
            _LOGGER.debug(f"Unknown device type: {value}")
            return cls.Unknown

    def __str__(self) -> str:
        return self.name


class Capability(Enum):
    """Capabilities a device can send or receive."""

    BlindsState = "blindsState"
    ColorHue = "colorHue"
    ColorSaturation = "colorSaturation"
    ColorTemperature = "colorTemperature"
    Coordinates = "coordinates"
    CountryCode = "countryCode"
    CustomName = "customName"
    IsOn = "isOn"
    LightLevel = "lightLevel"
    LogLevel = "logLevel"
    PermittingJoin = "permittingJoin"
    Time = "time"
    Timezone = "timezone"
    UserConsents = "userConsents"


class Startup(Enum):
    """What a device does when power returns, f.ex. after a power outage."""

    StartOn = "startOn"
    StartOff = "startOff"
    StartPrevious = "startPrevious"
    StartToggle = "startToggle"


class Room:
    """The room a device is placed in, as configured in the IKEA app."""

    def __init__(self, data: Dict[str, Any]):
        self.id = data["id"]
        self.name = data["name"]
        self.color = data.get("color")
        self.icon = data.get("icon")

    def __repr__(self) -> str:
        return f"<Room {self.name}>"


class Capabilities:
    """What a device can send and receive."""

    def __init__(self, data: Dict[str, Any]):
        self.can_send = _parse_capabilities(data.get("canSend", []))
        self.can_receive = _parse_capabilities(data.get("canReceive", []))

    def supports(self, *capabilities: Capability) -> bool:
        """Return True if the device can receive all the given capabilities."""
        return all(c in self.can_receive for c in capabilities)


def _parse_capabilities(values: List[str]) -> List[Capability]:
    capabilities = []
    for value in values:
        try:
            capabilities.append(Capability(value))
        except ValueError:
            _LOGGER.debug(f"Ignoring unknown capability: {value}")
    return capabilities


class DeviceAttributes:
    """Attributes of a device.

    Attributes common to all devices are always set, the rest depend on the
    device and are None when not reported. The unmodified dict is kept as `raw`.
    """

    def __init__(self, data: Dict[str, Any]):
        self.raw = data
        self.custom_name: str = data.get("customName", "")
        self.firmware_version = data.get("firmwareVersion")
        self.hardware_version = data.get("hardwareVersion")
        self.manufacturer = data.get("manufacturer")
        self.model = data.get("model")
        self.product_code = data.get("productCode")
        self.serial_number = data.get("serialNumber")
        self.ota_status = data.get("otaStatus")
        self.ota_state = data.get("otaState")
        self.ota_progress = data.get("otaProgress")
        self.ota_policy = data.get("otaPolicy")

        # Light, controller and outlet
        self.is_on: Optional[bool] = data.get("isOn")
        startup = data.get("startupOnOff")
        self.startup_on_off: Optional[Startup] = Startup(startup) if startup else None

        # Light
        self.light_level: Optional[int] = data.get("lightLevel")
        self.permitting_join = data.get("permittingJoin")
        self.color_mode = data.get("colorMode")
        self.color_temperature: Optional[int] = data.get("colorTemperature")
        self.color_temperature_min: Optional[int] = data.get("colorTemperatureMin")
        self.color_temperature_max: Optional[int] = data.get("colorTemperatureMax")
        self.startup_temperature = data.get("startupTemperature")
        self.color_hue: Optional[float] = data.get("colorHue")
        self.color_saturation: Optional[float] = data.get("colorSaturation")
        self.circadian_rhythm_mode = data.get("circadianRhythmMode")

        # Controller
        self.battery_percentage: Optional[int] = data.get("batteryPercentage")

        # Blinds
        self.blinds_current_level: Optional[int] = data.get("blindsCurrentLevel")
        self.blinds_target_level: Optional[int] = data.get("blindsTargetLevel")
        self.blinds_state = data.get("blindsState")

        # Environment sensor
        self.current_temperature = data.get("currentTemperature")
        self.current_rh = data.get("currentRH")
        self.current_pm25 = data.get("currentPM25")
        self.max_measured_pm25 = data.get("maxMeasuredPM25")
        self.min_measured_pm25 = data.get("minMeasuredPM25")
        self.voc_index = data.get("vocIndex")

        # Open/close sensor
        self.is_open: Optional[bool] = data.get("isOpen")


class Device:
    """Class to represent a device connected to the hub."""

    def __init__(self, data: Dict[str, Any]):
        self.id: str = data["id"]
        self.kind = DeviceKind.parse(data["type"])
        self.device_type = DeviceType.parse(data["deviceType"])
        self.created_at = parse_datetime(data["createdAt"])
        self.last_seen = parse_datetime(data["lastSeen"])
        self.is_reachable = bool(data["isReachable"])
        self.is_hidden: Optional[bool] = data.get("isHidden")
        room = data.get("room")
        self.room: Optional[Room] = Room(room) if room else None
        self.attributes = DeviceAttributes(data["attributes"])
        self.remote_links: List[str] = list(data.get("remoteLinks", []))
        self.capabilities = Capabilities(data["capabilities"])

    @classmethod
    def from_dict(cls, data: Any) -> "Device":
        """Build a device from the hub's JSON representation.

        :raises DirigeraDeserializationException: if required keys are missing or malformed
        """
        try:
            return cls(data)
        except (KeyError, TypeError, ValueError) as err:
            raise DirigeraDeserializationException(
                f"Invalid device data: {err!r}", repr(data)
            ) from err

    @classmethod
    def list_from_json(cls, data: Any) -> List["Device"]:
        """Build devices from a JSON array."""
        if not isinstance(data, list):
            raise DirigeraDeserializationException(
                "Expected a list of devices", repr(data)
            )
        return [cls.from_dict(item) for item in data]

    @property
    def name(self) -> str:
        """Return the name given to the device in the app."""
        return self.attributes.custom_name

    def __repr__(self) -> str:
        return f"<{self.device_type} {self.name!r} ({self.id})>"
