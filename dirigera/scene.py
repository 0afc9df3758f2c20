"""Scenes configured on the hub.

A scene applies settings such as light level or colour temperature to a set
of devices. It can be triggered from the app (or this library), at a given
time or relative to sunrise and sunset.
"""
from typing import Any, Dict, List, Optional

from .device import parse_datetime, parse_optional_datetime
from .exceptions import DirigeraDeserializationException


class SceneInfo:
    """Name and icon of a scene."""

    def __init__(self, data: Dict[str, Any]):
        self.name: str = data["name"]
        self.icon: Optional[str] = data.get("icon")


class SceneTrigger:
    """Something that starts a scene.

    `type` is `app`, `sunriseSunset` or `time`. For scheduled triggers the
    schedule is kept as sent in `trigger` and `end_trigger_event`.
    """

    def __init__(self, data: Dict[str, Any]):
        self.id: str = data["id"]
        self.type: str = data["type"]
        self.disabled = bool(data.get("disabled", False))
        self.triggered_at = parse_optional_datetime(data.get("triggeredAt"))
        self.next_trigger_at = parse_optional_datetime(data.get("nextTriggerAt"))
        self.trigger: Optional[Dict[str, Any]] = data.get("trigger")
        self.end_trigger_event: Optional[Dict[str, Any]] = data.get("endTriggerEvent")


class SceneAction:
    """Settings a scene applies to a single device."""

    def __init__(self, data: Dict[str, Any]):
        self.id: str = data["id"]
        self.type: str = data.get("type", "device")
        self.device_id: str = data["deviceId"]
        self.attributes: Dict[str, Any] = dict(data.get("attributes", {}))


class Scene:
    """Class to represent a scene."""

    def __init__(self, data: Dict[str, Any]):
        self.id: str = data["id"]
        self.type: str = data["type"]
        self.info = SceneInfo(data["info"])
        self.actions = [SceneAction(a) for a in data.get("actions", [])]
        self.commands: List[str] = list(data.get("commands", []))
        self.triggers = [SceneTrigger(t) for t in data.get("triggers", [])]
        self.undo_allowed_duration: Optional[int] = data.get("undoAllowedDuration")
        self.created_at = parse_datetime(data["createdAt"])
        self.last_completed = parse_optional_datetime(data.get("lastCompleted"))
        self.last_triggered = parse_optional_datetime(data.get("lastTriggered"))
        self.last_undo = parse_optional_datetime(data.get("lastUndo"))

    @classmethod
    def from_dict(cls, data: Any) -> "Scene":
        """Build a scene from the hub's JSON representation."""
        try:
            return cls(data)
        except (KeyError, TypeError, ValueError) as err:
            raise DirigeraDeserializationException(
                f"Invalid scene data: {err!r}", repr(data)
            ) from err

    @classmethod
    def list_from_json(cls, data: Any) -> List["Scene"]:
        if not isinstance(data, list):
            raise DirigeraDeserializationException(
                "Expected a list of scenes", repr(data)
            )
        return [cls.from_dict(item) for item in data]

    @property
    def name(self) -> str:
        return self.info.name

    def __repr__(self) -> str:
        return f"<Scene {self.name!r} ({self.id})>"
