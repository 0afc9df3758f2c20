"""Module (main-class) that represents a Dirigera hub.

The hub runs the REST API used to manage devices and scenes. All requests are
sent over HTTPS to the hub's IP address with the access token obtained by
pairing (see `dirigera.pairing`) as a bearer token.
"""
import asyncio
import json
import logging
import os
from dataclasses import dataclass
from types import TracebackType
from typing import Any, Callable, Dict, List, Optional, Union

from aiohttp import ClientError, ClientSession, ClientTimeout
from importlib_metadata import version  # type: ignore

from .config import DEFAULT_CONFIG_PATH, HubConfig, load_config
from .device import Capability, Device, Startup
from .exceptions import (
    DirigeraAuthenticationException,
    DirigeraConnectionException,
    DirigeraDeserializationException,
    DirigeraException,
    DirigeraHttpException,
    DirigeraTimeoutException,
)
from .scene import Scene
from .transport import HubEndpoint, TrustPolicy, build_session

_LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
AUTHENTICATION_STATUSES = (401, 403)
USER_AGENT = f"python-dirigera/{version('python-dirigera')}"


@dataclass(frozen=True)
class Credentials:
    """The hub to talk to and the token to authenticate with."""

    endpoint: HubEndpoint
    token: str

    def __post_init__(self) -> None:
        if not self.token:
            raise ValueError("An access token is required, pair with the hub first")

    def __repr__(self) -> str:
        return f"Credentials(endpoint={self.endpoint!r}, token=<redacted>)"


class DirigeraHub:
    """Class to represent the Dirigera hub.

    Requests are never retried; transient failures are raised to the caller.
    The aiohttp session is created on first use and may be shared by
    concurrent requests.

    Args:
        credentials: Address of the hub and the access token.
        session: An optional aiohttp session, must be configured with a trust
            policy accepting the hub's certificate.
        policy: Trust policy used to build the default session.
        timeout: Default timeout in seconds for each request.
    """

    def __init__(
        self,
        credentials: Credentials,
        session: Optional[ClientSession] = None,
        policy: Optional[TrustPolicy] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.credentials = credentials
        self.policy = policy or TrustPolicy()
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    @classmethod
    def from_config(cls, config: HubConfig, **kwargs) -> "DirigeraHub":
        """Create a hub client from a loaded configuration.

        :raises DirigeraException: if the address or token is not usable
        """
        try:
            credentials = Credentials(HubEndpoint(config.ip_address), config.token)
        except ValueError as err:
            raise DirigeraException(f"Invalid configuration: {err}") from err
        return cls(credentials, **kwargs)

    @property
    def ip_address(self) -> str:
        return self.credentials.endpoint.ip_address

    @property
    def headers(self) -> Dict[str, str]:
        """Headers sent with every request."""
        return {
            "Authorization": f"Bearer {self.credentials.token}",
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }

    def _get_session(self) -> ClientSession:
        if self._session is None:
            self._session = build_session(self.policy)
        return self._session

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        model: Optional[Callable[[Any], Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """Send an authenticated request to the hub.

        :param method: HTTP method
        :param path: API path below ``/v1``, f.ex. ``/devices``
        :param body: Optional JSON-serializable request body
        :param model: Optional callable turning the decoded JSON into a typed value
        :param timeout: Timeout in seconds, defaults to the client timeout
        :return: The decoded JSON (or `model` applied to it), None for an empty body
        :raises DirigeraAuthenticationException: the token was refused (HTTP 401/403)
        :raises DirigeraHttpException: any other non-2xx status
        :raises DirigeraTimeoutException: the hub did not answer in time
        :raises DirigeraConnectionException: the hub could not be reached
        :raises DirigeraDeserializationException: the body does not fit `model`
        """
        url = self.credentials.endpoint.url(path)
        _LOGGER.debug(f"DirigeraHub.request() called: {method} {url}")
        data = json.dumps(body) if body is not None else None
        client_timeout = ClientTimeout(
            total=timeout if timeout is not None else self.timeout
        )
        try:
            async with self._get_session().request(
                method,
                url,
                headers=self.headers,
                data=data,
                timeout=client_timeout,
            ) as response:
                status = response.status
                text = await response.text()
        except asyncio.TimeoutError as err:
            raise DirigeraTimeoutException(
                f"Timed out waiting for {method} {url}"
            ) from err
        except ClientError as err:
            raise DirigeraConnectionException(
                f"Unable to reach hub at {self.ip_address}: {err}"
            ) from err

        _LOGGER.debug(f"{method} {url} returned HTTP {status}")
        if status in AUTHENTICATION_STATUSES:
            raise DirigeraAuthenticationException(
                status, text, f"Access token refused by hub (HTTP {status}): {text}"
            )
        if not 200 <= status < 300:
            raise DirigeraHttpException(status, text)
        return self._decode(text, model)

    @staticmethod
    def _decode(text: str, model: Optional[Callable[[Any], Any]]) -> Any:
        if model is None:
            if not text.strip():
                return None
            try:
                return json.loads(text)
            except ValueError:
                return text
        try:
            payload = json.loads(text)
        except ValueError as err:
            raise DirigeraDeserializationException(
                "Hub response is not valid JSON", text
            ) from err
        try:
            return model(payload)
        except DirigeraDeserializationException as err:
            raise DirigeraDeserializationException(str(err), text) from err
        except (KeyError, TypeError, ValueError) as err:
            raise DirigeraDeserializationException(
                f"Unexpected response shape: {err!r}", text
            ) from err

    async def get(
        self, path: str, model: Optional[Callable[[Any], Any]] = None, **kwargs
    ) -> Any:
        return await self.request("GET", path, model=model, **kwargs)

    async def post(self, path: str, body: Any = None, **kwargs) -> Any:
        return await self.request("POST", path, body=body, **kwargs)

    async def patch(self, path: str, body: Any = None, **kwargs) -> Any:
        return await self.request("PATCH", path, body=body, **kwargs)

    async def devices(self) -> List[Device]:
        """List all devices known by the hub."""
        _LOGGER.debug("DirigeraHub.devices() called")
        return await self.get("/devices", model=Device.list_from_json)

    async def device(self, device_id: str) -> Device:
        """Get a single device by its id."""
        _LOGGER.debug("DirigeraHub.device() called")
        return await self.get(f"/devices/{device_id}", model=Device.from_dict)

    async def _patch_attributes(self, device: Device, attributes: Dict[str, Any]) -> None:
        _LOGGER.debug(f"Updating {device.id} with {attributes}")
        await self.patch(f"/devices/{device.id}", [{"attributes": attributes}])

    @staticmethod
    def _require(device: Device, *capabilities: Capability) -> None:
        if not device.capabilities.supports(*capabilities):
            names = ", ".join(c.value for c in capabilities)
            raise DirigeraException(f"{device.name or device.id} cannot receive {names}")

    async def rename(self, device: Device, new_name: str) -> None:
        """Rename a device.

        The passed device is updated with the new name on success.
        """
        _LOGGER.debug("DirigeraHub.rename() called")
        self._require(device, Capability.CustomName)
        await self._patch_attributes(device, {"customName": new_name})
        device.attributes.custom_name = new_name

    async def set_on(self, device: Device, on: bool) -> None:
        """Turn a device on or off."""
        _LOGGER.debug("DirigeraHub.set_on() called")
        self._require(device, Capability.IsOn)
        await self._patch_attributes(device, {"isOn": on})
        device.attributes.is_on = on

    async def toggle_on_off(self, device: Device) -> None:
        """Toggle a device on and off."""
        _LOGGER.debug("DirigeraHub.toggle_on_off() called")
        if device.attributes.is_on is None:
            raise DirigeraException(f"{device.name or device.id} has no on/off state")
        await self.set_on(device, not device.attributes.is_on)

    async def set_light_level(self, device: Device, level: int) -> None:
        """Set the light level (0-100) of a light."""
        _LOGGER.debug("DirigeraHub.set_light_level() called")
        self._require(device, Capability.LightLevel)
        if not 0 <= level <= 100:
            raise DirigeraException("level must be between 0 and 100")
        await self._patch_attributes(device, {"lightLevel": level})
        device.attributes.light_level = level

    async def set_temperature(self, device: Device, temperature: int) -> None:
        """Set the colour temperature of a light.

        The temperature must be within the range the device reports.
        """
        _LOGGER.debug("DirigeraHub.set_temperature() called")
        self._require(device, Capability.ColorTemperature)
        low = device.attributes.color_temperature_min
        high = device.attributes.color_temperature_max
        if low is None or high is None:
            raise DirigeraException("device has no colour temperature range")
        # The hub reports the warmest (lowest kelvin) value as the max
        low, high = min(low, high), max(low, high)
        if not low <= temperature <= high:
            raise DirigeraException(
                f"color temperature {temperature} not within {low} -> {high}"
            )
        await self._patch_attributes(device, {"colorTemperature": temperature})
        device.attributes.color_temperature = temperature

    async def set_hue_saturation(
        self, device: Device, hue: float, saturation: float
    ) -> None:
        """Set hue (0-360) and saturation (0-1) of a colour light."""
        _LOGGER.debug("DirigeraHub.set_hue_saturation() called")
        self._require(device, Capability.ColorHue, Capability.ColorSaturation)
        if not 0 <= hue <= 360:
            raise DirigeraException("hue must be between 0.0 and 360.0")
        if not 0 <= saturation <= 1:
            raise DirigeraException("saturation must be between 0.0 and 1.0")
        await self._patch_attributes(
            device, {"colorHue": hue, "colorSaturation": saturation}
        )
        device.attributes.color_hue = hue
        device.attributes.color_saturation = saturation

    async def set_startup_behaviour(self, device: Device, behaviour: Startup) -> None:
        """Set what the device does when power returns."""
        _LOGGER.debug("DirigeraHub.set_startup_behaviour() called")
        await self._patch_attributes(device, {"startupOnOff": behaviour.value})
        device.attributes.startup_on_off = behaviour

    async def set_target_level(self, device: Device, level: int) -> None:
        """Set the target level (0-100) of a blind."""
        _LOGGER.debug("DirigeraHub.set_target_level() called")
        self._require(device, Capability.BlindsState)
        if not 0 <= level <= 100:
            raise DirigeraException("level must be between 0 and 100")
        await self._patch_attributes(device, {"blindsTargetLevel": level})
        device.attributes.blinds_target_level = level

    async def scenes(self) -> List[Scene]:
        """List all scenes known by the hub."""
        _LOGGER.debug("DirigeraHub.scenes() called")
        return await self.get("/scenes", model=Scene.list_from_json)

    async def scene(self, scene_id: str) -> Scene:
        """Get a single scene by its id."""
        _LOGGER.debug("DirigeraHub.scene() called")
        return await self.get(f"/scenes/{scene_id}", model=Scene.from_dict)

    async def trigger_scene(self, scene: Scene) -> None:
        """Trigger a scene now, whether it is scheduled or not."""
        _LOGGER.debug("DirigeraHub.trigger_scene() called")
        await self.post(f"/scenes/{scene.id}/trigger")

    async def undo_scene(self, scene: Scene) -> None:
        """Revert the changes made by a scene."""
        _LOGGER.debug("DirigeraHub.undo_scene() called")
        await self.post(f"/scenes/{scene.id}/undo")

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        _LOGGER.debug("DirigeraHub.close() called")
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "DirigeraHub":
        return self

    async def __aexit__(
        self, exc_type: Exception, exc_value: str, traceback: TracebackType
    ) -> None:
        """Close the HTTP session."""
        await self.close()

    def __repr__(self) -> str:
        return f"<DirigeraHub at {self.ip_address}>"


def load_hub(
    path: Union[str, os.PathLike] = DEFAULT_CONFIG_PATH, **kwargs
) -> DirigeraHub:
    """Create a hub client from the configuration file at `path`."""
    return DirigeraHub.from_config(load_config(path), **kwargs)
