"""Python interface for the IKEA Dirigera smart home hub.

A token is obtained once by pairing with the hub (press the action button on
the hub when asked)::

    token = pair("192.168.1.10")

All device and scene operations are available through `DirigeraHub`::

    hub = DirigeraHub(Credentials(HubEndpoint("192.168.1.10"), token))
    print(await hub.devices())

Module-specific errors are raised as `DirigeraException` and are expected
to be handled by the user of the library.
"""

from importlib_metadata import version  # type: ignore

from dirigera.config import HubConfig, load_config, save_config
from dirigera.device import (
    Capability,
    Device,
    DeviceAttributes,
    DeviceKind,
    DeviceType,
    Room,
    Startup,
)
from dirigera.exceptions import (
    DirigeraAuthenticationException,
    DirigeraConnectionException,
    DirigeraDeserializationException,
    DirigeraException,
    DirigeraHttpException,
    DirigeraPairingCancelledException,
    DirigeraPairingException,
    DirigeraPairingRejectedException,
    DirigeraPairingTimeoutException,
    DirigeraTimeoutException,
    DirigeraTransportException,
)
from dirigera.hub import Credentials, DirigeraHub, load_hub
from dirigera.pairing import PairingFlow, PairingState, pair
from dirigera.pkce import ProofKeyPair
from dirigera.scene import Scene, SceneAction, SceneTrigger
from dirigera.transport import HubEndpoint, TrustPolicy

__version__ = version("python-dirigera")


__all__ = [
    "pair",
    "load_hub",
    "load_config",
    "save_config",
    "Capability",
    "Credentials",
    "Device",
    "DeviceAttributes",
    "DeviceKind",
    "DeviceType",
    "DirigeraHub",
    "DirigeraException",
    "DirigeraAuthenticationException",
    "DirigeraConnectionException",
    "DirigeraDeserializationException",
    "DirigeraHttpException",
    "DirigeraPairingCancelledException",
    "DirigeraPairingException",
    "DirigeraPairingRejectedException",
    "DirigeraPairingTimeoutException",
    "DirigeraTimeoutException",
    "DirigeraTransportException",
    "HubConfig",
    "HubEndpoint",
    "PairingFlow",
    "PairingState",
    "ProofKeyPair",
    "Room",
    "Scene",
    "SceneAction",
    "SceneTrigger",
    "Startup",
    "TrustPolicy",
]
