"""Read and write the hub address and access token.

The configuration is a small JSON file::

    {"ip-address": "192.168.1.10", "token": "..."}

It is written by ``dirigera generate-token`` and read by `load_hub`.
"""
import json
import logging
import os
from dataclasses import dataclass
from typing import Union

from .exceptions import DirigeraException
from .transport import HubEndpoint

_LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.json"


@dataclass(frozen=True)
class HubConfig:
    """Address of a hub and the token to talk to it."""

    ip_address: str
    token: str

    def to_dict(self) -> dict:
        return {"ip-address": self.ip_address, "token": self.token}

    @classmethod
    def from_dict(cls, data: dict) -> "HubConfig":
        try:
            ip_address, token = data["ip-address"], data["token"]
        except (KeyError, TypeError) as err:
            raise DirigeraException(f"Invalid configuration: missing {err}") from err
        if not isinstance(ip_address, str):
            raise DirigeraException("Invalid configuration: ip-address must be a string")
        if not isinstance(token, str) or not token:
            raise DirigeraException("Invalid configuration: token must not be empty")
        try:
            HubEndpoint(ip_address)
        except ValueError as err:
            raise DirigeraException(
                f"Invalid configuration: {ip_address!r} is not a valid IP address"
            ) from err
        return cls(ip_address=ip_address, token=token)

    def __repr__(self) -> str:
        return f"HubConfig(ip_address={self.ip_address!r}, token=<redacted>)"


def load_config(path: Union[str, os.PathLike] = DEFAULT_CONFIG_PATH) -> HubConfig:
    """Load the configuration from `path`.

    :raises DirigeraException: if the file is missing or not a valid configuration
    """
    _LOGGER.debug(f"Loading configuration from {path}")
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as err:
        raise DirigeraException(
            f"No configuration found at {path}, run 'dirigera generate-token' first"
        ) from err
    except (OSError, ValueError) as err:
        raise DirigeraException(f"Unable to read configuration {path}: {err}") from err
    return HubConfig.from_dict(data)


def save_config(
    config: HubConfig,
    path: Union[str, os.PathLike] = DEFAULT_CONFIG_PATH,
    overwrite: bool = False,
) -> None:
    """Write the configuration to `path`.

    :raises DirigeraException: if the file exists and `overwrite` is False
    """
    _LOGGER.debug(f"Saving configuration to {path}")
    mode = "w" if overwrite else "x"
    try:
        with open(path, mode, encoding="utf-8") as f:
            json.dump(config.to_dict(), f, indent=2)
            f.write("\n")
    except FileExistsError as err:
        raise DirigeraException(f"'{path}' already exists") from err
