"""HTTPS transport to the hub.

The hub serves its API with a self-signed certificate and is addressed by its
IP address on the local network, so there is no certificate chain or hostname
to verify. A `TrustPolicy` captures that decision for a single client: it
accepts whatever certificate the hub presents but still requires TLS 1.2 or
newer, so tokens never cross the network in clear text.
"""
import ipaddress
import logging
import ssl
import warnings
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

import requests  # type: ignore
import urllib3
from aiohttp import ClientSession, ClientTimeout, TCPConnector
from requests.adapters import HTTPAdapter  # type: ignore

_LOGGER = logging.getLogger(__name__)

DIRIGERA_PORT = 8443
DIRIGERA_API_VERSION = "v1"


@dataclass(frozen=True)
class HubEndpoint:
    """Address of a hub on the local network."""

    ip_address: str

    def __post_init__(self) -> None:
        # Raises ValueError for anything that isn't an IPv4/IPv6 literal
        ipaddress.ip_address(self.ip_address)

    @property
    def port(self) -> int:
        return DIRIGERA_PORT

    @property
    def base_url(self) -> str:
        """Return the root URL of the versioned REST API."""
        host = self.ip_address
        if ipaddress.ip_address(host).version == 6:
            host = f"[{host}]"
        return f"https://{host}:{self.port}/{DIRIGERA_API_VERSION}"

    def url(self, path: str) -> str:
        """Return the absolute URL for an API path such as ``/devices``."""
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.base_url}{path}"


class TrustPolicy:
    """Accept any certificate presented by the hub while still requiring TLS."""

    def __init__(
        self, minimum_version: ssl.TLSVersion = ssl.TLSVersion.TLSv1_2
    ) -> None:
        self.minimum_version = minimum_version

    def ssl_context(self) -> ssl.SSLContext:
        """Build a client context without chain or hostname verification."""
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
        context.minimum_version = self.minimum_version
        return context

    def __repr__(self) -> str:
        return f"TrustPolicy(accept_any_certificate=True, minimum_version={self.minimum_version.name})"


def build_session(
    policy: TrustPolicy, timeout: Optional[float] = None
) -> ClientSession:
    """Create an aiohttp session bound to the given trust policy.

    Must be called from a running event loop.
    """
    _LOGGER.debug(f"Building aiohttp session with {policy!r}")
    connector = TCPConnector(ssl=policy.ssl_context())
    if timeout is None:
        return ClientSession(connector=connector)
    return ClientSession(connector=connector, timeout=ClientTimeout(total=timeout))


class TrustPolicyAdapter(HTTPAdapter):
    """requests adapter whose connection pools use a `TrustPolicy` context."""

    def __init__(self, policy: TrustPolicy, **kwargs) -> None:
        self._ssl_context = policy.ssl_context()
        super().__init__(**kwargs)

    def init_poolmanager(self, *args, **kwargs):
        kwargs["ssl_context"] = self._ssl_context
        return super().init_poolmanager(*args, **kwargs)

    def proxy_manager_for(self, *args, **kwargs):
        kwargs["ssl_context"] = self._ssl_context
        return super().proxy_manager_for(*args, **kwargs)


def build_sync_session(policy: TrustPolicy) -> requests.Session:
    """Create a blocking requests session bound to the given trust policy."""
    _LOGGER.debug(f"Building requests session with {policy!r}")
    session = requests.Session()
    session.verify = False
    session.mount("https://", TrustPolicyAdapter(policy))
    return session


@contextmanager
def insecure_request_warnings_silenced() -> Iterator[None]:
    """Silence urllib3's unverified-certificate warning for this block only."""
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", urllib3.exceptions.InsecureRequestWarning)
        yield
