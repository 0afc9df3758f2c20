"""Pair with a Dirigera hub and obtain an access token.

Pairing is an OAuth authorization-code exchange protected with PKCE. The hub
hands out an authorization code straight away but only redeems it for a token
once somebody presses the action button on the hub, so the token request is
retried on a fixed interval until the hub accepts it or the attempts run out.
"""
import logging
import threading
import time
from enum import Enum
from typing import Any, Callable, Dict, Optional

import requests  # type: ignore

from . import pkce
from .exceptions import (
    DirigeraConnectionException,
    DirigeraDeserializationException,
    DirigeraException,
    DirigeraPairingCancelledException,
    DirigeraPairingException,
    DirigeraPairingRejectedException,
    DirigeraPairingTimeoutException,
    DirigeraTimeoutException,
)
from .transport import (
    HubEndpoint,
    TrustPolicy,
    build_sync_session,
    insecure_request_warnings_silenced,
)

_LOGGER = logging.getLogger(__name__)

AUDIENCE = "homesmart.local"
DEFAULT_CLIENT_NAME = "localhost"
DEFAULT_MAX_ATTEMPTS = 10
DEFAULT_INTERVAL = 2.0
DEFAULT_REQUEST_TIMEOUT = 10.0
PENDING_STATUSES = (403,)
PENDING_ERROR = "authorization_pending"


class PairingState(str, Enum):
    """States of a pairing attempt."""

    Idle = "idle"
    AwaitingUserConfirmation = "awaiting_user_confirmation"
    Redeeming = "redeeming"
    Paired = "paired"
    Failed = "failed"


def _is_success(status: int) -> bool:
    return 200 <= status < 300


class PairingFlow:
    """A single pairing attempt against one hub.

    A flow can only be run once. Start a new flow (which generates a new
    proof key) to try again after a failure.

    Args:
        endpoint: The hub to pair with.
        client_name: Name the hub shows for this client.
        max_attempts: Maximum number of token requests while waiting for the button.
        interval: Seconds between token requests.
        request_timeout: Timeout in seconds for each HTTP request.
        session: An optional requests session, by default one is built from `policy`.
        policy: Trust policy for the default session.
        sleep: Called with `interval` between token requests, mainly for tests.
        cancel_event: Setting this event aborts the flow before the next request.
        on_state_change: Called with the new `PairingState` on every transition.
    """

    def __init__(
        self,
        endpoint: HubEndpoint,
        client_name: str = DEFAULT_CLIENT_NAME,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        interval: float = DEFAULT_INTERVAL,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
        policy: Optional[TrustPolicy] = None,
        sleep: Optional[Callable[[float], Any]] = None,
        cancel_event: Optional[threading.Event] = None,
        on_state_change: Optional[Callable[[PairingState], Any]] = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if interval < 0:
            raise ValueError("interval must not be negative")
        self.endpoint = endpoint
        self.client_name = client_name
        self.max_attempts = max_attempts
        self.interval = interval
        self.request_timeout = request_timeout
        self._owns_session = session is None
        self._policy = policy or TrustPolicy()
        self._session = session
        self._sleep = sleep
        self._cancel_event = cancel_event or threading.Event()
        self._on_state_change = on_state_change
        self._state = PairingState.Idle
        self.error: Optional[DirigeraException] = None
        self.redemption_attempts = 0

    @property
    def state(self) -> PairingState:
        """Return the current state of the flow."""
        return self._state

    @property
    def max_wait(self) -> float:
        """Upper bound in seconds spent waiting for the button press."""
        return (self.max_attempts - 1) * self.interval

    def cancel(self) -> None:
        """Abort the flow before its next token request."""
        _LOGGER.debug("PairingFlow.cancel() called")
        self._cancel_event.set()

    def run(self) -> str:
        """Run the flow and return the access token.

        :raises DirigeraPairingRejectedException: the hub refused the request
        :raises DirigeraPairingTimeoutException: the button was not pressed in time
        :raises DirigeraPairingCancelledException: the flow was cancelled
        :raises DirigeraTransportException: the hub could not be reached
        """
        _LOGGER.debug("PairingFlow.run() called")
        if self._state is not PairingState.Idle:
            raise DirigeraPairingException(
                "Pairing flow has already been used, start a new one"
            )
        try:
            proof_key = pkce.generate()
            if self._session is None:
                self._session = build_sync_session(self._policy)
            code = self._request_code(proof_key.challenge)
            return self._redeem(code, proof_key.verifier)
        except DirigeraException as err:
            self.error = err
            self._transition(PairingState.Failed)
            raise
        finally:
            if self._owns_session and self._session is not None:
                self._session.close()
                self._session = None

    def _transition(self, state: PairingState) -> None:
        _LOGGER.debug(
            f"Pairing with {self.endpoint.ip_address}: {self._state.value} -> {state.value}"
        )
        self._state = state
        if self._on_state_change is not None:
            self._on_state_change(state)

    def _send(self, method: str, path: str, **kwargs) -> requests.Response:
        url = self.endpoint.url(path)
        _LOGGER.debug(f"Sending {method} {url}")
        try:
            with insecure_request_warnings_silenced():
                return self._session.request(
                    method, url, timeout=self.request_timeout, **kwargs
                )
        except requests.Timeout as err:
            raise DirigeraTimeoutException(
                f"Timed out waiting for hub at {self.endpoint.ip_address}"
            ) from err
        except requests.RequestException as err:
            raise DirigeraConnectionException(
                f"Unable to reach hub at {self.endpoint.ip_address}: {err}"
            ) from err

    @staticmethod
    def _json(response: requests.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError as err:
            raise DirigeraDeserializationException(
                "Hub response is not valid JSON", response.text
            ) from err
        if not isinstance(data, dict):
            raise DirigeraDeserializationException(
                "Hub response is not a JSON object", response.text
            )
        return data

    def _request_code(self, challenge: str) -> str:
        params = {
            "audience": AUDIENCE,
            "response_type": "code",
            "code_challenge": challenge,
            "code_challenge_method": pkce.CHALLENGE_METHOD,
        }
        response = self._send("GET", "/oauth/authorize", params=params)
        if not _is_success(response.status_code):
            raise DirigeraPairingRejectedException(response.status_code, response.text)
        code = self._json(response).get("code")
        if not code:
            raise DirigeraDeserializationException(
                "No authorization code in hub response", response.text
            )
        self._transition(PairingState.AwaitingUserConfirmation)
        return code

    def _is_pending(self, response: requests.Response) -> bool:
        if response.status_code in PENDING_STATUSES:
            return True
        try:
            body = response.json()
        except ValueError:
            return False
        return isinstance(body, dict) and body.get("error") == PENDING_ERROR

    def _wait(self) -> None:
        if self._sleep is not None:
            self._sleep(self.interval)
        else:
            self._cancel_event.wait(self.interval)

    def _check_cancelled(self) -> None:
        if self._cancel_event.is_set():
            raise DirigeraPairingCancelledException("Pairing was cancelled")

    def _redeem(self, code: str, verifier: str) -> str:
        payload = {
            "code": code,
            "name": self.client_name,
            "grant_type": "authorization_code",
            "code_verifier": verifier,
        }
        for attempt in range(1, self.max_attempts + 1):
            if attempt > 1:
                self._wait()
            self._check_cancelled()
            self.redemption_attempts = attempt
            _LOGGER.debug(f"Token request attempt {attempt}/{self.max_attempts}")
            response = self._send("POST", "/oauth/token", json=payload)
            if _is_success(response.status_code):
                self._transition(PairingState.Redeeming)
                token = self._json(response).get("access_token")
                if not token:
                    raise DirigeraDeserializationException(
                        "No access token in hub response", response.text
                    )
                self._transition(PairingState.Paired)
                return token
            if self._is_pending(response):
                _LOGGER.debug("Hub is waiting for the action button to be pressed")
                continue
            raise DirigeraPairingRejectedException(response.status_code, response.text)
        raise DirigeraPairingTimeoutException(self.max_attempts)


def pair(ip_address: str, **kwargs) -> str:
    """Pair with the hub at `ip_address` and return the access token.

    Keyword arguments are passed on to `PairingFlow`.
    """
    return PairingFlow(HubEndpoint(ip_address), **kwargs).run()
