"""Tests for the pairing module."""
import json
import threading
import time
from unittest.mock import MagicMock

import pytest
import requests  # type: ignore

from dirigera.exceptions import (
    DirigeraConnectionException,
    DirigeraDeserializationException,
    DirigeraException,
    DirigeraPairingCancelledException,
    DirigeraPairingException,
    DirigeraPairingRejectedException,
    DirigeraPairingTimeoutException,
    DirigeraTimeoutException,
)
from dirigera.pairing import PairingFlow, PairingState, pair
from dirigera.pkce import derive_challenge
from dirigera.transport import HubEndpoint

AUTHORIZE_URL = "https://192.168.1.10:8443/v1/oauth/authorize"
TOKEN_URL = "https://192.168.1.10:8443/v1/oauth/token"


def make_response(status, payload=None):
    """Build a fake requests.Response."""
    response = MagicMock()
    response.status_code = status
    if payload is None:
        response.json.side_effect = ValueError("No JSON")
        response.text = ""
    else:
        response.json.return_value = payload
        response.text = json.dumps(payload)
    return response


def authorized():
    return make_response(200, {"code": "auth-code"})


def pending():
    return make_response(
        403, {"error": "Button not pressed or presence time stamp timed out."}
    )


def token(value="access-token"):
    return make_response(200, {"access_token": value, "token_type": "Bearer"})


def make_flow(responses, **kwargs):
    session = MagicMock()
    session.request.side_effect = responses
    kwargs.setdefault("sleep", MagicMock())
    flow = PairingFlow(HubEndpoint("192.168.1.10"), session=session, **kwargs)
    return flow, session


def token_calls(session):
    return [c for c in session.request.call_args_list if c.args[0] == "POST"]


def test_pairing_success_after_pending():
    """Two pending answers then a token: paired after exactly three token requests."""
    flow, session = make_flow([authorized(), pending(), pending(), token("T")])

    assert flow.run() == "T"
    assert flow.state is PairingState.Paired
    assert len(token_calls(session)) == 3
    assert flow.redemption_attempts == 3
    assert flow._sleep.call_count == 2
    flow._sleep.assert_called_with(2.0)


def test_pairing_only_challenge_sent_when_authorizing():
    """The verifier is only sent with the token request."""
    flow, session = make_flow([authorized(), token()])
    flow.run()

    authorize_call, token_call = session.request.call_args_list
    assert authorize_call.args == ("GET", AUTHORIZE_URL)
    params = authorize_call.kwargs["params"]
    assert params["code_challenge_method"] == "S256"
    assert params["audience"] == "homesmart.local"
    assert params["response_type"] == "code"

    assert token_call.args == ("POST", TOKEN_URL)
    body = token_call.kwargs["json"]
    verifier = body["code_verifier"]
    assert body["code"] == "auth-code"
    assert body["grant_type"] == "authorization_code"
    assert body["name"] == "localhost"
    assert params["code_challenge"] == derive_challenge(verifier)
    assert verifier not in json.dumps(authorize_call.kwargs)


def test_pairing_rejected_stops_immediately():
    """A rejection on the first token request is terminal."""
    rejected = make_response(400, {"error": "invalid_grant"})
    flow, session = make_flow([authorized(), rejected])

    with pytest.raises(DirigeraPairingRejectedException) as exc_info:
        flow.run()

    assert exc_info.value.status == 400
    assert "invalid_grant" in exc_info.value.body
    assert session.request.call_count == 2
    flow._sleep.assert_not_called()
    assert flow.state is PairingState.Failed
    assert flow.error is exc_info.value


def test_pairing_gives_up_after_max_attempts():
    """A hub that never confirms makes the flow give up within the bounded wait."""
    waited = []
    flow, session = make_flow(
        [authorized()] + [pending() for _ in range(10)],
        max_attempts=10,
        interval=2.0,
        sleep=waited.append,
    )

    with pytest.raises(DirigeraPairingTimeoutException) as exc_info:
        flow.run()

    assert exc_info.value.attempts == 10
    assert len(token_calls(session)) == 10
    assert sum(waited) <= 10 * 2.0
    assert sum(waited) == flow.max_wait
    assert flow.state is PairingState.Failed


def test_pairing_gives_up_in_wall_clock_time():
    """Without an injected sleep the flow still stops after max_attempts x interval."""
    session = MagicMock()
    session.request.side_effect = [authorized()] + [pending() for _ in range(3)]
    flow = PairingFlow(
        HubEndpoint("192.168.1.10"), session=session, max_attempts=3, interval=0.01
    )

    start = time.monotonic()
    with pytest.raises(DirigeraPairingTimeoutException):
        flow.run()
    assert time.monotonic() - start < 1.0


def test_pairing_pending_error_code():
    """An `authorization_pending` error body is also treated as pending."""
    still_pending = make_response(400, {"error": "authorization_pending"})
    flow, session = make_flow([authorized(), still_pending, token("T")])

    assert flow.run() == "T"
    assert len(token_calls(session)) == 2


def test_pairing_cancelled_between_retries():
    """Cancelling while waiting aborts before the next token request."""
    flow, session = make_flow([authorized(), pending(), token()])
    flow._sleep.side_effect = lambda interval: flow.cancel()

    with pytest.raises(DirigeraPairingCancelledException):
        flow.run()

    assert len(token_calls(session)) == 1
    assert flow.state is PairingState.Failed


def test_pairing_cancel_event():
    """A pre-set cancel event stops the flow before any token request."""
    event = threading.Event()
    event.set()
    flow, session = make_flow([authorized(), token()], cancel_event=event)

    with pytest.raises(DirigeraPairingCancelledException):
        flow.run()
    assert token_calls(session) == []


def test_pairing_state_changes():
    """Callers are told about every state transition."""
    states = []
    flow, _ = make_flow([authorized(), pending(), token()], on_state_change=states.append)

    flow.run()

    assert states == [
        PairingState.AwaitingUserConfirmation,
        PairingState.Redeeming,
        PairingState.Paired,
    ]


def test_pairing_flow_is_single_use():
    """A flow can't be run a second time."""
    flow, _ = make_flow([authorized(), token()])
    flow.run()

    with pytest.raises(DirigeraPairingException):
        flow.run()


def test_pairing_flow_not_reusable_after_failure():
    """A failed flow can't be restarted either."""
    flow, _ = make_flow([make_response(500, {"error": "boom"})])
    with pytest.raises(DirigeraPairingRejectedException):
        flow.run()

    with pytest.raises(DirigeraPairingException):
        flow.run()


def test_pairing_authorize_rejected():
    """A failing authorization request never reaches the token endpoint."""
    flow, session = make_flow([make_response(500, {"error": "internal"})])

    with pytest.raises(DirigeraPairingRejectedException):
        flow.run()

    assert token_calls(session) == []
    assert flow.state is PairingState.Failed


def test_pairing_authorize_without_code():
    """An authorization response without a code is a deserialization error."""
    flow, _ = make_flow([make_response(200, {"unexpected": True})])

    with pytest.raises(DirigeraDeserializationException):
        flow.run()


def test_pairing_token_without_access_token():
    """A token response without access_token is a deserialization error."""
    flow, _ = make_flow([authorized(), make_response(200, {"token_type": "Bearer"})])

    with pytest.raises(DirigeraDeserializationException) as exc_info:
        flow.run()
    assert "token_type" in exc_info.value.body


def test_pairing_connection_error():
    """Transport failures end the attempt."""
    flow, _ = make_flow(requests.ConnectionError("refused"))

    with pytest.raises(DirigeraConnectionException):
        flow.run()
    assert flow.state is PairingState.Failed


def test_pairing_request_timeout():
    """A request timeout is reported as a timeout."""
    flow, _ = make_flow([authorized(), requests.Timeout("slow")])

    with pytest.raises(DirigeraTimeoutException):
        flow.run()


def test_pairing_invalid_bounds():
    """Attempts and interval must be sensible."""
    with pytest.raises(ValueError):
        PairingFlow(HubEndpoint("192.168.1.10"), session=MagicMock(), max_attempts=0)
    with pytest.raises(ValueError):
        PairingFlow(HubEndpoint("192.168.1.10"), session=MagicMock(), interval=-1)


def test_pair_convenience():
    """pair() runs a flow for an IP address and leaves a given session open."""
    session = MagicMock()
    session.request.side_effect = [authorized(), token("T")]

    assert pair("192.168.1.10", session=session, sleep=MagicMock()) == "T"
    session.close.assert_not_called()


def test_pairing_random_source_failure(mocker):
    """A broken random source fails the flow like any other error."""
    mocker.patch("dirigera.pkce.secrets.token_urlsafe", side_effect=OSError("no entropy"))
    build_session = mocker.patch("dirigera.pairing.build_sync_session")
    flow = PairingFlow(HubEndpoint("192.168.1.10"), sleep=MagicMock())

    with pytest.raises(DirigeraException) as exc_info:
        flow.run()

    assert flow.state is PairingState.Failed
    assert flow.error is exc_info.value
    build_session.assert_not_called()
    with pytest.raises(DirigeraPairingException):
        flow.run()


def test_pairing_session_built_on_run(mocker):
    """The flow's own session is only created by run() and closed afterwards."""
    session = MagicMock()
    session.request.side_effect = [authorized(), token("T")]
    build_session = mocker.patch(
        "dirigera.pairing.build_sync_session", return_value=session
    )

    flow = PairingFlow(HubEndpoint("192.168.1.10"), sleep=MagicMock())
    build_session.assert_not_called()

    assert flow.run() == "T"
    build_session.assert_called_once()
    session.close.assert_called_once()


def test_pairing_owned_session_closed_on_failure(mocker):
    session = MagicMock()
    session.request.side_effect = [make_response(500, {"error": "internal"})]
    mocker.patch("dirigera.pairing.build_sync_session", return_value=session)

    flow = PairingFlow(HubEndpoint("192.168.1.10"), sleep=MagicMock())
    with pytest.raises(DirigeraPairingRejectedException):
        flow.run()

    session.close.assert_called_once()


def test_pairing_cancel_from_other_thread_interrupts_wait():
    """cancel() from another thread wakes the flow up during a long interval."""
    flow, session = make_flow(
        [authorized(), pending(), token()], interval=30.0, sleep=None
    )
    timer = threading.Timer(0.1, flow.cancel)

    start = time.monotonic()
    timer.start()
    try:
        with pytest.raises(DirigeraPairingCancelledException):
            flow.run()
    finally:
        timer.cancel()

    assert time.monotonic() - start < 5.0
    assert len(token_calls(session)) == 1
    assert flow.state is PairingState.Failed
