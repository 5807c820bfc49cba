import pytest
from cryptography.exceptions import InvalidTag

from relaydrop.clients.envelope_crypto import open_envelope, plain_envelope, seal_text
from relaydrop.clients.relay_client import RelayClient, RelayClientError, SessionExpired
from relaydrop.core.envelope import EncryptedEnvelope, validate_envelope


@pytest.fixture
def relay(client):
    return RelayClient("http://testserver", session=client)


def test_sealed_envelope_passes_validation():
    envelope = validate_envelope(seal_text("top secret", "1234", iterations=1000))
    assert isinstance(envelope, EncryptedEnvelope)


def test_seal_and_open():
    sealed = seal_text("top secret", "1234", iterations=1000)
    assert open_envelope(sealed, "1234") == "top secret"
    with pytest.raises(InvalidTag):
        open_envelope(sealed, "9999")


def test_open_plain_needs_no_pin():
    assert open_envelope(plain_envelope("hi")) == "hi"


def test_open_encrypted_without_pin():
    with pytest.raises(ValueError):
        open_envelope(seal_text("x", "1", iterations=1000))


def test_end_to_end_with_pin(relay):
    session = relay.create_session()
    relay.send(session["short_code"], seal_text("over the wire", "4321", iterations=1000))
    message = relay.receive(session["token"])
    assert open_envelope(message, "4321") == "over the wire"
    assert relay.receive(session["token"]) is None


def test_send_error_is_raised(relay):
    with pytest.raises(RelayClientError) as exc_info:
        relay.send("ABCDEFGH", plain_envelope("x"))
    assert exc_info.value.status_code == 404
    assert exc_info.value.code == "unknown_identifier"


def test_wait_for_message_backs_off(relay, monkeypatch):
    session = relay.create_session()
    sleeps = []
    responses = iter([None, None, None, plain_envelope("late")])
    monkeypatch.setattr(relay, "receive", lambda identifier: next(responses))

    message = relay.wait_for_message(session["token"], 1800, sleep=sleeps.append, clock=lambda: 0.0)

    assert message["text"] == "late"
    assert sleeps == pytest.approx([1.8, 2.88, 4.608])


def test_wait_for_message_gives_up_after_expiry(relay):
    session = relay.create_session()
    now = [0.0]

    def sleep(seconds):
        now[0] += seconds

    with pytest.raises(SessionExpired):
        relay.wait_for_message(session["token"], 5, sleep=sleep, clock=lambda: now[0])
