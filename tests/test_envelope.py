import pytest
from pydantic import ValidationError

from schemas.signaling import SignalEnvelope


def test_join_with_meeting_id():
    envelope = SignalEnvelope.model_validate_json('{"type": "join", "meetingId": "m1", "from": "alice"}')
    assert envelope.is_join
    assert envelope.meeting_id == "m1"
    assert envelope.participant_id == "alice"


@pytest.mark.parametrize("raw", [
    '{"type": "join"}',
    '{"type": "join", "meetingId": ""}',
    '{"type": "join", "meetingId": 42}',
    '{"type": "offer", "meetingId": "m1"}',
    '{"meetingId": "m1"}',
])
def test_not_a_join(raw):
    assert not SignalEnvelope.model_validate_json(raw).is_join


@pytest.mark.parametrize("sender", ['""', "null", "7"])
def test_participant_id_requires_non_empty_string(sender):
    envelope = SignalEnvelope.model_validate_json('{"type": "join", "meetingId": "m1", "from": %s}' % sender)
    assert envelope.participant_id is None


def test_extra_fields_accepted():
    envelope = SignalEnvelope.model_validate_json(
        '{"type": "offer", "meetingId": "m1", "to": "bob", "offer": {"sdp": "v=0"}}'
    )
    assert envelope.type == "offer"
    assert envelope.model_extra == {"to": "bob", "offer": {"sdp": "v=0"}}


@pytest.mark.parametrize("raw", ["", "nope", "[]", "null", "1", '{"type":'])
def test_malformed(raw):
    with pytest.raises(ValidationError):
        SignalEnvelope.model_validate_json(raw)


def test_snake_case_names_are_payload_not_routing():
    envelope = SignalEnvelope.model_validate_json('{"type": "join", "meeting_id": "m1", "sender": "mallory"}')
    assert envelope.meeting_id is None
    assert envelope.participant_id is None
    assert not envelope.is_join
    assert envelope.model_extra == {"meeting_id": "m1", "sender": "mallory"}
