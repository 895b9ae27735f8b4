from domain.webhook.message import InboundMessage
from domain.webhook.types import MessageType


def envelope(messages=None, statuses=None, display_phone_number="15550001111"):
    value = {
        "messaging_product": "whatsapp",
        "metadata": {"display_phone_number": display_phone_number, "phone_number_id": "106540352242922"},
        "contacts": [{"profile": {"name": "Asha"}, "wa_id": "919876543210"}],
    }
    if messages is not None:
        value["messages"] = messages
    if statuses is not None:
        value["statuses"] = statuses
    return {
        "object": "whatsapp_business_account",
        "entry": [{"id": "WABA_ID", "changes": [{"field": "messages", "value": value}]}],
    }


def test_status_only_envelope_has_no_messages():
    data = envelope(statuses=[{"id": "wamid.1", "status": "delivered"}])

    assert InboundMessage.parse_webhook(data) == []


def test_empty_payload_has_no_messages():
    assert InboundMessage.parse_webhook({}) == []


def test_text_message_is_parsed():
    data = envelope(messages=[{
        "from": "919876543210",
        "id": "wamid.abc",
        "timestamp": "1760880000",
        "type": "text",
        "text": {"body": "hello"},
    }])

    [msg] = InboundMessage.parse_webhook(data)

    assert msg.type == MessageType.TEXT
    assert msg.text == "hello"
    assert msg.from_number == "919876543210"
    assert msg.timestamp == 1760880000
    assert msg.profile_name == "Asha"
    assert msg.phone_number_id == "106540352242922"
    assert not msg.is_self_echo


def test_template_quick_reply_becomes_button():
    data = envelope(messages=[{
        "from": "919876543210",
        "id": "wamid.btn",
        "timestamp": "1760880000",
        "type": "button",
        "button": {"payload": "Others", "text": "Others"},
    }])

    [msg] = InboundMessage.parse_webhook(data)

    assert msg.type == MessageType.BUTTON
    assert msg.button_payload == "Others"


def test_interactive_button_reply_becomes_button():
    data = envelope(messages=[{
        "from": "919876543210",
        "id": "wamid.int",
        "timestamp": "1760880000",
        "type": "interactive",
        "interactive": {"type": "button_reply", "button_reply": {"id": "Yes", "title": "Yes"}},
    }])

    [msg] = InboundMessage.parse_webhook(data)

    assert msg.type == MessageType.BUTTON
    assert msg.button_payload == "Yes"


def test_image_caption_is_trimmed():
    data = envelope(messages=[{
        "from": "919876543210",
        "id": "wamid.img",
        "timestamp": "1760880000",
        "type": "image",
        "image": {"id": "MEDIA_ID", "mime_type": "image/jpeg", "sha256": "abc", "caption": "  leaking pipe \n"},
    }])

    [msg] = InboundMessage.parse_webhook(data)

    assert msg.type == MessageType.IMAGE
    assert msg.media.id == "MEDIA_ID"
    assert msg.media.caption == "leaking pipe"


def test_blank_caption_becomes_none():
    data = envelope(messages=[{
        "from": "919876543210", "id": "wamid.img", "timestamp": "1",
        "type": "image", "image": {"id": "MEDIA_ID", "caption": "   "},
    }])

    [msg] = InboundMessage.parse_webhook(data)

    assert msg.media.caption is None


def test_unknown_type_is_unsupported():
    data = envelope(messages=[{
        "from": "919876543210", "id": "wamid.x", "timestamp": "1", "type": "ephemeral",
    }])

    [msg] = InboundMessage.parse_webhook(data)

    assert msg.type == MessageType.UNKNOWN
    assert not msg.type.is_supported


def test_message_from_business_number_is_self_echo():
    data = envelope(messages=[{
        "from": "15550001111", "id": "wamid.echo", "timestamp": "1",
        "type": "text", "text": {"body": "Greetings"},
    }], display_phone_number="+1 555 000 1111")

    [msg] = InboundMessage.parse_webhook(data)

    assert msg.is_self_echo


def test_all_messages_are_returned_in_order():
    data = envelope(messages=[
        {"from": "919876543210", "id": "wamid.1", "timestamp": "1", "type": "text", "text": {"body": "one"}},
        {"from": "919876543210", "id": "wamid.2", "timestamp": "2", "type": "text", "text": {"body": "two"}},
    ])

    messages = InboundMessage.parse_webhook(data)

    assert [m.text for m in messages] == ["one", "two"]


def test_phone_number_keeps_only_digits():
    msg = InboundMessage(message_id="wamid.1", from_number="+91 98765-43210", timestamp=0, type=MessageType.TEXT)

    assert msg.from_number == "919876543210"
