import json
import logging

import pytest

from authkit.infrastructure.audit.std_logger import StdAuditLogger, hash_phone_number
from authkit.infrastructure.sms.log_sender import LogMessageSender
from authkit.infrastructure.sms.twilio_sender import TwilioMessageSender


class FakeMessages:
    def __init__(self):
        self.created = []

    def create(self, to, from_, body):
        self.created.append({"to": to, "from_": from_, "body": body})
        return type("M", (), {"sid": "SM123"})


class FakeTwilioClient:
    def __init__(self):
        self.messages = FakeMessages()


@pytest.mark.asyncio
async def test_twilio_sender_creates_message():
    client = FakeTwilioClient()
    sender = TwilioMessageSender("AC1", "token", "+15550000000", client=client)
    await sender.send("+15551234567", "Your OTP is 123456")
    assert client.messages.created == [
        {"to": "+15551234567", "from_": "+15550000000", "body": "Your OTP is 123456"}
    ]


def test_twilio_sender_requires_from_number():
    with pytest.raises(RuntimeError):
        TwilioMessageSender("AC1", "token", "", client=FakeTwilioClient())


@pytest.mark.asyncio
async def test_log_sender_logs_message(caplog):
    with caplog.at_level(logging.WARNING):
        await LogMessageSender().send("+15551234567", "Your OTP is 123456")
    assert "Your OTP is 123456" in caplog.text
    assert "+15551234567" not in caplog.text


def test_audit_logger_hashes_phone(caplog):
    with caplog.at_level(logging.INFO):
        StdAuditLogger().log("otp_sent", "+15551234567", ip_address="10.0.0.1")
    line = caplog.records[-1].getMessage()
    entry = json.loads(line.split("AUDIT: ", 1)[1])
    assert entry["action"] == "otp_sent"
    assert entry["phone_hash"] == hash_phone_number("+15551234567")
    assert "+15551234567" not in line
