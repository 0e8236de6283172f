import asyncio
import logging
from typing import Optional

from twilio.rest import Client
from twilio.http.http_client import TwilioHttpClient

from ...application.ports.message_sender import MessageSender

logger = logging.getLogger(__name__)


class TwilioMessageSender(MessageSender):
    def __init__(self, account_sid: str, auth_token: str, from_number: str, client: Optional[Client] = None):
        if not from_number:
            raise RuntimeError("Twilio sender phone number not configured")
        self.client = client or Client(
            account_sid,
            auth_token,
            http_client=TwilioHttpClient(timeout=15),
        )
        self.from_number = from_number

    def _send(self, phone: str, message: str) -> str:
        msg = self.client.messages.create(to=phone, from_=self.from_number, body=message)
        return msg.sid

    async def send(self, phone: str, message: str) -> None:
        # the Twilio SDK is blocking
        sid = await asyncio.to_thread(self._send, phone, message)
        logger.info(f"SMS queued with Twilio: {sid}")
