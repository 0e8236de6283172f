import logging

from ...application.ports.message_sender import MessageSender


class LogMessageSender(MessageSender):
    """Development sender: writes the message to the log instead of an SMS gateway."""

    def __init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    async def send(self, phone: str, message: str) -> None:
        self._logger.warning(f"SMS to {phone[:4]}***: {message}")
