from typing import Protocol


class MessageSender(Protocol):
    async def send(self, phone: str, message: str) -> None:
        ...
