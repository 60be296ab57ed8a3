from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Protocol

from .models import Role


@dataclass
class Chat:
    id: int
    uuid: str
    title: str
    created_at: int  # epoch 毫秒

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Message:
    id: int
    uuid: str
    chat_id: int
    sender_id: Optional[str]
    provider: str
    role: Role
    content: str
    created_at: int  # epoch 毫秒

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ConversationStore(Protocol):
    def create_chat(self, title: str) -> Chat:
        ...

    def get_chat(self, chat_id: int) -> Chat:
        ...

    def list_chats(self) -> List[Chat]:
        ...

    def delete_chat(self, chat_id: int) -> None:
        ...

    def clear_messages(self, chat_id: int) -> None:
        ...

    def create_message(
        self,
        chat_id: int,
        sender_id: Optional[str],
        provider: str,
        role: str,
        content: str,
    ) -> Message:
        ...

    def list_messages(self, chat_id: int) -> List[Message]:
        ...
