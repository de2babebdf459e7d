"""Ordered chat history for one oracle session.

All operations are synchronous and total: acting on an unknown id is a
no-op rather than an error.
"""

from __future__ import annotations

import time
import uuid
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "assistant", "system"]


def new_message_id() -> str:
    return str(uuid.uuid4())


class ChatMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_message_id)
    role: Role
    content: str = ""
    component_name: Optional[str] = Field(None, alias="componentName")
    component_data: Optional[Dict[str, Any]] = Field(None, alias="componentData")
    timestamp: float = Field(default_factory=time.time)


class ChatStore:
    def __init__(self) -> None:
        self._messages: List[ChatMessage] = []

    @property
    def messages(self) -> List[ChatMessage]:
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def _index(self, message_id: str) -> int:
        for i, m in enumerate(self._messages):
            if m.id == message_id:
                return i
        return -1

    def get(self, message_id: str) -> Optional[ChatMessage]:
        i = self._index(message_id)
        return self._messages[i] if i != -1 else None

    def append(self, message: ChatMessage) -> ChatMessage:
        self._messages.append(message)
        return message

    def clear(self) -> None:
        self._messages = []

    def update_by_id(self, message_id: str, **fields: Any) -> None:
        i = self._index(message_id)
        if i != -1:
            self._messages[i] = self._messages[i].model_copy(update=fields)

    def replace_by_id(self, message_id: str, message: ChatMessage) -> None:
        i = self._index(message_id)
        if i != -1:
            self._messages[i] = message
