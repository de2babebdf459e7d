"""Response events exchanged between a responder and the chat layer.

A responder invocation yields, in order: any number of `text` and
`component` events, then at most one terminal event (`done`, or `error`
for backends that report failures in-band). Field names serialise in
camelCase (`fullText`, `componentName`) to match the browser client.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, AsyncIterator, Dict, Literal, Optional, Protocol, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class _Event(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class TextEvent(_Event):
    type: Literal["text"] = "text"
    chunk: str
    full_text: str = Field(..., alias="fullText")


class ComponentEvent(_Event):
    type: Literal["component"] = "component"
    component_name: str = Field(..., alias="componentName")
    data: Dict[str, Any] = Field(default_factory=dict)


class DoneEvent(_Event):
    type: Literal["done"] = "done"
    full_text: str = Field(..., alias="fullText")


class ErrorEvent(_Event):
    type: Literal["error"] = "error"
    message: str
    code: Optional[str] = None


ResponseEvent = Annotated[
    Union[TextEvent, ComponentEvent, DoneEvent, ErrorEvent],
    Field(discriminator="type"),
]

_event_adapter: TypeAdapter = TypeAdapter(ResponseEvent)


def parse_event(payload: Dict[str, Any]) -> ResponseEvent:
    return _event_adapter.validate_python(payload)


def event_payload(event: ResponseEvent) -> Dict[str, Any]:
    return event.model_dump(by_alias=True, exclude_none=True)


def to_sse(event: ResponseEvent) -> str:
    return f"data: {json.dumps(event_payload(event), ensure_ascii=False)}\n\n"


def is_terminal(event: ResponseEvent) -> bool:
    return event.type in ("done", "error")


class Responder(Protocol):
    def stream_response(self, user_message: str) -> AsyncIterator[ResponseEvent]:
        ...

    async def send_message(self, user_message: str) -> str:
        ...


async def collect_text(events: AsyncIterator[ResponseEvent]) -> str:
    """Concatenate text chunks of a stream (non-streaming convenience)."""
    full_text = ""
    async for event in events:
        if isinstance(event, TextEvent):
            full_text += event.chunk
    return full_text
