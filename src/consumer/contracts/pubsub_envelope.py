"""
Pub/Sub push envelope contract.

This is the JSON body Pub/Sub POSTs to a push endpoint:

    {
      "message": {
        "data": "<base64>",
        "messageId": "...",
        "attributes": {"k": "v"}
      },
      "subscription": "projects/.../subscriptions/..."
    }

`message.data` is decoded to raw bytes here; nothing else about the payload is
interpreted at this layer.
"""

from __future__ import annotations

import base64
import binascii
from typing import Any, Dict

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class PushMessage(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    data: bytes = b""
    # Pub/Sub sends both `messageId` and `message_id`
    id: str = Field(validation_alias=AliasChoices("id", "messageId", "message_id"))
    attributes: Dict[str, str] = Field(default_factory=dict)

    @field_validator("data", mode="before")
    @classmethod
    def _decode_data(cls, value: Any) -> bytes:
        if value is None:
            return b""
        if not isinstance(value, str):
            raise ValueError("message.data must be a base64 string")
        try:
            return base64.b64decode(value, validate=True)
        except binascii.Error as exc:
            raise ValueError(f"message.data is not valid base64: {exc}") from exc

    @field_validator("attributes", mode="before")
    @classmethod
    def _default_attributes(cls, value: Any) -> Any:
        return {} if value is None else value


class PushEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: PushMessage
    subscription: str = ""


def parse_push_envelope(body: bytes) -> PushEnvelope:
    """
    Parse a raw request body into a PushEnvelope.

    Raises pydantic.ValidationError for anything that is not a well-formed
    envelope (invalid JSON included).
    """
    return PushEnvelope.model_validate_json(body)
