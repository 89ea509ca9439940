"""Message schemas for inbound ingestion and stream delivery."""

from pydantic import (
    AliasChoices,
    AwareDatetime,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel

_INSTANT = TypeAdapter(AwareDatetime)


class MessageBase(BaseModel):
    """Fields shared by the inbound candidate and the stored message."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    event: str = Field(..., min_length=1, max_length=255, description="Classification tag, e.g. the sender role.")
    speaker: str = Field(..., validation_alias=AliasChoices("speaker", "var1"))
    text: str | None = Field(None, validation_alias=AliasChoices("text", "var2"))
    audio_ref: str | None = Field(
        None,
        serialization_alias="audioRef",
        validation_alias=AliasChoices("audioRef", "audio_ref", "audioUrl"),
    )
    session_id: str | None = Field(
        None,
        serialization_alias="sessionId",
        validation_alias=AliasChoices("sessionId", "session_id"),
    )


class MessageCreate(MessageBase):
    """Schema for a message posted by the automation backend."""

    timestamp: str | None = Field(None, validation_alias=AliasChoices("timestamp", "ts"))

    @field_validator("timestamp")
    @classmethod
    def _check_iso8601(cls, value: str | None) -> str | None:
        if value is None:
            return None
        # Stored verbatim; parsed only to require a date, a time and an offset.
        try:
            _INSTANT.validate_python(value)
        except ValidationError:
            raise ValueError("timestamp must be an ISO-8601 instant with a UTC offset")
        return value


class Message(MessageBase):
    """A finalized message as held in history and delivered to subscribers."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    timestamp: str


class IncomingMessageResponse(BaseModel):
    """Schema for the ingestion response."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    message_id: str
    message: Message


class MessageListResponse(BaseModel):
    """Schema for the history window."""

    messages: list[Message]
    total: int
