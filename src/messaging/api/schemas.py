"""Pydantic request/response schemas for the Messaging API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from identity.api.schemas import public_role

# --- Request Schemas ---


class SendMessageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    recipient_id: str = Field(..., min_length=1, alias="recipientId")
    content: str = Field(..., min_length=1, max_length=1000)


class StartConversationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    recipient_id: str = Field(..., min_length=1, alias="recipientId")
    initial_message: str | None = Field(None, max_length=1000, alias="initialMessage")


# --- Response Schemas ---


class ParticipantResponse(BaseModel):
    id: str
    name: str | None = None
    user_type: str | None = None
    phone: str | None = None

    @classmethod
    def for_account(cls, account_id, accounts) -> ParticipantResponse:
        account = accounts.get(account_id)
        if account is None:
            return cls(id=account_id)
        return cls(id=account.id, name=account.full_name, user_type=public_role(account.role), phone=account.phone)


class MessageResponse(BaseModel):
    id: str
    conversation_id: str
    sender: ParticipantResponse
    recipient: str
    content: str
    timestamp: datetime
    read: bool


class ConversationResponse(BaseModel):
    id: str
    other_user: ParticipantResponse
    last_message: str
    timestamp: datetime
    unread: bool
    message_count: int


class ConversationCreatedResponse(BaseModel):
    conversation_id: str
    message: str = "Conversation created successfully"


class UnreadCountResponse(BaseModel):
    unread_count: int


class StatusResponse(BaseModel):
    status: str = "ok"
    message: str | None = None
