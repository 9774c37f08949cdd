"""FastAPI endpoints for the Messaging sidecar."""

from fastapi import APIRouter, Depends, Request

from identity.api.dependencies import current_principal
from identity.auth.tokens import Principal
from messaging.api.schemas import (
    ConversationCreatedResponse,
    ConversationResponse,
    MessageResponse,
    ParticipantResponse,
    SendMessageRequest,
    StartConversationRequest,
    StatusResponse,
    UnreadCountResponse,
)

router = APIRouter(prefix="/messages", tags=["messages"])


def _render_messages(service, messages) -> list[MessageResponse]:
    accounts = service.participants({m.sender_id for m in messages})
    return [
        MessageResponse(
            id=m.id,
            conversation_id=m.conversation_id,
            sender=ParticipantResponse.for_account(m.sender_id, accounts),
            recipient=m.recipient_id,
            content=m.content,
            timestamp=m.timestamp,
            read=m.read,
        )
        for m in messages
    ]


@router.post("", status_code=201, response_model=MessageResponse)
def send_message(
    body: SendMessageRequest,
    request: Request,
    principal: Principal = Depends(current_principal),
) -> MessageResponse:
    service = request.app.state.services.messaging
    message = service.send_message(principal, body.recipient_id, body.content)
    return _render_messages(service, [message])[0]


@router.post("/conversations", status_code=201, response_model=ConversationCreatedResponse)
def start_conversation(
    body: StartConversationRequest,
    request: Request,
    principal: Principal = Depends(current_principal),
) -> ConversationCreatedResponse:
    conversation = request.app.state.services.messaging.start_conversation(
        principal, body.recipient_id, body.initial_message
    )
    return ConversationCreatedResponse(conversation_id=conversation.id)


@router.get("/conversations", response_model=list[ConversationResponse])
def list_conversations(request: Request, principal: Principal = Depends(current_principal)):
    service = request.app.state.services.messaging
    views = service.list_conversations(principal)
    accounts = service.participants({v.other_participant_id for v in views})
    return [
        ConversationResponse(
            id=v.id,
            other_user=ParticipantResponse.for_account(v.other_participant_id, accounts),
            last_message=v.last_message,
            timestamp=v.timestamp,
            unread=v.unread,
            message_count=v.unread_count,
        )
        for v in views
    ]


@router.get("/unread/count", response_model=UnreadCountResponse)
def unread_count(request: Request, principal: Principal = Depends(current_principal)) -> UnreadCountResponse:
    return UnreadCountResponse(unread_count=request.app.state.services.messaging.unread_count(principal))


@router.get("/{conversation_id}", response_model=list[MessageResponse])
def get_messages(conversation_id: str, request: Request, principal: Principal = Depends(current_principal)):
    service = request.app.state.services.messaging
    return _render_messages(service, service.get_messages(principal, conversation_id))


@router.put("/{conversation_id}/read", response_model=StatusResponse)
def mark_read(conversation_id: str, request: Request, principal: Principal = Depends(current_principal)):
    request.app.state.services.messaging.mark_read(principal, conversation_id)
    return StatusResponse(message="Conversation marked as read")


@router.delete("/{conversation_id}", response_model=StatusResponse)
def delete_conversation(conversation_id: str, request: Request, principal: Principal = Depends(current_principal)):
    request.app.state.services.messaging.delete_conversation(principal, conversation_id)
    return StatusResponse(message="Conversation deleted successfully")
