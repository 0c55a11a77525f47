"""
Message Routes

GET /messages/conversations - All conversations of the current user
GET /messages/user/{user_id} - Messages exchanged with one user
POST /messages - Send a message
PATCH /messages/{message_id}/read - Mark a received message as read
DELETE /messages/{message_id} - Delete a sent message
"""

from typing import List

from fastapi import APIRouter, Depends

from careerconnect.api.dependencies import get_message_service
from careerconnect.core.auth import Identity, get_current_user
from careerconnect.schemas.schemas import MessageCreate, MessageResponse, StatusResponse
from careerconnect.services.mongo_service import MessageService

router = APIRouter(prefix="/messages", tags=["Messages"])


@router.get("/conversations", response_model=List[List[MessageResponse]])
def get_conversations(
    user: Identity = Depends(get_current_user),
    messages: MessageService = Depends(get_message_service),
):
    """
    Conversations grouped by the other participant.

    Each conversation is oldest-first; the most recently active
    conversation comes first.
    """
    return [
        [MessageResponse.model_validate(msg) for msg in conversation]
        for conversation in messages.conversations(user.id)
    ]


@router.get("/user/{user_id}", response_model=List[MessageResponse])
def get_messages_with_user(
    user_id: str,
    user: Identity = Depends(get_current_user),
    messages: MessageService = Depends(get_message_service),
):
    """Messages between the current user and `user_id`, oldest first."""
    return [MessageResponse.model_validate(msg) for msg in messages.conversation_with(user.id, user_id)]


@router.post("", response_model=MessageResponse, status_code=201)
def send_message(
    data: MessageCreate,
    user: Identity = Depends(get_current_user),
    messages: MessageService = Depends(get_message_service),
):
    return MessageResponse.model_validate(messages.send(user.id, data.receiver_id, data.content))


@router.patch("/{message_id}/read", response_model=MessageResponse)
def mark_message_as_read(
    message_id: str,
    user: Identity = Depends(get_current_user),
    messages: MessageService = Depends(get_message_service),
):
    """Only the receiver can mark a message as read."""
    return MessageResponse.model_validate(messages.mark_read(message_id, user.id))


@router.delete("/{message_id}", response_model=StatusResponse)
def delete_message(
    message_id: str,
    user: Identity = Depends(get_current_user),
    messages: MessageService = Depends(get_message_service),
):
    """Only the sender can delete a message."""
    messages.delete(message_id, user.id)
    return StatusResponse(message="Message deleted successfully")
