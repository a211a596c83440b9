"""Chat and message persistence endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from chatbot.dependencies import get_conversation_service
from chatbot.schemas.chat_schema import (
    ChatResponse,
    CreateChatRequest,
    CreateMessageRequest,
    MessageResponse,
    RenameChatRequest,
)
from chatbot.services.conversation_service import ConversationService

router = APIRouter(prefix="/api/messages", tags=["messages"])

ConversationServiceDep = Annotated[
    ConversationService, Depends(get_conversation_service)
]


# Chat routes are declared first so "/chats/..." never matches "/{user_id}/...".


@router.get("/chats/{user_id}", response_model=list[ChatResponse])
async def list_chats(
    user_id: str, service: ConversationServiceDep
) -> list[ChatResponse]:
    """List a user's chats, most recently updated first."""
    return await service.list_chats(user_id)


@router.post("/chats", response_model=ChatResponse)
async def create_chat(
    body: CreateChatRequest, service: ConversationServiceDep
) -> ChatResponse:
    """Create a new chat."""
    return await service.create_chat(body)


@router.put("/chats/{chat_id}", response_model=ChatResponse)
async def rename_chat(
    chat_id: str, body: RenameChatRequest, service: ConversationServiceDep
) -> ChatResponse:
    """Rename a chat."""
    return await service.rename_chat(chat_id, body.title)


@router.delete("/chats/{chat_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_chat(chat_id: str, service: ConversationServiceDep) -> Response:
    """Delete a chat and all of its messages."""
    await service.delete_chat(chat_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("", response_model=MessageResponse)
async def create_message(
    body: CreateMessageRequest, service: ConversationServiceDep
) -> MessageResponse:
    """Persist a single message."""
    return await service.append_message(body)


@router.get("/{user_id}", response_model=list[MessageResponse])
async def list_messages_without_chat(
    user_id: str, service: ConversationServiceDep
) -> list[MessageResponse]:
    """Without a chat id there is nothing to return."""
    return await service.list_messages(user_id)


@router.get("/{user_id}/{chat_id}", response_model=list[MessageResponse])
async def list_messages(
    user_id: str, chat_id: str, service: ConversationServiceDep
) -> list[MessageResponse]:
    """List a chat's messages in ascending creation order."""
    return await service.list_messages(user_id, chat_id)
