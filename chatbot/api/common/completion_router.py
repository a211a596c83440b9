"""Completion proxy endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends

from chatbot.dependencies import get_completion_service
from chatbot.schemas.completion_schema import (
    CompletionChoice,
    CompletionMessage,
    CompletionRequest,
    CompletionResponse,
)
from chatbot.services.completion_service import CompletionService

router = APIRouter(prefix="/api/chat", tags=["chat"])

CompletionServiceDep = Annotated[CompletionService, Depends(get_completion_service)]


@router.post("", response_model=CompletionResponse)
async def complete(
    body: CompletionRequest, service: CompletionServiceDep
) -> CompletionResponse:
    """Forward the history to the provider and return its cleaned reply.

    The body mirrors the provider's own response shape so clients can talk to
    either interchangeably.
    """
    result = await service.complete(body.messages, max_tokens=body.max_tokens)
    return CompletionResponse(
        id=result.id,
        choices=[
            CompletionChoice(
                message=CompletionMessage(role="assistant", content=result.content)
            )
        ],
        usage=result.usage,
    )
