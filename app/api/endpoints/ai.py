from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user, get_ollama_client
from app.core.exceptions import AIServiceException
from app.database.session import get_db
from app.models.user import User
from app.schemas.ai import ChatRequest, ChatResponse, ChatError
from app.services.ai_chat_service import handle_chat_message
from app.services.ollama_service import OllamaClient
from app.utils.logger import ai_logger

router = APIRouter()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={400: {"model": ChatError}, 500: {"model": ChatError}},
)
async def chat(
    chat_in: Optional[ChatRequest] = Body(None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    ollama: OllamaClient = Depends(get_ollama_client),
) -> Any:
    """
    Send a message to the task assistant. Task commands found in the model's
    reply are executed and their outcomes returned; otherwise the reply text is.
    """
    if not chat_in or not chat_in.message or not chat_in.message.strip():
        return _error(status.HTTP_400_BAD_REQUEST, "Message is required")

    try:
        reply = await handle_chat_message(db, current_user, chat_in.message, ollama)
    except AIServiceException as e:
        ai_logger.error(f"Ollama error: {e}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "AI service error")
    except Exception as e:
        ai_logger.error(f"❌ Unexpected error handling chat for user {current_user.id}: {e}", exc_info=True)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "AI service error")

    return {"response": reply}
