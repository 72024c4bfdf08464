import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from chatrelay.api.deps import get_assembler, get_current_user
from chatrelay.core.config import settings
from chatrelay.core.errors import ValidationError
from chatrelay.services.context import ContextAssembler

router = APIRouter()
logger = logging.getLogger(__name__)


class ChatRequest(BaseModel):
    prompt: str | None = None
    conversation_id: str | None = None
    model_name: str | None = None


@router.post("")
async def chat(
    body: ChatRequest,
    user_id: str = Depends(get_current_user),
    assembler: ContextAssembler = Depends(get_assembler),
):
    if not body.prompt:
        raise ValidationError()

    logger.info(f"Chat request from user {user_id}: {body.prompt[:50]}...")

    result = await assembler.handle_turn(user_id, body.prompt, body.conversation_id)
    return {
        "content": result.reply_text,
        "conversation_id": result.conversation_id,
        "model_used": body.model_name or settings.default_model,
    }
