"""REST API for conversation history management."""

from fastapi import APIRouter, Depends

from chatrelay.api.deps import get_assembler, get_current_user
from chatrelay.services.context import ContextAssembler

router = APIRouter()


@router.get("")
async def list_conversations(
    user_id: str = Depends(get_current_user),
    assembler: ContextAssembler = Depends(get_assembler),
):
    conversations = assembler.list_conversations(user_id)
    return {
        "conversations": [
            {
                "id": c.id,
                "title": c.title,
                "created_at": c.created_at.isoformat(),
                "updated_at": c.updated_at.isoformat(),
            }
            for c in conversations
        ]
    }


@router.get("/{conversation_id}/messages")
async def list_messages(
    conversation_id: str,
    user_id: str = Depends(get_current_user),
    assembler: ContextAssembler = Depends(get_assembler),
):
    messages = assembler.list_history(user_id, conversation_id)
    return {
        "messages": [
            {
                "role": m.role,
                "content": m.content,
                "created_at": m.created_at.isoformat(),
            }
            for m in messages
        ]
    }


@router.delete("/{conversation_id}")
async def delete_conversation(
    conversation_id: str,
    user_id: str = Depends(get_current_user),
    assembler: ContextAssembler = Depends(get_assembler),
):
    assembler.delete_conversation(user_id, conversation_id)
    return {"message": "Conversation deleted successfully"}
