"""Available model listing. The chat endpoint echoes the chosen id but always calls the configured model."""

from fastapi import APIRouter

from chatrelay.core.config import settings

router = APIRouter()


@router.get("")
async def list_models():
    return {
        "text_models": [{"id": model_id, "name": name} for model_id, name in settings.text_models.items()],
        "default_model": settings.default_model,
    }
