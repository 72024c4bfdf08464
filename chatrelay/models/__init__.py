from chatrelay.models.conversation import ChatMessage, Conversation, Role

__all__ = ["ChatMessage", "Conversation", "Role"]
