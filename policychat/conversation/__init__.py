"""Chat history and single in-flight query handling."""

from policychat.conversation.manager import ConversationManager, QueryBackend
from policychat.conversation.models import Message, Role

__all__ = ["ConversationManager", "Message", "QueryBackend", "Role"]
