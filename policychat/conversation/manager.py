"""Conversation manager.

Owns the ordered message history of the active session and enforces that
at most one chat query is outstanding at a time.
"""

from typing import Protocol

from policychat.conversation.models import Message, Role
from policychat.exceptions import TransportError
from policychat.observability.logging import get_logger
from policychat.observability.metrics import CHAT_TURNS

logger = get_logger(__name__)


class QueryBackend(Protocol):
    """The part of the backend client the conversation needs."""

    async def send_query(self, agent_id: str, text: str) -> str: ...


class ConversationManager:
    """Ordered chat history bound to one provisioned agent.

    submit() drops input instead of queueing it when the text is blank,
    a reply is still outstanding, or no agent is bound. A failed query
    never raises; it becomes an assistant message carrying error_reply.
    """

    def __init__(self, backend: QueryBackend, *, error_reply: str) -> None:
        self._backend = backend
        self._error_reply = error_reply
        self._messages: list[Message] = []
        self._agent_id: str | None = None
        self._awaiting_reply = False
        # Bumped by reset() so replies to a discarded conversation are dropped
        self._epoch = 0

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def agent_id(self) -> str | None:
        return self._agent_id

    @property
    def awaiting_reply(self) -> bool:
        return self._awaiting_reply

    def open(self, agent_id: str, greeting: str | None = None) -> None:
        """Bind the conversation to an agent and seed the greeting."""
        self._agent_id = agent_id
        if greeting:
            self._messages.append(Message(role=Role.ASSISTANT, text=greeting))
        logger.info("conversation_opened", agent_id=agent_id)

    def reset(self) -> None:
        """Drop the history and the agent binding."""
        self._epoch += 1
        self._messages.clear()
        self._agent_id = None
        self._awaiting_reply = False
        logger.info("conversation_reset")

    async def submit(self, text: str) -> Message | None:
        """Send a user turn and wait for the assistant turn.

        Returns:
            The appended assistant message, or None when the input was
            dropped or the conversation was reset before the reply came.
        """
        text = text.strip()
        if not text or self._awaiting_reply or self._agent_id is None:
            logger.debug(
                "chat_input_dropped",
                blank=not text,
                awaiting_reply=self._awaiting_reply,
                has_agent=self._agent_id is not None,
            )
            return None

        agent_id = self._agent_id
        epoch = self._epoch
        self._messages.append(Message(role=Role.USER, text=text))
        self._awaiting_reply = True

        try:
            reply = await self._backend.send_query(agent_id, text)
            outcome = "success"
        except TransportError as e:
            logger.warning("chat_query_failed", agent_id=agent_id, error=e.message)
            reply = self._error_reply
            outcome = "error"
        except BaseException:
            # Cancelled or crashed: release the guard so the user can retry
            if epoch == self._epoch:
                self._awaiting_reply = False
            raise

        CHAT_TURNS.labels(outcome=outcome).inc()

        if epoch != self._epoch:
            logger.info("chat_reply_discarded", agent_id=agent_id)
            return None

        message = Message(role=Role.ASSISTANT, text=reply)
        self._messages.append(message)
        self._awaiting_reply = False
        return message
