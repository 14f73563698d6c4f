"""Session workflow: upload -> provisioning -> chat state machine."""

from policychat.workflow.controller import SessionController
from policychat.workflow.models import Document, Phase, Session

__all__ = ["Document", "Phase", "Session", "SessionController"]
