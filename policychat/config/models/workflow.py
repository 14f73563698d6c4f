"""Upload, provisioning and chat workflow configuration."""

from pydantic import BaseModel, Field

DEFAULT_INSTRUCTIONS = """You are an HR Policy Assistant for this company. You help employees understand company policies by providing direct, concise answers based on the uploaded HR policy documents.

Key guidelines:
- Give clear, specific answers about expense policies, meal allowances, travel rules, receipt requirements, etc.
- Be helpful and professional
- If you're unsure about something, direct them to contact HR directly
- Keep responses concise but complete
- Reference specific policy sections when relevant

You have access to the company's complete HR policy documentation to answer questions accurately."""

DEFAULT_GREETING = (
    "Hi! I'm your HR Policy Assistant. I can help you with questions about "
    "expense policies, meal allowances, travel rules, and other HR policies. "
    "What would you like to know?"
)

DEFAULT_CHAT_ERROR_REPLY = (
    "Sorry, I encountered an error. Please try asking your question again."
)


class WorkflowConfig(BaseModel):
    """Behaviour of the upload -> provisioning -> chat workflow."""

    accepted_mime_type: str = Field(
        default="application/pdf",
        description="The single document type accepted for upload",
    )
    object_name_prefix: str = Field(
        default="hr_policies_",
        description="Prefix of generated stored object names",
    )
    agent_name: str = Field(default="HR Policy Assistant", description="Agent display name")
    agent_instructions: str = Field(
        default=DEFAULT_INSTRUCTIONS,
        description="System instructions sent when provisioning the agent",
    )
    greeting: str = Field(
        default=DEFAULT_GREETING,
        description="Scripted assistant message seeded when chat opens",
    )
    chat_error_reply: str = Field(
        default=DEFAULT_CHAT_ERROR_REPLY,
        description="Assistant message shown when a chat query fails",
    )
    ready_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Cosmetic pause between 'Setup complete!' and the chat phase",
    )
