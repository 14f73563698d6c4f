"""Dependency injection for API routes.

The controller is created once per process and reused; tests override
get_controller or call reset_dependencies between cases.
"""

from typing import Annotated

from fastapi import Depends

from policychat.config import Settings
from policychat.config import get_settings as _load_settings
from policychat.observability.logging import get_logger
from policychat.workflow import SessionController

logger = get_logger(__name__)

_controller: SessionController | None = None


def get_settings() -> Settings:
    """Get application settings."""
    return _load_settings()


def get_controller() -> SessionController:
    """Get the controller for the single active session.

    Created on first access from the current settings.
    """
    global _controller
    if _controller is None:
        settings = get_settings()
        _controller = SessionController.from_settings(settings)
        logger.info("session_controller_created", backend=settings.backend.base_url)
    return _controller


SettingsDep = Annotated[Settings, Depends(get_settings)]
ControllerDep = Annotated[SessionController, Depends(get_controller)]


async def reset_dependencies() -> None:
    """Close and forget the cached controller and settings."""
    global _controller

    if _controller is not None:
        await _controller.close()
        _controller = None

    _load_settings.cache_clear()
