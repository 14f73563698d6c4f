"""Configuration model exports.

    from policychat.config.models import BackendConfig, WorkflowConfig
"""

from policychat.config.models.api import APIConfig
from policychat.config.models.backend import BackendConfig
from policychat.config.models.observability import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
)
from policychat.config.models.workflow import WorkflowConfig

__all__ = [
    "APIConfig",
    "BackendConfig",
    "LoggingConfig",
    "MetricsConfig",
    "ObservabilityConfig",
    "WorkflowConfig",
]
