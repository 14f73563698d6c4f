"""Diagnostic log of remote backend calls."""

from policychat.audit.log import DiagnosticLog
from policychat.audit.models import ApiCallRecord

__all__ = ["ApiCallRecord", "DiagnosticLog"]
