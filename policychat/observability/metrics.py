"""Prometheus metrics for policychat.

Counts remote backend calls, their latency, workflow transitions and
chat turns.
"""

from prometheus_client import Counter, Histogram

REMOTE_CALLS = Counter(
    "policychat_remote_calls_total",
    "Remote backend calls attempted",
    labelnames=["endpoint", "method", "outcome"],
)

REMOTE_CALL_LATENCY = Histogram(
    "policychat_remote_call_latency_seconds",
    "Remote backend call latency in seconds",
    labelnames=["endpoint", "method"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
)

WORKFLOW_TRANSITIONS = Counter(
    "policychat_workflow_transitions_total",
    "Session phase changes",
    labelnames=["from_phase", "to_phase"],
)

STALE_RESULTS = Counter(
    "policychat_stale_results_total",
    "Remote results discarded because the session moved on",
    labelnames=["step"],
)

CHAT_TURNS = Counter(
    "policychat_chat_turns_total",
    "Chat queries sent to the agent",
    labelnames=["outcome"],
)
