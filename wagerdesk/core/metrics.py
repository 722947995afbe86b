"""
Prometheus metrics for the Wager Desk API.

HTTP request metrics come from prometheus-fastapi-instrumentator (mounted in
`wagerdesk.main`); the counters below cover domain events.
"""
from prometheus_client import Counter, Histogram

# Outbound chat-completion calls
llm_requests_total = Counter(
    "wagerdesk_llm_requests_total",
    "Chat-completion requests by operation and outcome",
    ["operation", "outcome"]
)

llm_request_duration_seconds = Histogram(
    "wagerdesk_llm_request_duration_seconds",
    "Chat-completion round-trip latency in seconds",
    ["operation"]
)

recommendation_fallbacks_total = Counter(
    "wagerdesk_recommendation_fallbacks_total",
    "Script executions answered with the placeholder recommendation",
    ["reason"]
)

# Pick ledger
picks_logged_total = Counter(
    "wagerdesk_picks_logged_total",
    "Picks created",
    ["sport"]
)

picks_settled_total = Counter(
    "wagerdesk_picks_settled_total",
    "Pick settlements that appended a bankroll history row",
    ["result"]
)

# Upload ingestion
upload_rows_total = Counter(
    "wagerdesk_upload_rows_total",
    "Schedule upload rows by outcome",
    ["outcome"]
)
