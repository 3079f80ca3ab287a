"""Prometheus metrics for forecasts, alerts, agent runs and tool calls"""

from typing import Iterable

from prometheus_client import Counter, Histogram

# Analysis metrics
forecast_counter = Counter(
    "icarus_forecast_total",
    "Forecasts generated",
    ["source"],  # payload | database
)

alert_counter = Counter(
    "icarus_smart_alerts_total",
    "Smart alerts emitted by severity",
    ["severity"],  # critical | high | medium | low
)

# Agent metrics
agent_run_counter = Counter(
    "icarus_agent_runs_total",
    "Agent runs by outcome",
    ["agent", "outcome"],  # respond | need_info | parse_failure | error
)

tool_call_counter = Counter(
    "icarus_tool_calls_total",
    "Agent tool executions",
    ["tool", "outcome"],  # success | failure
)

llm_latency_histogram = Histogram(
    "icarus_llm_latency_seconds",
    "LLM provider response time",
    ["provider"],
    buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 40.0],
)

external_failure_counter = Counter(
    "icarus_external_failures_total",
    "Failed calls to LLM providers and external APIs",
    ["service"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_alerts(severities: Iterable[str]) -> None:
    for severity in severities:
        alert_counter.labels(severity=severity).inc()


def record_tool_call(tool: str, success: bool) -> None:
    tool_call_counter.labels(tool=tool, outcome="success" if success else "failure").inc()
