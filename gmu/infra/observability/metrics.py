from prometheus_client import Counter, Histogram

# 标签保持低基数：只用操作名与结果，不带 bucket/key
OPERATIONS = Counter(
    "storage_operations_total",
    "Total object storage operations",
    ["operation", "status"],
)

LATENCY = Histogram(
    "storage_operation_duration_seconds",
    "Object storage operation latency in seconds",
    ["operation"],
)


def record_operation(operation: str, status: str, elapsed: float) -> None:
    OPERATIONS.labels(operation, status).inc()
    LATENCY.labels(operation).observe(elapsed)
