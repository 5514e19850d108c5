"""Prometheus metrics collection and exposition."""

from typing import Dict, Tuple


class MetricsCollector:
    """Collect and expose Prometheus metrics."""

    def __init__(self):
        # {(method, path, status): count}
        self.http_requests_total: Dict[Tuple[str, str, int], int] = {}
        # {(path, result): count}
        self.webhook_requests_total: Dict[Tuple[str, str], int] = {}

    def increment_http_request(self, method: str, path: str, status: int) -> None:
        """Increment HTTP request counter."""
        key = (method, path, status)
        self.http_requests_total[key] = self.http_requests_total.get(key, 0) + 1

    def increment_webhook_request(self, path: str, result: str) -> None:
        """Increment webhook counter for a webhook path and outcome."""
        key = (path, result)
        self.webhook_requests_total[key] = self.webhook_requests_total.get(key, 0) + 1

    def render_prometheus(self) -> str:
        """Render metrics in Prometheus text exposition format."""
        lines = [
            "# HELP http_requests_total Total HTTP requests by method, path, and status",
            "# TYPE http_requests_total counter",
        ]
        for (method, path, status), count in sorted(self.http_requests_total.items()):
            lines.append(
                f'http_requests_total{{method="{method}",path="{path}",status="{status}"}} {count}'
            )

        lines.append("# HELP webhook_requests_total Webhook requests by path and result")
        lines.append("# TYPE webhook_requests_total counter")
        for (path, result), count in sorted(self.webhook_requests_total.items()):
            lines.append(
                f'webhook_requests_total{{path="{path}",result="{result}"}} {count}'
            )

        return "\n".join(lines) + "\n"
