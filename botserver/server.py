"""HTTPS bot server wired to the LINE Messaging API."""

import inspect
import time
import uuid
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional, Union

import uvicorn
from fastapi import Depends, FastAPI, Header, HTTPException, Request, status
from fastapi.responses import PlainTextResponse
from linebot.v3 import WebhookParser
from linebot.v3.exceptions import InvalidSignatureError
from linebot.v3.messaging import ApiClient, Configuration, MessagingApi

from botserver.config import config, get_env_options
from botserver.logging_utils import log_error, log_event, log_request
from botserver.metrics import MetricsCollector
from botserver.models import BotServerOptions, WebhookResponse
from botserver.validation import validate_options

WebhookCallback = Callable[[List[Any]], Union[None, Awaitable[None]]]


def line_middleware(
    parser: WebhookParser, metrics: Optional[MetricsCollector] = None
) -> Callable[..., Awaitable[List[Any]]]:
    """
    Build a dependency that verifies ``X-Line-Signature`` and parses events.

    Requests without a signature, or with one that does not match the
    channel secret, are rejected with 401. Signed bodies that are not a
    webhook payload are rejected with 400.
    """

    async def verify_signature(
        request: Request,
        x_line_signature: Optional[str] = Header(None),
    ) -> List[Any]:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        path = request.url.path
        body = (await request.body()).decode("utf-8", errors="replace")

        if not x_line_signature:
            if metrics is not None:
                metrics.increment_webhook_request(path, "invalid_signature")
            log_error("Missing X-Line-Signature header", request_id=request_id, path=path)
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="invalid signature",
            )

        try:
            return parser.parse(body, x_line_signature)
        except InvalidSignatureError:
            if metrics is not None:
                metrics.increment_webhook_request(path, "invalid_signature")
            log_error("Invalid X-Line-Signature", request_id=request_id, path=path)
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="invalid signature",
            )
        except (ValueError, KeyError):
            if metrics is not None:
                metrics.increment_webhook_request(path, "invalid_body")
            log_error("Malformed webhook body", request_id=request_id, path=path)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="invalid body",
            )

    return verify_signature


class BotServer:
    """
    LINE bot server listening over HTTPS.

    Options are validated before anything else is built, so a failing
    construction leaves no listener or client behind.
    """

    def __init__(
        self,
        options: Optional[BotServerOptions] = None,
        env_path: Optional[Union[str, Path]] = None,
    ):
        if options is None:
            options = get_env_options(env_path)

        self.options = validate_options(options)
        self.metrics = MetricsCollector()

        self.app = self._create_app()
        self.https = uvicorn.Server(
            uvicorn.Config(
                self.app,
                host=config.HOST,
                port=self.options.port,
                ssl_keyfile=self.options.key,
                ssl_certfile=self.options.cert,
                log_config=None,
            )
        )

        self.client_config = Configuration(
            access_token=self.options.channel_access_token
        )
        self.client = MessagingApi(ApiClient(self.client_config))
        self.parser = WebhookParser(self.options.channel_secret)

    def _create_app(self) -> FastAPI:
        app = FastAPI(title="LINE Bot Server", version="1.0.0")
        metrics = self.metrics

        @app.middleware("http")
        async def logging_middleware(request: Request, call_next):
            """Log and count all HTTP requests."""
            request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
            start_time = time.time()

            response = await call_next(request)

            latency_ms = (time.time() - start_time) * 1000
            metrics.increment_http_request(
                request.method, request.url.path, response.status_code
            )
            log_request(
                method=request.method,
                path=request.url.path,
                status=response.status_code,
                latency_ms=latency_ms,
                request_id=request_id,
            )
            return response

        @app.get("/health/live", status_code=200)
        async def health_live() -> dict:
            """Liveness probe. Always returns 200 when the server is running."""
            return {"status": "alive"}

        @app.get("/metrics")
        async def metrics_endpoint() -> PlainTextResponse:
            """Prometheus metrics exposition format."""
            return PlainTextResponse(metrics.render_prometheus())

        return app

    def set_webhook(self, path: str, callback: WebhookCallback) -> None:
        """
        Register a POST webhook at ``path``.

        The route runs the signature middleware, then hands the parsed
        events to ``callback``. Coroutine callbacks are awaited.
        """
        middleware = line_middleware(self.parser, self.metrics)
        metrics = self.metrics

        async def handle_webhook(
            events: List[Any] = Depends(middleware),
        ) -> WebhookResponse:
            result = callback(events)
            if inspect.isawaitable(result):
                await result
            metrics.increment_webhook_request(path, "ok")
            return WebhookResponse(status="ok")

        self.app.add_api_route(
            path,
            handle_webhook,
            methods=["POST"],
            response_model=WebhookResponse,
        )
        log_event("Webhook registered", path=path)

    def start(self) -> None:
        """Serve HTTPS on the configured port until interrupted."""
        log_event("Starting bot server", port=self.options.port)
        self.https.run()

    async def serve(self) -> None:
        """Serve HTTPS from an already running event loop."""
        log_event("Starting bot server", port=self.options.port)
        await self.https.serve()
