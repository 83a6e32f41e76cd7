"""
HTTP listener for GitHub webhook deliveries.

Responsibilities:
- Verify the delivery signature against the shared secret
- Accept ``pull_request`` events and reject everything else
- Hand each validation to a thread pool and answer immediately

Validations run independently of each other; an exception raised by one
is logged by the dispatcher and never reaches the request handler.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Dict, Mapping, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from vc_changelog.webhooks.github import handle_pull_request_event


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


DEFAULT_PORT = 3000
PULL_REQUEST_EVENT = "pull_request"

EventHandler = Callable[[Dict[str, Any], str], Any]


class SignatureError(Exception):
    """Raised when a webhook delivery's signature does not match the secret."""

    pass


def verify_signature(secret: str, payload: bytes, headers: Mapping[str, str]) -> None:
    """Check the ``X-Hub-Signature-256`` (or legacy ``X-Hub-Signature``) header.

    Nothing is checked when ``secret`` is empty.

    Raises
    ------
    SignatureError
        If the signature is missing, malformed or wrong.
    """
    if not secret:
        return

    signature = headers.get("x-hub-signature-256")
    digest = hashlib.sha256
    if signature is None:
        signature = headers.get("x-hub-signature")
        digest = hashlib.sha1
    if not signature:
        raise SignatureError("missing signature")

    algorithm, _, received = signature.partition("=")
    if algorithm != digest().name or not received:
        raise SignatureError(f"unsupported signature '{signature}'")
    expected = hmac.new(secret.encode("utf-8"), payload, digest).hexdigest()
    if not hmac.compare_digest(expected, received):
        raise SignatureError("payload signature check failed")


class ValidationDispatcher:
    """Runs validations on a thread pool and logs their failures."""

    def __init__(self, max_workers: int = 4) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="pr-validation")

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        future = self._executor.submit(fn, *args)
        future.add_done_callback(self._log_outcome)
        return future

    @staticmethod
    def _log_outcome(future: Future) -> None:
        exc = future.exception()
        if exc is not None:
            logger.error("Pull request validation failed: %s", exc, exc_info=exc)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


def create_app(
    secret: str,
    api_token: str,
    dispatcher: Optional[ValidationDispatcher] = None,
    handler: EventHandler = handle_pull_request_event,
) -> FastAPI:
    """Build the webhook application.

    Parameters
    ----------
    secret : str
        Shared webhook secret used to verify deliveries.
    api_token : str
        GitHub API token passed on to ``handler``.
    dispatcher : ValidationDispatcher, optional
        Executor for the validations. A new one is created if omitted and
        shut down with the application.
    handler : EventHandler
        Called on the dispatcher with the decoded event and ``api_token``.
    """
    owns_dispatcher = dispatcher is None
    dispatcher = dispatcher or ValidationDispatcher()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("changelog webhook server started")
        yield
        if owns_dispatcher:
            dispatcher.shutdown(wait=False)

    app = FastAPI(lifespan=lifespan)

    @app.post("/webhook")
    async def webhook(request: Request):
        payload = await request.body()
        try:
            verify_signature(secret, payload, request.headers)
        except SignatureError as exc:
            return PlainTextResponse(str(exc), status_code=400)

        try:
            event = json.loads(payload)
        except ValueError as exc:
            return PlainTextResponse(f"invalid payload: {exc}", status_code=400)

        if request.headers.get("x-github-event") != PULL_REQUEST_EVENT or not isinstance(event, dict):
            return PlainTextResponse("unable to process event type", status_code=400)

        dispatcher.submit(handler, event, api_token)
        return JSONResponse({})

    return app


def serve(secret: str, api_token: str, host: str = "0.0.0.0", port: int = DEFAULT_PORT) -> None:
    """Run the webhook server until interrupted."""
    logger.info("Starting changelog webhook server on port %d", port)
    uvicorn.run(create_app(secret, api_token), host=host, port=port, log_config=None)
