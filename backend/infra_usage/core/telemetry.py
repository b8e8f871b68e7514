from __future__ import annotations

import logging
from typing import Any

import sentry_sdk
from fastapi import Request
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.httpx import HttpxIntegration

from infra_usage.core.config import Settings, settings

logger = logging.getLogger(__name__)

# Client libraries that log every outbound request at INFO.
CHATTY_LOGGERS = ("httpx", "httpcore")


def setup_logging(config: Settings = settings) -> None:
    level = getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def setup_sentry(config: Settings = settings) -> None:
    dsn = config.sentry_dsn.get_secret_value() if config.sentry_dsn else None
    if not dsn:
        return

    sentry_sdk.init(
        dsn=dsn,
        environment=config.environment,
        release=f"infra-usage@{config.version}",
        traces_sample_rate=config.sentry_traces_sample_rate,
        integrations=[FastApiIntegration(transaction_style="endpoint"), HttpxIntegration()],
    )


def bind_request_context(request: Request) -> None:
    if not sentry_sdk.get_client().is_active():
        return
    scope = sentry_sdk.get_current_scope()
    scope.set_tag("path", request.url.path)
    scope.set_tag("method", request.method)


def bind_project(project_ref: str) -> None:
    if not sentry_sdk.get_client().is_active():
        return
    sentry_sdk.get_current_scope().set_tag("project", project_ref)


def capture_exception(err: BaseException, context: dict[str, Any] | None = None) -> None:
    if context:
        with sentry_sdk.new_scope() as scope:
            for key, value in context.items():
                scope.set_extra(key, value)
            sentry_sdk.capture_exception(err)
    else:
        sentry_sdk.capture_exception(err)


def log_request(request: Request, status_code: int, duration_ms: float) -> None:
    logger.info(
        "HTTP %s %s -> %s in %.1fms",
        request.method,
        request.url.path,
        status_code,
        duration_ms,
    )
