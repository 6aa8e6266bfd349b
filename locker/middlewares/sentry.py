import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.pymongo import PyMongoIntegration

from locker.core.exceptions import AppError
from locker.utils.logging import redact

UNTRACED_PATHS = ("/health", "/scalar")
FILTERED = "[Filtered]"
SENSITIVE_HEADERS = {"authorization", "cookie", "set-cookie"}
SENSITIVE_FIELDS = {"password", "password_hash"}


def init_sentry(
    dsn: str,
    environment: str = "prod",
    release: str | None = None,
    traces_sample_rate: float = 0.2,
    profiles_sample_rate: float = 0.0,
    send_default_pii: bool = False,
) -> None:
    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        send_default_pii=send_default_pii,
        integrations=[
            FastApiIntegration(),
            PyMongoIntegration(),
            LoggingIntegration(level=None, event_level="ERROR"),
        ],
        traces_sample_rate=traces_sample_rate,
        profiles_sample_rate=profiles_sample_rate,
        before_send=scrub_event,
        before_send_transaction=drop_untraced,
    )


def scrub_event(event, hint):
    """Drops client errors and strips share secrets from whatever is left."""
    exc_info = (hint or {}).get("exc_info")
    if exc_info and isinstance(exc_info[1], AppError) and exc_info[1].status_code < 500:
        return None

    request = event.get("request") or {}
    headers = request.get("headers") or {}
    for key in list(headers):
        if key.lower() in SENSITIVE_HEADERS:
            headers[key] = FILTERED

    body = request.get("data")
    if isinstance(body, dict):
        for key in list(body):
            if key.lower() in SENSITIVE_FIELDS:
                body[key] = FILTERED

    # /shared/{token} is itself a credential
    if request.get("url"):
        request["url"] = redact(request["url"])
    if event.get("transaction"):
        event["transaction"] = redact(str(event["transaction"]))
    return event


def drop_untraced(event, hint=None):
    name = str(event.get("transaction") or "")
    if name.startswith(UNTRACED_PATHS):
        return None
    return event
