# coding: utf-8
"""
Sentry error monitoring for Saratov Quest API

Only server-side failures are reported: domain errors with a 4xx status
(bad input, wrong owner, duplicate completion) are expected traffic.
"""
import sentry_sdk
from sentry_sdk.integrations.asyncio import AsyncioIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from loguru import logger

from config.config import SENTRY_DSN, ENVIRONMENT

FILTERED = '[Filtered]'
SENSITIVE_BODY_FIELDS = ('password', 'token')


def init_sentry() -> None:
    """
    Initialize Sentry SDK (no-op without SENTRY_DSN)
    """
    if not SENTRY_DSN:
        logger.warning("SENTRY_DSN not configured - error monitoring disabled")
        return

    try:
        sentry_sdk.init(
            dsn=SENTRY_DSN,
            environment=ENVIRONMENT,
            integrations=[
                AsyncioIntegration(),
                SqlalchemyIntegration(),
            ],
            traces_sample_rate=0.1 if ENVIRONMENT == "production" else 1.0,
            attach_stacktrace=True,
            send_default_pii=False,
            max_breadcrumbs=50,
            before_send=before_send_hook,
        )

        logger.info(f"Sentry initialized (environment: {ENVIRONMENT})")

    except Exception as e:
        logger.error(f"Failed to initialize Sentry: {e}")


def before_send_hook(event, hint):
    """
    Drop client errors and interrupts, mask credentials
    """
    if 'exc_info' in hint:
        _, exc_value, _ = hint['exc_info']

        if isinstance(exc_value, KeyboardInterrupt):
            return None

        status_code = getattr(exc_value, 'status_code', None)
        if isinstance(status_code, int) and status_code < 500:
            return None

    request = event.get('request')
    if request:
        headers = request.get('headers') or {}
        for name in list(headers):
            if name.lower() == 'authorization':
                headers[name] = FILTERED

        data = request.get('data')
        if isinstance(data, dict):
            for field in SENSITIVE_BODY_FIELDS:
                if field in data:
                    data[field] = FILTERED

    return event


def set_user_context(user_id: int, username: str = None):
    """Attach the authenticated tourist to subsequent events"""
    sentry_sdk.set_user({
        "id": str(user_id),
        "username": username or f"user_{user_id}",
    })
