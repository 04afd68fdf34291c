"""
Post content to X (Twitter) using OAuth 1.0a (user context).
"""

import asyncio

import requests
from requests_oauthlib import OAuth1

from ..config import get_settings
from ..errors import PublishError, PublishErrorKind, ValidationError
from ..log import get_logger
from ..mlops.tracing import tracer

settings = get_settings()
logger = get_logger("x_client")

TWEETS_URL = "https://api.twitter.com/2/tweets"


def classify_failure(status_code: int, body: dict) -> PublishErrorKind:
    if status_code == 402 or body.get("title") == "CreditsDepleted":
        return PublishErrorKind.CREDITS_DEPLETED
    if status_code == 403:
        return PublishErrorKind.INSUFFICIENT_PERMISSIONS
    if status_code == 401:
        return PublishErrorKind.AUTH_FAILED
    return PublishErrorKind.FAILED


class XPublisher:
    def _auth(self) -> OAuth1:
        credentials = [
            settings.X_API_KEY,
            settings.X_API_SECRET,
            settings.X_ACCESS_TOKEN,
            settings.X_ACCESS_TOKEN_SECRET,
        ]
        if not all(credentials):
            raise PublishError(
                PublishErrorKind.AUTH_FAILED,
                "set X_API_KEY, X_API_SECRET, X_ACCESS_TOKEN and X_ACCESS_TOKEN_SECRET",
            )
        return OAuth1(*credentials)

    def _post(self, text: str) -> dict:
        auth = self._auth()
        try:
            resp = requests.post(TWEETS_URL, auth=auth, json={"text": text}, timeout=10)
        except requests.RequestException as e:
            logger.error(f"X API request failed: {e}")
            raise PublishError(PublishErrorKind.FAILED, str(e)) from e

        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if resp.ok:
            # Already published; an unreadable body must not turn into a failure
            return body

        kind = classify_failure(resp.status_code, body)
        logger.error(f"X API error {resp.status_code}: {resp.text}")
        detail = body.get("detail") if kind is PublishErrorKind.FAILED else None
        raise PublishError(kind, detail)

    async def publish(self, text: str) -> None:
        """
        Publish `text` as a single post. Rejected locally when over the character limit.
        Not retried: each confirmation publishes at most once.
        """
        limit = settings.X_CHARACTER_LIMIT
        if len(text) > limit:
            raise ValidationError(f"Post text exceeds {limit} characters")

        with tracer.span("publish.x", span_type="TOOL", attributes={"length": len(text)}):
            # requests is blocking, keep the event loop free
            result = await asyncio.to_thread(self._post, text)
        logger.info(f"Published post {result.get('data', {}).get('id', '?')}")

x_publisher = XPublisher()
