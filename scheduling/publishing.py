# scheduling/publishing.py
"""
Publishing the club document to the public site.

The admin side POSTs ``{"db": <document>}`` to the publish endpoint with the
shared key in an ``X-Publish-Key`` header. The receiving side lives in
``scheduling.views.publish_document``.
"""
import hmac
import logging

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

PUBLISH_KEY_HEADER = 'X-Publish-Key'
DEFAULT_TIMEOUT_SECONDS = 30


class PublishError(Exception):
    """The endpoint refused or failed to publish the document."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class PublishUnauthorized(PublishError):
    """The publish key was rejected."""


def publish_key_matches(supplied, expected):
    """Constant-time comparison of the supplied key against the configured one."""
    return hmac.compare_digest(str(supplied or '').strip().encode(), str(expected or '').strip().encode())


def publish_document(document, endpoint=None, key=None, session=None, timeout=DEFAULT_TIMEOUT_SECONDS):
    """
    Sends the document to the publish endpoint and returns the decoded reply.

    Raises ``PublishUnauthorized`` when the key is rejected and
    ``PublishError`` for any other failure.
    """
    endpoint = endpoint or settings.PUBLISH_ENDPOINT
    key = key if key is not None else settings.PUBLISH_KEY
    if not endpoint:
        raise PublishError("No publish endpoint configured.")
    if not key:
        raise PublishUnauthorized("No publish key supplied.", status_code=401)

    http = session or requests.Session()
    try:
        response = http.post(
            endpoint,
            json={'db': document.to_dict()},
            headers={PUBLISH_KEY_HEADER: key},
            timeout=timeout,
        )
    except requests.RequestException as e:
        raise PublishError(f"Could not reach {endpoint}: {e}") from e

    try:
        payload = response.json()
    except ValueError:
        payload = {}
    if not isinstance(payload, dict):
        payload = {}

    if response.status_code == 401:
        raise PublishUnauthorized("Unauthorized", status_code=401)
    if not response.ok:
        message = payload.get('error')
        raise PublishError(message or f"Publish failed with HTTP {response.status_code}", status_code=response.status_code)

    logger.info("Published club document to %s", endpoint)
    return payload
