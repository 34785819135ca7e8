"""Reference request function for Amazon SP-API built on ``requests``.

Callers that already have a valid LWA access token (and, for
IAM-signed apps, temporary AWS credentials) can use
``make_request_function`` as the boundary every capability module calls.
Obtaining those credentials is left to the caller.
"""

import asyncio
import logging
import uuid
from datetime import datetime
from typing import Any, Optional

import requests
from requests_aws4auth import AWS4Auth  # type: ignore[import-untyped]

from .api.base import ApiResponse, RequestFunction, RequestOptions
from .constants import DEFAULT_TIMEOUT, USER_AGENT
from .exceptions import HttpError, RateLimitError

logger = logging.getLogger(__name__)


def _response_body(response: requests.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def make_request_function(
    access_token: str,
    endpoint: str = "https://sellingpartnerapi-eu.amazon.com",
    region: str = "eu-west-1",
    aws_credentials: Optional[dict[str, str]] = None,
    timeout: int = DEFAULT_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> RequestFunction:
    """Build an async request function for one marketplace connection.

    Args:
        access_token: Amazon LWA access token
        endpoint: SP-API endpoint URL
        region: AWS region for the SP-API endpoint
        aws_credentials: Optional dict with AccessKeyId, SecretAccessKey, SessionToken
        timeout: Request timeout in seconds
        session: Optional requests session to reuse connections

    Returns:
        Coroutine function ``(method, path, options) -> ApiResponse``
    """
    aws_auth = None
    if aws_credentials:
        aws_auth = AWS4Auth(
            aws_credentials["AccessKeyId"],
            aws_credentials["SecretAccessKey"],
            region,
            "execute-api",
            session_token=aws_credentials.get("SessionToken"),
        )

    headers = {
        "x-amz-access-token": access_token,
        "user-agent": USER_AGENT,
        "content-type": "application/json",
    }
    http = session or requests.Session()

    def send(method: str, path: str, options: RequestOptions) -> ApiResponse:
        request_id = str(uuid.uuid4())
        start_time = datetime.now()
        logger.info(f"Request {request_id}: Sending {method} {path}")

        response = http.request(
            method=method,
            url=f"{endpoint}{path}",
            params=options.get("params"),
            json=options.get("json"),
            headers={**headers, **(options.get("headers") or {})},
            auth=aws_auth,
            timeout=timeout,
        )
        duration_ms = int((datetime.now() - start_time).total_seconds() * 1000)
        body = _response_body(response)
        response_headers = dict(response.headers)

        if response.status_code == 429:
            try:
                retry_after = int(response.headers.get("Retry-After", 60))
            except ValueError:
                retry_after = 60
            logger.warning(f"Request {request_id}: Rate limit exceeded, retry after {retry_after}s")
            raise RateLimitError("Rate limit exceeded", retry_after, body=body, headers=response_headers)

        if response.status_code >= 400:
            logger.error(f"Request {request_id}: HTTP error in {duration_ms}ms, status={response.status_code}")
            raise HttpError(
                f"Request failed with status {response.status_code}",
                status=response.status_code,
                body=body,
                headers=response_headers,
            )

        logger.info(f"Request {request_id}: Success in {duration_ms}ms, status={response.status_code}")
        return ApiResponse(data=body, status=response.status_code, headers=response_headers)

    async def request(method: str, path: str, options: Optional[RequestOptions] = None) -> ApiResponse:
        return await asyncio.to_thread(send, method, path, options or {})

    return request
