"""HTTP transport shared by the model backends."""

from __future__ import annotations

import time
from dataclasses import dataclass

import httpx

from shellmate.providers.base import ProviderError, ProviderTimeoutError


@dataclass
class HTTPReply:
    """Status and decoded body of a completed request."""

    status_code: int
    text: str


def post_json(
    client: httpx.Client,
    provider: str,
    url: str,
    body: dict[str, object],
    timeout: float,
    headers: dict[str, str] | None = None,
) -> HTTPReply:
    """POST a JSON body and read the whole reply within ``timeout`` seconds.

    httpx timeouts only bound each connect/read/write step, so the body is
    streamed and the overall deadline is checked after every chunk.

    Raises:
        ProviderTimeoutError: If the deadline passes before the body is read.
        ProviderError: On any other transport failure.
    """
    deadline = time.monotonic() + timeout
    chunks: list[bytes] = []
    try:
        with client.stream("POST", url, json=body, headers=headers, timeout=timeout) as response:
            for chunk in response.iter_bytes():
                if time.monotonic() > deadline:
                    raise ProviderTimeoutError(f"{provider} chat timed out after {timeout:g}s")
                chunks.append(chunk)
            encoding = response.encoding or "utf-8"
            status_code = response.status_code
    except httpx.TimeoutException as e:
        raise ProviderTimeoutError(f"{provider} chat timed out after {timeout:g}s") from e
    except httpx.HTTPError as e:
        raise ProviderError(f"{provider} chat: {e}") from e

    return HTTPReply(
        status_code=status_code,
        text=b"".join(chunks).decode(encoding, errors="replace"),
    )
