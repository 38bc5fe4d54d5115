"""
Web fetch with a response size limit.

Backs the WebFetch tool of the local executor. Bodies larger than
MAX_RESPONSE_SIZE are rejected while streaming, so a large or endless
response never gets buffered in full.
"""

import httpx

from config.defaults import DEFAULT_WEB_FETCH_TIMEOUT_SECONDS

MAX_RESPONSE_SIZE = 5 * 1024 * 1024  # 5MB


def _charset(content_type: str) -> str:
    if "charset=" in content_type:
        return content_type.split("charset=")[1].split(";")[0].strip() or "utf-8"
    return "utf-8"


async def fetch_url(
    url: str,
    timeout: float = DEFAULT_WEB_FETCH_TIMEOUT_SECONDS,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """
    Fetch a URL and return its body as text.

    Args:
        url: http(s) URL to fetch
        timeout: Request timeout in seconds
        transport: Optional httpx transport (used by tests)

    Returns:
        Decoded response body

    Raises:
        ValueError: For invalid URLs, HTTP error statuses, oversized bodies
            and transport failures
    """
    if not url or not isinstance(url, str):
        raise ValueError("URL must be a non-empty string")
    if not url.startswith(("http://", "https://")):
        raise ValueError("URL must start with http:// or https://")

    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True, transport=transport) as client:
        try:
            async with client.stream("GET", url) as response:
                response.raise_for_status()

                content_length = response.headers.get("content-length")
                if content_length and int(content_length) > MAX_RESPONSE_SIZE:
                    raise ValueError("response too large (exceeds 5MB limit)")

                chunks = []
                total_size = 0
                async for chunk in response.aiter_bytes():
                    total_size += len(chunk)
                    if total_size > MAX_RESPONSE_SIZE:
                        raise ValueError("response too large (exceeds 5MB limit)")
                    chunks.append(chunk)

                data = b"".join(chunks)
                try:
                    return data.decode(_charset(response.headers.get("content-type", "")))
                except (UnicodeDecodeError, LookupError):
                    return data.decode("latin-1")

        except httpx.TimeoutException as e:
            raise ValueError(f"Request timed out after {timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise ValueError(f"HTTP error {e.response.status_code}: {e.response.reason_phrase}") from e
        except httpx.RequestError as e:
            raise ValueError(f"Request failed: {e}") from e
