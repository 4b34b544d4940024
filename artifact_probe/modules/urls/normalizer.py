"""Download URL Normalizer."""

from urllib.parse import quote, unquote, urlsplit, urlunsplit

from artifact_probe.errors import MalformedURL

# RFC 3986 pchar plus "/" and "%", so existing escapes survive
PATH_SAFE = "/%:@!$&'()*+,;=~"


def normalize_download_url(raw_url: str) -> str:
    """
    Re-escape the path and query of a download URL.

    Signed download URLs come back with raw or partially escaped query
    strings. The whole query is decoded once and then escaped with no
    safe characters, so `&`, `=` and `;` cannot leak into the shell
    command the URL is embedded in. Decoding first makes the operation
    idempotent.

    The path keeps its existing escapes; characters that are never valid
    in a path, such as spaces, are percent-encoded.

    Args:
        raw_url: Absolute URL from the artifact download view

    Returns:
        URL with its path and query re-escaped

    Raises:
        MalformedURL: If raw_url is not an absolute URL

    Example:
        >>> normalize_download_url("https://minio:9000/b/k?X-Amz-Date=1&X-Amz-Signature=ab")
        'https://minio:9000/b/k?X-Amz-Date%3D1%26X-Amz-Signature%3Dab'
    """
    if not isinstance(raw_url, str):
        raise MalformedURL(f"Download URL must be a string, got {type(raw_url).__name__}")

    try:
        parts = urlsplit(raw_url.strip())
        # Accessing port validates it
        parts.port
    except ValueError as e:
        raise MalformedURL(f"Cannot parse download URL {raw_url!r}: {e}") from e

    if not parts.scheme or not parts.netloc:
        raise MalformedURL(f"Download URL is not absolute: {raw_url!r}")

    path = quote(parts.path, safe=PATH_SAFE)
    query = quote(unquote(parts.query), safe="")
    return urlunsplit((parts.scheme, parts.netloc, path, query, parts.fragment))
