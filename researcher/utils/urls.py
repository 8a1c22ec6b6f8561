import logging
from urllib.parse import parse_qs, urlsplit

logger = logging.getLogger(__name__)

REDIRECT_HOST = "duckduckgo.com"
REDIRECT_PATH = "/l/"
REDIRECT_TARGET_PARAM = "uddg"


def resolve_url(raw: str) -> str:
    """Undo DuckDuckGo click-redirect wrapping.

    ``//duckduckgo.com/l/?uddg=https%3A%2F%2Fexample.com%2F&rut=...`` becomes
    ``https://example.com/``. Anything else, including a redirect link whose
    target cannot be decoded, is returned unchanged.
    """
    try:
        parsed = urlsplit(raw)
        host = parsed.hostname or ""
        if not (host == REDIRECT_HOST or host.endswith("." + REDIRECT_HOST)):
            return raw
        if not parsed.path.startswith(REDIRECT_PATH):
            return raw

        params = parse_qs(parsed.query, errors="strict")
    except (ValueError, UnicodeDecodeError) as e:
        logger.debug(f"Could not decode redirect URL {raw!r}: {e}")
        return raw

    targets = params.get(REDIRECT_TARGET_PARAM)
    if targets and targets[0]:
        return targets[0]
    return raw


def derive_source_name(title: str, url: str) -> str:
    """Short human label for a result: ``https://www.bbc.co.uk/x`` -> ``bbc``"""
    try:
        hostname = urlsplit(url).hostname
    except ValueError:
        hostname = None

    if not hostname:
        words = title.split()
        if len(words) > 2:
            return " ".join(words[:2])
        return title

    if hostname.startswith("www."):
        hostname = hostname[len("www."):]
    return hostname.split(".")[0]
