"""
Percent-encoding for URL path segments and host names.

Behavior parameters travel as path segments, not a query string, so the
path encoder is deliberately permissive: it keeps the reserved characters
in PATH_SAFE_CHARS (space included) and escapes everything else that is not
a letter, digit or one of "-._~". Non-ASCII text is UTF-8 encoded first.
"""

from urllib.parse import quote

from .constants import PATH_SAFE_CHARS, HOST_SAFE_CHARS


def url_path_encode(text) -> str:
    return quote(str(text), safe=PATH_SAFE_CHARS)


def url_host_encode(text) -> str:
    return quote(str(text), safe=HOST_SAFE_CHARS)
