import ipaddress
from typing import Union
from urllib.parse import urlsplit

from .exceptions import InvalidInputError

DEFAULT_PORTS = {'http': 80, 'https': 443}

# RFC 3986 unreserved characters
_UNRESERVED = frozenset(
    b'ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_.~'
)


def uri_encode(value: Union[str, bytes], *, encode_slash: bool = True) -> str:
    """Percent-encode everything except RFC 3986 unreserved characters.

    Non-ASCII text is encoded as UTF-8 first, one ``%XX`` (uppercase hex)
    per byte. ``/`` is kept as-is when ``encode_slash`` is False.
    """
    if isinstance(value, str):
        value = value.encode('utf-8')
    result = []
    for byte in value:
        if byte in _UNRESERVED or (byte == 0x2F and not encode_slash):
            result.append(chr(byte))
        else:
            result.append('%%%02X' % byte)
    return ''.join(result)


def normalize_url_path(path: str) -> str:
    # Removes "." and ".." segments (RFC 3986 5.2.4) and collapses repeated
    # slashes, keeping the leading and trailing slash.
    if not path:
        return '/'
    segments = []
    for segment in path.split('/'):
        if not segment or segment == '.':
            continue
        if segment == '..':
            if segments:
                segments.pop()
        else:
            segments.append(segment)
    first = '/' if path.startswith('/') else ''
    last = '/' if path.endswith('/') and segments else ''
    return first + '/'.join(segments) + last


def _is_ipv6(host: str) -> bool:
    try:
        return ipaddress.ip_address(host).version == 6
    except ValueError:
        return False


def host_from_url(url: str) -> str:
    """Derive the value of the ``host`` header for ``url``.

    The host is lowercased, IPv6 literals are bracketed, userinfo is dropped
    and the port is kept only when it is not the scheme's default.
    """
    parts = urlsplit(url)
    host = parts.hostname
    if not host:
        raise InvalidInputError(f"URL has no host: {url!r}")
    if _is_ipv6(host):
        host = f'[{host}]'
    try:
        port = parts.port
    except ValueError as e:
        raise InvalidInputError(f"Invalid port in URL {url!r}: {e}") from e
    if port is not None and port != DEFAULT_PORTS.get(parts.scheme):
        host = f'{host}:{port}'
    return host
