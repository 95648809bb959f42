"""Canonical request construction.

``canonical_request`` emits query parameters and headers in exactly the order
it receives them. AWS verifies signatures against a canonical request whose
query parameters and headers are sorted by name, so callers that build their
own field lists must either pass them pre-sorted or run the request through
``canonicalize`` first. ``SigV4Signer`` always does the latter.
"""

from typing import Dict, List, Optional, Sequence, Union

from .crypto import sha256_hex
from .encoding import uri_encode
from .exceptions import InvalidInputError
from .models import Pair, RequestDescriptor


def canonical_query_string(query: Sequence[Pair], *, encode_values: bool = True) -> str:
    if not encode_values:
        return '&'.join(f'{name}={value}' for name, value in query)
    return '&'.join(f'{name}={uri_encode(value)}' for name, value in query)


def canonical_headers(headers: Sequence[Pair]) -> str:
    return ''.join(f'{name.lower()}:{value}\n' for name, value in headers)


def signed_headers(headers: Sequence[Pair]) -> str:
    return ';'.join(name.lower() for name, _ in headers)


def canonical_request(
        method: str,
        uri: str,
        query: Sequence[Pair],
        headers: Sequence[Pair],
        payload: Union[str, bytes] = b'',
        *,
        payload_hash: Optional[str] = None,
        encode_query: bool = True
) -> str:
    """Build the canonical request string.

    ``uri`` must already be path-escaped. Query values are percent-encoded
    here; query names are not. When ``payload_hash`` is given it replaces the
    SHA-256 of ``payload`` (e.g. ``UNSIGNED-PAYLOAD``). With ``encode_query``
    False the query values are taken as already encoded.
    """
    if not method:
        raise InvalidInputError("HTTP method must not be empty")
    if not uri:
        raise InvalidInputError("URI path must not be empty")
    if payload_hash is None:
        payload_hash = sha256_hex(payload)

    return '\n'.join([
        method.upper(),
        uri,
        canonical_query_string(query, encode_values=encode_query),
        canonical_headers(headers),
        signed_headers(headers),
        payload_hash,
    ])


def _trim(value: str) -> str:
    return ' '.join(value.split())


def canonicalize(request: RequestDescriptor) -> RequestDescriptor:
    """Return a copy of ``request`` in the order AWS expects.

    Query names are URI-encoded and pairs sorted by encoded name, then by
    encoded value; values stay raw because ``canonical_query_string`` encodes
    them. Header names are lowercased, values trimmed, repeated names merged
    with ``,`` and the result sorted by name.
    """
    query = sorted(
        ((uri_encode(name), value) for name, value in request.query),
        key=lambda pair: (pair[0], uri_encode(pair[1]))
    )

    merged: Dict[str, List[str]] = {}
    for name, value in request.headers:
        merged.setdefault(name.lower().strip(), []).append(_trim(value))
    headers = [(name, ','.join(merged[name])) for name in sorted(merged)]

    return RequestDescriptor(
        method=request.method.upper(),
        path=request.path,
        query=query,
        headers=headers,
        payload=request.payload,
    )
