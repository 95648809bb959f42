"""String-to-sign, signing key derivation and signature computation."""

import logging
from typing import List, Optional, Sequence, Tuple

from . import clock
from .canonical import canonical_request, signed_headers
from .crypto import hmac_sha256, sha256_hex
from .exceptions import InvalidInputError
from .models import Pair, RequestDescriptor, SigningResult

logger = logging.getLogger(__name__)

ALGORITHM = 'AWS4-HMAC-SHA256'
SCOPE_TERMINATOR = 'aws4_request'
AMZ_DATE_HEADER = 'x-amz-date'


def find_amz_date(headers: Sequence[Pair]) -> Optional[str]:
    # last occurrence wins
    found = None
    for name, value in headers:
        if name.lower() == AMZ_DATE_HEADER:
            found = value
    return found


def with_amz_date(headers: Sequence[Pair]) -> Tuple[str, Sequence[Pair]]:
    """Return the request timestamp and the headers that carry it.

    ``headers`` is returned untouched when it already has an ``x-amz-date``.
    Otherwise the clock is read and a new list with the header appended is
    returned.
    """
    amz_date = find_amz_date(headers)
    if amz_date is not None:
        return amz_date, headers
    amz_date = clock.amz_date()
    augmented: List[Pair] = list(headers)
    augmented.append((AMZ_DATE_HEADER, amz_date))
    return amz_date, augmented


def credential_scope(date8: str, region: str, service: str) -> str:
    return '/'.join([date8, region, service, SCOPE_TERMINATOR])


def _date8(amz_date: str) -> str:
    if len(amz_date) < 8:
        raise InvalidInputError(f"Malformed x-amz-date value: {amz_date!r}")
    return amz_date[:8]


def string_to_sign(
        canonical_hash: str,
        headers: Sequence[Pair],
        region: str,
        service: str,
        *,
        amz_date: Optional[str] = None
) -> Tuple[str, Sequence[Pair]]:
    """Build the string to sign.

    The timestamp comes from ``amz_date`` when given (``headers`` is then
    returned as-is), otherwise from the ``x-amz-date`` header or the clock.
    """
    if amz_date is None:
        amz_date, headers = with_amz_date(headers)
    sts = '\n'.join([
        ALGORITHM,
        amz_date,
        credential_scope(_date8(amz_date), region, service),
        canonical_hash,
    ])
    return sts, headers


def derive_signing_key(secret_key: str, date8: str, region: str, service: str) -> bytes:
    # kDate -> kRegion -> kService -> kSigning; the order is fixed by AWS.
    key = hmac_sha256('AWS4' + secret_key, date8)
    for message in (region, service, SCOPE_TERMINATOR):
        key = hmac_sha256(key, message)
    return key


def compute_signature(
        secret_key: str,
        date8: str,
        region: str,
        service: str,
        string_to_sign: str
) -> str:
    signing_key = derive_signing_key(secret_key, date8, region, service)
    return hmac_sha256(signing_key, string_to_sign).hex()


def authorization_header(
        access_key: str,
        date8: str,
        region: str,
        service: str,
        signed_header_names: str,
        signature: str
) -> str:
    return (
        f'{ALGORITHM} Credential={access_key}/{credential_scope(date8, region, service)}, '
        f'SignedHeaders={signed_header_names}, Signature={signature}'
    )


def sign_request(
        request: RequestDescriptor,
        secret_key: str,
        region: str,
        service: str,
        *,
        payload_hash: Optional[str] = None,
        access_key: Optional[str] = None,
        amz_date: Optional[str] = None,
        encode_query: bool = True
) -> SigningResult:
    """Sign ``request`` exactly as given.

    Fields are used in the order the descriptor holds them; pass the request
    through ``canonicalize`` first when the backend expects sorted fields.
    A missing ``x-amz-date`` header is added before the canonical request is
    built so that the timestamp is covered by the signature. When
    ``access_key`` is given the result also carries the Authorization value.
    An explicit ``amz_date`` is used as the timestamp without touching the
    headers, for requests that carry their date in a ``Date`` header.
    """
    headers: Sequence[Pair] = request.headers
    if amz_date is None:
        amz_date, headers = with_amz_date(headers)
    creq = canonical_request(
        request.method,
        request.path,
        request.query,
        headers,
        request.payload,
        payload_hash=payload_hash,
        encode_query=encode_query,
    )
    logger.debug('CanonicalRequest:\n%s', creq)

    canonical_hash = sha256_hex(creq)
    sts, headers = string_to_sign(canonical_hash, headers, region, service, amz_date=amz_date)
    logger.debug('StringToSign:\n%s', sts)

    date8 = _date8(amz_date)
    signature = compute_signature(secret_key, date8, region, service, sts)
    header_names = signed_headers(headers)
    authorization = None
    if access_key is not None:
        authorization = authorization_header(access_key, date8, region, service, header_names, signature)
    return SigningResult(
        canonical_request=creq,
        canonical_hash=canonical_hash,
        string_to_sign=sts,
        signature=signature,
        signed_headers=header_names,
        credential_scope=credential_scope(date8, region, service),
        amz_date=amz_date,
        headers=tuple(headers),
        authorization=authorization,
    )
