import dataclasses
import logging
from enum import Enum
from typing import Any, BinaryIO, Dict, List, Optional, Tuple, Union
from urllib.parse import urlsplit

from . import clock
from .canonical import canonicalize
from .crypto import sha256_hex, sha256_hex_stream
from .encoding import host_from_url, normalize_url_path, uri_encode
from .exceptions import InvalidInputError
from .models import RequestDescriptor, SigningResult
from .signing import sign_request

logger = logging.getLogger(__name__)

Headers = Dict[str, Any]
Body = Union[str, bytes, bytearray, BinaryIO, None]

UNSIGNED_PAYLOAD = 'UNSIGNED-PAYLOAD'

# Headers that proxies and clients are known to rewrite.
SIGNED_HEADERS_BLACKLIST = frozenset([
    'expect',
    'transfer-encoding',
    'user-agent',
    'x-amzn-trace-id',
])

_AUTHORIZATION = 'Authorization'
_AMZ_DATE = 'X-Amz-Date'
_DATE = 'Date'
_SECURITY_TOKEN = 'X-Amz-Security-Token'
_CONTENT_SHA256 = 'X-Amz-Content-SHA256'


class Service(str, Enum):
    S3 = 's3'
    DYNAMODB = 'dynamodb'
    LAMBDA = 'lambda'
    IAM = 'iam'
    STS = 'sts'
    EC2 = 'ec2'
    SQS = 'sqs'
    SNS = 'sns'
    EXECUTE_API = 'execute-api'
    ES = 'es'


def _service_name(service: Union[Service, str]) -> str:
    return service.value if isinstance(service, Service) else service


def _without(headers: Headers, *names: str) -> Headers:
    drop = {name.lower() for name in names}
    return {k: v for k, v in headers.items() if k.lower() not in drop}


def _get(headers: Headers, name: str) -> Optional[Any]:
    name = name.lower()
    for k, v in headers.items():
        if k.lower() == name:
            return v
    return None


def _query_pairs(query: str) -> List[Tuple[str, str]]:
    # URL query text is signed as sent: split into raw pairs and sorted,
    # never decoded or re-encoded.
    if not query:
        return []
    pairs = []
    for pair in query.split('&'):
        name, _, value = pair.partition('=')
        pairs.append((name, value))
    return sorted(pairs)


def _payload_hash(body: Body) -> str:
    if body is None:
        return sha256_hex(b'')
    if hasattr(body, 'read') and hasattr(body, 'seek'):
        return sha256_hex_stream(body)
    return sha256_hex(body)


class SigV4Signer:
    """Signs HTTP requests for an AWS service with Signature Version 4.

    The signer holds one set of credentials scoped to a region and a service.
    Its output matches botocore's ``SigV4Auth`` (``S3SigV4Auth`` for S3).
    """

    def __init__(
            self,
            access_key: str,
            secret_key: str,
            region: str,
            service: Union[Service, str],
            token: Optional[str] = None,
            *,
            sign_payload: bool = True
    ) -> None:
        if not access_key:
            raise InvalidInputError("access_key must not be empty")
        if not region:
            raise InvalidInputError("region must not be empty")
        if not service:
            raise InvalidInputError("service must not be empty")
        if not secret_key:
            logger.warning("Signing with an empty secret key; AWS will reject these requests")

        self.access_key = access_key
        self.secret_key = secret_key
        self.region = region
        self.service = _service_name(service)
        self.token = token
        self.sign_payload = sign_payload

    @property
    def is_s3(self) -> bool:
        return self.service == Service.S3.value

    def _canonical_path(self, path: str) -> str:
        # S3 signs the path exactly as sent
        if self.is_s3:
            return path or '/'
        return uri_encode(normalize_url_path(path), encode_slash=False)

    def _content_sha256(self, scheme: str, headers: Headers, body: Body) -> Tuple[str, bool]:
        """Return the payload hash and whether it goes out as a header."""
        if self.is_s3:
            # plain http always carries a signed payload
            if not self.sign_payload and scheme == 'https':
                return UNSIGNED_PAYLOAD, True
            return _payload_hash(body), True
        if not self.sign_payload:
            return UNSIGNED_PAYLOAD, True
        supplied = _get(headers, _CONTENT_SHA256)
        if supplied is not None:
            return str(supplied), False
        return _payload_hash(body), False

    def sign(
            self,
            method: str,
            url: str,
            headers: Optional[Headers] = None,
            body: Body = None
    ) -> SigningResult:
        """Sign a request and return every signing artifact.

        ``result.headers`` holds the headers to send: the caller's headers plus
        X-Amz-Date (or a rewritten Date when the caller sent one), Authorization
        and, where they apply, X-Amz-Security-Token and X-Amz-Content-SHA256.
        The caller's mapping is left untouched.
        """
        if not method:
            raise InvalidInputError("HTTP method must not be empty")
        parts = urlsplit(url)
        if not parts.scheme:
            raise InvalidInputError(f"URL has no scheme: {url!r}")
        host = host_from_url(url)

        headers = dict(headers or {})
        amz_date = clock.amz_date()
        payload_hash, send_hash = self._content_sha256(parts.scheme, headers, body)

        out = _without(headers, _AUTHORIZATION, _AMZ_DATE)
        if _get(headers, _DATE) is not None:
            # a caller-supplied Date header carries the timestamp instead
            out = _without(out, _DATE)
            out[_DATE] = clock.http_date(amz_date)
        else:
            out[_AMZ_DATE] = amz_date
        if self.token:
            out = _without(out, _SECURITY_TOKEN)
            out[_SECURITY_TOKEN] = self.token
        if send_hash:
            out = _without(out, _CONTENT_SHA256)
            out[_CONTENT_SHA256] = payload_hash

        to_sign = [
            (name, str(value)) for name, value in out.items()
            if name.lower() not in SIGNED_HEADERS_BLACKLIST
        ]
        if _get(out, 'host') is None:
            to_sign.append(('host', host))

        request = canonicalize(RequestDescriptor(
            method=method,
            path=self._canonical_path(parts.path),
            headers=to_sign,
        ))
        request = dataclasses.replace(request, query=_query_pairs(parts.query))
        result = sign_request(
            request,
            self.secret_key,
            self.region,
            self.service,
            payload_hash=payload_hash,
            access_key=self.access_key,
            amz_date=amz_date,
            encode_query=False,
        )

        out[_AUTHORIZATION] = result.authorization
        return dataclasses.replace(result, headers=tuple(out.items()))

    def create_headers(
            self,
            method: str,
            url: str,
            headers: Optional[Headers] = None,
            body: Body = None
    ) -> Headers:
        return dict(self.sign(method, url, headers, body).headers)
