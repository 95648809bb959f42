from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple, Union

from .exceptions import InvalidInputError

Pair = Tuple[str, str]
Pairs = Tuple[Pair, ...]


def _freeze_pairs(pairs: Iterable[Pair], what: str) -> Pairs:
    frozen = []
    for name, value in pairs:
        if not isinstance(name, str) or not isinstance(value, str):
            raise InvalidInputError(
                f"{what} names and values must be str, got ({type(name).__name__}, {type(value).__name__})"
            )
        frozen.append((name, value))
    return tuple(frozen)


@dataclass(frozen=True)
class RequestDescriptor:
    """The request fields covered by a signature.

    ``query`` and ``headers`` keep the order they were given in and may repeat
    names. They are copied into tuples so the descriptor can't be changed
    behind the signer's back.
    """
    method: str
    path: str
    query: Pairs = ()
    headers: Pairs = ()
    payload: Union[bytes, str] = b''

    def __post_init__(self) -> None:
        object.__setattr__(self, 'query', _freeze_pairs(self.query, 'query'))
        object.__setattr__(self, 'headers', _freeze_pairs(self.headers, 'header'))
        if isinstance(self.payload, str):
            object.__setattr__(self, 'payload', self.payload.encode('utf-8'))
        elif isinstance(self.payload, (bytes, bytearray, memoryview)):
            object.__setattr__(self, 'payload', bytes(self.payload))
        else:
            raise InvalidInputError(f"payload must be str or bytes, got {type(self.payload).__name__}")


@dataclass(frozen=True)
class SigningResult:
    canonical_request: str
    canonical_hash: str
    string_to_sign: str
    signature: str
    signed_headers: str
    credential_scope: str
    amz_date: str
    headers: Pairs = field(default=())
    authorization: Optional[str] = None
