class SigningError(Exception):
    """Base class for every error raised while signing a request."""


class InvalidInputError(SigningError, ValueError):
    """A request field or signing parameter is missing or malformed."""


class CryptoFailureError(SigningError):
    """The underlying SHA-256/HMAC primitive failed.

    Not recoverable: a broken digest invalidates every signature derived from it.
    """


class ClockUnavailableError(SigningError):
    """The system clock could not be read while generating a timestamp."""
