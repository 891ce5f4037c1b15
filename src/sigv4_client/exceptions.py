class BaseSigningClientException(Exception):
    """Top-level exception to capture client-related errors."""

    ...


class SigningError(BaseSigningClientException, ValueError):
    """A request could not be signed with the supplied credentials."""

    ...


class MissingExpectedParameterException(SigningError):
    """Some signers require specific signing properties to be present."""

    ...


class TransportError(BaseSigningClientException):
    """The delegate transport failed before a response was received."""

    ...
