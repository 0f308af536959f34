from typing import Any


class SignatureError(ValueError):
    """Base exception for signature validation."""

    def __init__(self, reason: str, argument: str = "signature", value: Any = None):
        self.reason = reason
        self.argument = argument
        self.value = value
        super().__init__(f"{reason} (argument={argument!r}, value={value!r})")


class InvalidLengthError(SignatureError):
    """Byte value has the wrong length."""

    pass


class NonCanonicalSError(SignatureError):
    """The s value is not in low-s form."""

    pass


class InvalidVError(SignatureError):
    """Recovery value is out of range."""

    pass


class MissingFieldError(SignatureError):
    """Required field is absent from a structured signature."""

    pass


class InconsistentSignatureError(SignatureError):
    """Redundant signature fields disagree."""

    pass


class PrivateConstructorError(SignatureError):
    """Signature was constructed outside the factory methods."""

    pass


class FrozenSignatureError(SignatureError):
    """Attempt to modify a frozen signature."""

    pass
