from evm_signature.config import BaseConfig
from evm_signature.exceptions import (
    FrozenSignatureError,
    InconsistentSignatureError,
    InvalidLengthError,
    InvalidVError,
    MissingFieldError,
    NonCanonicalSError,
    PrivateConstructorError,
    SignatureError,
)
from evm_signature.types.signature import Signature
from evm_signature.types.signature_like import SignatureLike

__all__ = [
    "BaseConfig",
    "FrozenSignatureError",
    "InconsistentSignatureError",
    "InvalidLengthError",
    "InvalidVError",
    "MissingFieldError",
    "NonCanonicalSError",
    "PrivateConstructorError",
    "Signature",
    "SignatureError",
    "SignatureLike",
]
