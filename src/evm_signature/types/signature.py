import logging
from collections.abc import Mapping
from typing import Any, Literal

from eth_keys import KeyAPI
from eth_keys.datatypes import Signature as EthKeysSignature
from eth_typing import HexStr
from pydantic import BaseModel, ConfigDict, PrivateAttr, ValidationError, field_validator

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
from evm_signature.types.signature_like import SignatureLike
from evm_signature.utils import ZERO_HASH, get_big_int, get_bytes, hexlify, normalize_signature

logger = logging.getLogger(__name__)

SIGNATURE_LENGTH: int = 65
COMPACT_SIGNATURE_LENGTH: int = 64
SCALAR_LENGTH: int = 32
EIP155_V_OFFSET: int = 35

_guard = object()


def _scalar_bytes(value: Any) -> bytes | None:
    """Decode ``value`` if it is exactly 32 bytes, else None."""
    try:
        data = get_bytes(value)
    except SignatureError:
        return None
    return data if len(data) == SCALAR_LENGTH else None


class Signature(BaseModel):
    """
    Canonical secp256k1 signature with ``r``, low-s ``s`` and ``v`` in {27, 28}.

    Instances are created through :meth:`from_` (or :meth:`from_der`), never
    directly. Fields are validated on assignment until :meth:`freeze` is called.

    Example:
        >>> sig = Signature.from_("0x" + "11" * 32 + "80" + "00" * 31)
        >>> sig.v
        28
    """

    model_config = ConfigDict(validate_assignment=True)

    r: HexStr
    s: HexStr
    v: Literal[27, 28]

    _network_v: int | None = PrivateAttr(default=None)
    _frozen: bool = PrivateAttr(default=False)

    def __init__(self, guard: object = None, /, **data: Any):
        if guard is not _guard:
            msg = "use Signature.from_() to create a signature"
            raise PrivateConstructorError(msg, "Signature", guard)
        super().__init__(**data)

    @classmethod
    def model_construct(cls, _fields_set: set[str] | None = None, **values: Any) -> "Signature":
        msg = "use Signature.from_() to create a signature"
        raise PrivateConstructorError(msg, "Signature", values)

    def model_copy(self, *, update: dict[str, Any] | None = None, deep: bool = False) -> "Signature":
        """Return an unfrozen copy; updates must go through the validated setters."""
        if update:
            msg = "use Signature.from_() or the field setters to change a signature"
            raise PrivateConstructorError(msg, "update", update)
        return self.clone()

    @field_validator("r", mode="before")
    @classmethod
    def validate_r(cls, value: Any) -> HexStr:
        data = _scalar_bytes(value)
        if data is None:
            raise InvalidLengthError("invalid r", "r", value)
        return hexlify(data)

    @field_validator("s", mode="before")
    @classmethod
    def validate_s(cls, value: Any) -> HexStr:
        data = _scalar_bytes(value)
        if data is None:
            raise InvalidLengthError("invalid s", "s", value)
        if data[0] & 0x80:
            raise NonCanonicalSError("non-canonical s", "s", value)
        return hexlify(data)

    @field_validator("v", mode="before")
    @classmethod
    def validate_v(cls, value: Any) -> int:
        try:
            v = get_big_int(value, "v")
        except SignatureError as error:
            raise InvalidVError("invalid v", "v", value) from error
        if v not in (27, 28):
            raise InvalidVError("invalid v", "v", value)
        return v

    def __setattr__(self, name: str, value: Any) -> None:
        if self.is_frozen():
            raise FrozenSignatureError("signature is frozen", name, value)
        super().__setattr__(name, value)

    def __delattr__(self, name: str) -> None:
        if self.is_frozen():
            raise FrozenSignatureError("signature is frozen", name, None)
        super().__delattr__(name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Signature):
            return NotImplemented
        return (self.r, self.s, self.v, self.network_v) == (other.r, other.s, other.v, other.network_v)

    def __repr__(self) -> str:
        return f'Signature(r="{self.r}", s="{self.s}", y_parity={self.y_parity}, network_v={self.network_v})'

    def __str__(self) -> str:
        return self.__repr__()

    @property
    def network_v(self) -> int | None:
        """The EIP-155 ``v`` this signature is bound to, if any."""
        return self._network_v

    @property
    def legacy_chain_id(self) -> int | None:
        v = self.network_v
        if v is None:
            return None
        return Signature.get_chain_id(v)

    @property
    def y_parity(self) -> Literal[0, 1]:
        return 0 if self.v == 27 else 1

    @property
    def y_parity_and_s(self) -> HexStr:
        """The EIP-2098 compact representation of ``s``."""
        y_parity_and_s = bytearray(get_bytes(self.s))
        if self.y_parity:
            y_parity_and_s[0] |= 0x80
        return hexlify(bytes(y_parity_and_s))

    @property
    def compact_serialized(self) -> HexStr:
        return hexlify(get_bytes(self.r) + get_bytes(self.y_parity_and_s))

    @property
    def serialized(self) -> HexStr:
        v_byte = b"\x1c" if self.y_parity else b"\x1b"
        return hexlify(get_bytes(self.r) + get_bytes(self.s) + v_byte)

    def clone(self) -> "Signature":
        """Return an unfrozen copy carrying the same values."""
        clone = Signature(_guard, r=self.r, s=self.s, v=self.v)
        if self.network_v is not None:
            clone._network_v = self.network_v
        return clone

    def freeze(self) -> "Signature":
        """Make this signature immutable and return it."""
        if not self.is_frozen():
            self._frozen = True
        return self

    def is_frozen(self) -> bool:
        return bool(getattr(self, "_frozen", False))

    def with_chain_id(self, chain_id: int | None = None) -> "Signature":
        """
        Re-bind the signature to a chain.

        Args:
            chain_id: Target chain. Defaults to the configured chain id
                (see :class:`~evm_signature.config.BaseConfig`). ``0`` removes
                the chain binding.

        Returns:
            Signature: A new, unfrozen signature whose ``network_v`` encodes ``chain_id``.
        """
        if chain_id is None:
            chain_id = BaseConfig.from_env().chain_id
        result = self.clone()
        result._network_v = Signature.get_chain_id_v(chain_id, self.v) if chain_id else None
        return result

    def to_vrs(self) -> tuple[int, int, int]:
        """Convert to the ``(v, r, s)`` integer tuple used by eth-account."""
        v = self.network_v if self.network_v is not None else self.v
        return v, int(self.r, 16), int(self.s, 16)

    def to_eth_keys(self) -> EthKeysSignature:
        """Convert to an eth-keys signature object."""
        keys = KeyAPI()
        return keys.Signature(vrs=(self.y_parity, int(self.r, 16), int(self.s, 16)))

    def to_json(self) -> dict[str, Any]:
        network_v = self.network_v
        return {
            "_type": "signature",
            "networkV": str(network_v) if network_v is not None else None,
            "r": self.r,
            "s": self.s,
            "v": self.v,
        }

    @staticmethod
    def get_chain_id(v: int | str | bytes) -> int:
        """Get the chain ID from an EIP-155 ``v``."""
        bv = get_big_int(v, "v")

        # Not an EIP-155 v, so the chain is unspecified
        if bv in (27, 28):
            return 0

        if bv < EIP155_V_OFFSET:
            raise InvalidVError("invalid EIP-155 v", "v", v)

        return (bv - EIP155_V_OFFSET) // 2

    @staticmethod
    def get_chain_id_v(chain_id: int | str | bytes, v: int) -> int:
        """Get the EIP-155 ``v`` for ``chain_id`` and a normalized ``v``."""
        bchain_id = get_big_int(chain_id, "chain_id")
        if bchain_id < 0:
            raise InvalidVError("invalid chain id", "chain_id", chain_id)
        if v not in (27, 28):
            raise InvalidVError("invalid v", "v", v)
        return bchain_id * 2 + EIP155_V_OFFSET + (v - 27)

    @staticmethod
    def get_normalized_v(v: int | str | bytes) -> Literal[27, 28]:
        """Convert a bare-parity, legacy or EIP-155 ``v`` into 27 or 28."""
        bv = get_big_int(v, "v")

        if bv == 0:
            return 27
        if bv == 1:
            return 28

        # EIP-155 and legacy v: odd is 27, even is 28
        return 27 if bv & 1 else 28

    @classmethod
    def from_der(cls, der_signature: bytes | str, v: int | str | bytes = 27) -> "Signature":
        """
        Create a canonical signature from a DER-encoded ``(r, s)`` pair.

        Cloud KMS and HSM backends return DER signatures without a recovery
        value. A high ``s`` is folded into low-s form, which flips the parity
        of ``v``.

        Args:
            der_signature: DER-encoded signature.
            v: Recovery value to pair with the signature; bare parity,
                27/28 and EIP-155 values are accepted.

        Returns:
            Signature: The normalized signature.
        """
        r, s, flipped = normalize_signature(get_bytes(der_signature, "der_signature"))

        raw_v = get_big_int(v, "v")
        normalized_v = cls.get_normalized_v(raw_v)
        if flipped:
            normalized_v = 28 if normalized_v == 27 else 27

        result = cls(_guard, r=r, s=s, v=normalized_v)
        if raw_v >= EIP155_V_OFFSET:
            result._network_v = cls.get_chain_id_v(cls.get_chain_id(raw_v), normalized_v)
        return result

    @classmethod
    def from_(cls, sig: "Signature | SignatureLike | Mapping[str, Any] | str | bytes | None" = None) -> "Signature":
        """
        Create a signature from any supported representation.

        Args:
            sig: One of
                - ``None``: the zero signature,
                - a ``Signature``: a defensive copy is returned,
                - a 64-byte (EIP-2098) or 65-byte raw signature as bytes or hex,
                - a mapping or :class:`SignatureLike` with some of ``r``, ``s``,
                  ``v``, ``yParity``, ``yParityAndS``.

        Returns:
            Signature: A new, unfrozen signature.

        Raises:
            SignatureError: If the input is malformed, non-canonical, incomplete
                or self-contradictory.
        """
        if sig is None:
            return cls(_guard, r=ZERO_HASH, s=ZERO_HASH, v=27)

        if isinstance(sig, (str, bytes, bytearray, memoryview)):
            return cls._from_raw(sig)

        if isinstance(sig, Signature):
            return sig.clone()

        if isinstance(sig, SignatureLike):
            return cls._from_record(sig, sig)

        if isinstance(sig, Mapping):
            try:
                record = SignatureLike.model_validate(dict(sig))
            except ValidationError as error:
                raise SignatureError("invalid signature", "signature", sig) from error
            return cls._from_record(record, sig)

        raise SignatureError("invalid signature", "signature", sig)

    @classmethod
    def _from_raw(cls, sig: str | bytes | bytearray | memoryview) -> "Signature":
        try:
            data = get_bytes(sig, "signature")
        except SignatureError as error:
            raise SignatureError("invalid raw signature", "signature", sig) from error

        if len(data) == COMPACT_SIGNATURE_LENGTH:
            logger.debug("Parsing EIP-2098 compact signature")
            s = bytearray(data[32:64])
            v = 28 if s[0] & 0x80 else 27
            s[0] &= 0x7F
            return cls(_guard, r=data[:32], s=bytes(s), v=v)

        if len(data) == SIGNATURE_LENGTH:
            logger.debug("Parsing 65-byte r, s, v signature")
            s = data[32:64]
            if s[0] & 0x80:
                raise NonCanonicalSError("non-canonical s", "signature", sig)
            return cls(_guard, r=data[:32], s=s, v=cls.get_normalized_v(data[64]))

        raise InvalidLengthError("invalid raw signature length", "signature", sig)

    @classmethod
    def _from_record(cls, record: SignatureLike, sig: Any) -> "Signature":
        logger.debug("Parsing structured signature with fields %s", sorted(record.model_fields_set))

        def fail(error_type: type[SignatureError], message: str) -> SignatureError:
            return error_type(message, "signature", sig)

        if record.r is None:
            raise fail(MissingFieldError, "missing r")
        r = _scalar_bytes(record.r)
        if r is None:
            raise fail(InvalidLengthError, "invalid r")

        y_parity_and_s = None
        if record.y_parity_and_s is not None:
            y_parity_and_s = _scalar_bytes(record.y_parity_and_s)
            if y_parity_and_s is None:
                raise fail(InvalidLengthError, "invalid yParityAndS")

        # Get s; by any means necessary (consistency is checked below)
        if record.s is not None:
            s = _scalar_bytes(record.s)
            if s is None:
                raise fail(InvalidLengthError, "invalid s")
        elif y_parity_and_s is not None:
            s = bytes([y_parity_and_s[0] & 0x7F]) + y_parity_and_s[1:]
        else:
            raise fail(MissingFieldError, "missing s")
        if s[0] & 0x80:
            raise fail(NonCanonicalSError, "non-canonical s")

        # Get v; by any means necessary (consistency is checked below)
        network_v = None
        if record.v is not None:
            try:
                raw_v = get_big_int(record.v, "v")
            except SignatureError as error:
                raise fail(InvalidVError, "invalid v") from error
            v = cls.get_normalized_v(raw_v)
            if raw_v >= EIP155_V_OFFSET:
                network_v = raw_v
        elif y_parity_and_s is not None:
            v = 28 if y_parity_and_s[0] & 0x80 else 27
        elif record.y_parity is not None:
            if record.y_parity not in (0, 1):
                raise fail(InvalidVError, "invalid yParity")
            v = 27 + record.y_parity
        else:
            raise fail(MissingFieldError, "missing v")

        # Tagged records from to_json() carry the chain binding separately
        if record.network_v is not None:
            try:
                explicit_network_v = get_big_int(record.network_v, "networkV")
            except SignatureError as error:
                raise fail(InvalidVError, "invalid networkV") from error
            if explicit_network_v < EIP155_V_OFFSET or cls.get_normalized_v(explicit_network_v) != v:
                raise fail(InconsistentSignatureError, "networkV mismatch")
            if network_v is not None and network_v != explicit_network_v:
                raise fail(InconsistentSignatureError, "networkV mismatch")
            network_v = explicit_network_v

        result = cls(_guard, r=r, s=s, v=v)
        if network_v is not None:
            result._network_v = network_v

        # If several of v, yParity and yParityAndS were given, they must agree
        if record.y_parity is not None and record.y_parity != result.y_parity:
            raise fail(InconsistentSignatureError, "yParity mismatch")
        if y_parity_and_s is not None and y_parity_and_s != get_bytes(result.y_parity_and_s):
            raise fail(InconsistentSignatureError, "yParityAndS mismatch")

        return result
