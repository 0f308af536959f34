from pydantic import BaseModel, ConfigDict, Field


class SignatureLike(BaseModel):
    """
    Structured signature record accepted by ``Signature.from_``.

    Any subset of the fields may be supplied; ``Signature.from_`` decides
    whether the subset is sufficient and whether redundant fields agree.
    Both the camelCase wire names and the snake_case field names are accepted.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    r: str | bytes | None = Field(None, description="R component of signature")
    s: str | bytes | None = Field(None, description="S component of signature")
    v: int | str | bytes | None = Field(None, description="Recovery identifier, possibly EIP-155 encoded")
    y_parity: int | None = Field(None, alias="yParity", description="Recovery parity bit")
    y_parity_and_s: str | bytes | None = Field(None, alias="yParityAndS", description="EIP-2098 packed s")
    network_v: int | str | None = Field(None, alias="networkV", description="Chain-bound legacy v")
