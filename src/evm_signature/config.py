"""Configuration settings for signature handling."""

import os

from pydantic import BaseModel, ConfigDict, field_validator

# Configuration Constants
ENV_CHAIN_ID = "CHAIN_ID"
DEFAULT_CHAIN_ID = 1


class BaseConfig(BaseModel):
    """Settings applied when re-binding signatures to a chain."""

    model_config = ConfigDict(validate_assignment=True)

    chain_id: int = DEFAULT_CHAIN_ID

    @field_validator("chain_id", mode="before")
    @classmethod
    def validate_chain_id(cls, v: int | str) -> int:
        """Validate that the chain id is a non-negative integer."""
        if isinstance(v, str):
            v = v.strip()
            if not v:
                msg = "Field cannot be empty or whitespace"
                raise ValueError(msg)
            v = int(v, 0)
        if isinstance(v, bool) or not isinstance(v, int):
            msg = f"chain_id must be an integer, got {type(v).__name__}"
            raise ValueError(msg)
        if v < 0:
            msg = "chain_id must be non-negative"
            raise ValueError(msg)
        return v

    @classmethod
    def from_env(cls) -> "BaseConfig":
        """
        Create configuration from environment variables.

        Returns:
            BaseConfig: Configuration instance with values from environment variables.

        Example:
            ```python
            config = BaseConfig.from_env()
            signature = Signature.from_(raw).with_chain_id(config.chain_id)
            ```
        """
        return cls(chain_id=os.getenv(ENV_CHAIN_ID, str(DEFAULT_CHAIN_ID)))
