"""Fee estimation request and response contracts."""

from typing import Optional

from eth_utils import is_address
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from avoroute.models import FeeQuote, TransactionAction


class ActionInput(BaseModel):
    """An action to cast through the wallet."""

    target: str = Field(..., description="Contract called by the wallet")
    data: str = Field(default="0x", description="Hex encoded call data")
    value: str = Field(default="0", description="Native value in wei")
    operation: str = Field(default="0", description="0 call, 1 delegatecall, 2 flashloan")

    @field_validator("target")
    @classmethod
    def validate_target(cls, v: str) -> str:
        if not is_address(v):
            raise ValueError("target must be an Ethereum address")
        return v

    @field_validator("data")
    @classmethod
    def validate_data(cls, v: str) -> str:
        if not v.startswith("0x") or len(v) % 2 != 0:
            raise ValueError("data must be 0x-prefixed hex")
        try:
            bytes.fromhex(v[2:])
        except ValueError as e:
            raise ValueError("data must be 0x-prefixed hex") from e
        return v

    @field_validator("value", "operation")
    @classmethod
    def validate_uint(cls, v: str) -> str:
        if not str(v).isdigit():
            raise ValueError("must be a non-negative integer string")
        return str(v)

    def to_action(self) -> TransactionAction:
        return TransactionAction(
            target=self.target,
            data=self.data,
            value=self.value,
            operation=self.operation,
        )


class FeeEstimateRequest(BaseModel):
    """Body of a fee estimate for arbitrary actions."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    actions: list[ActionInput] = Field(..., description="Actions to cast")
    chain_id: int = Field(..., description="Chain the actions are cast on")
    eoa_address: str = Field(..., description="Wallet owner address")
    avocado_address: Optional[str] = Field(None, description="Wallet address (derived when omitted)")
    avocado_wallet_index: str = Field(default="0", description="Wallet index of the owner")

    @field_validator("eoa_address")
    @classmethod
    def validate_eoa_address(cls, v: str) -> str:
        if not is_address(v):
            raise ValueError("eoaAddress must be an Ethereum address")
        return v

    @field_validator("avocado_address")
    @classmethod
    def validate_avocado_address(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not is_address(v):
            raise ValueError("avocadoAddress must be an Ethereum address")
        return v

    @field_validator("avocado_wallet_index", mode="before")
    @classmethod
    def validate_index(cls, v) -> str:
        if not str(v).isdigit():
            raise ValueError("avocadoWalletIndex must be a non-negative integer")
        return str(v)


class FeeEstimateResponse(BaseModel):
    """Fee quote for one chain."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    fee: str = Field(..., description="Fee in USD scaled by 1e18")
    multiplier: str = Field(..., description="Combined gas multiplier in basis points")
    chain_id: int = Field(..., description="Chain id")
    chain_name: str = Field(..., description="Chain display name")

    @classmethod
    def from_quote(cls, quote: FeeQuote) -> "FeeEstimateResponse":
        return cls(
            fee=str(quote.fee),
            multiplier=str(quote.multiplier),
            chain_id=quote.chain_id,
            chain_name=quote.chain_name,
        )
