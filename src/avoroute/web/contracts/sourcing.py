"""Sourcing route request and response contracts."""

from decimal import Decimal
from typing import Optional

from eth_utils import is_address
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from avoroute.chains import TokenSymbol
from avoroute.models import SourcingEntry


def decimal_to_str(value: Decimal) -> str:
    """Plain (non-scientific) string of a decimal amount."""
    return format(Decimal(value).normalize(), "f")


class SourcingRouteRequest(BaseModel):
    """Query parameters of a sourcing route estimate."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    chain_id: int = Field(..., description="Destination chain id")
    token: TokenSymbol = Field(..., description="Token to source (USDC, USDT)")
    eoa_address: str = Field(..., description="Wallet owner address")
    amount: Decimal = Field(..., gt=0, description="Amount to gather on the destination chain")
    avocado_address: Optional[str] = Field(None, description="Wallet address (derived when omitted)")
    index: str = Field(default="0", description="Wallet index of the owner")

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

    @field_validator("index")
    @classmethod
    def validate_index(cls, v: str) -> str:
        if not v.isdigit():
            raise ValueError("index must be a non-negative integer")
        return v


class SourcingRouteEntry(BaseModel):
    """One chain of a sourcing plan."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    chain_id: int = Field(..., description="Source chain id")
    chain_name: str = Field(..., description="Source chain display name")
    amount_sourced: str = Field(..., description="Amount taken from this chain")
    fees: str = Field(..., description="Fee of sourcing from this chain, in USD")

    @classmethod
    def from_entry(cls, entry: SourcingEntry) -> "SourcingRouteEntry":
        return cls(
            chain_id=entry.chain_id,
            chain_name=entry.chain_name,
            amount_sourced=decimal_to_str(entry.amount_sourced),
            fees=decimal_to_str(entry.fees),
        )
