"""Chain and token information contracts."""

from pydantic import BaseModel, Field


class TokenInfo(BaseModel):
    """A stablecoin supported on a chain."""

    symbol: str = Field(..., description="Token symbol (USDC, USDT)")
    contract_address: str = Field(..., description="Token contract address")
    decimals: int = Field(..., description="Token decimals")


class ChainInfo(BaseModel):
    """Information about a supported chain."""

    chain_id: int = Field(..., description="EVM chain id (1 for Ethereum, etc.)")
    name: str = Field(..., description="Chain display name")
    native_asset: str = Field(..., description="Native asset symbol")
    supports_eip1559: bool = Field(default=False, description="Priced with EIP-1559 fee data")
    has_l1_fee: bool = Field(default=False, description="Charges an L1 data or gas surcharge")
    tokens: list[TokenInfo] = Field(default_factory=list)


class ChainListResponse(BaseModel):
    """Response containing list of supported chains."""

    success: bool = True
    chains: list[ChainInfo] = Field(default_factory=list)
    total: int = Field(default=0)
