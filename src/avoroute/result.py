"""Per-chain outcome of a soft-failing lookup."""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ChainResult(Generic[T]):
    """Either a value for a chain or the reason it is unavailable."""

    chain_id: int
    value: Optional[T] = None
    reason: Optional[str] = None

    @classmethod
    def success(cls, chain_id: int, value: T) -> "ChainResult[T]":
        return cls(chain_id=chain_id, value=value)

    @classmethod
    def unavailable(cls, chain_id: int, reason: str) -> "ChainResult[T]":
        return cls(chain_id=chain_id, reason=reason)

    @property
    def ok(self) -> bool:
        return self.reason is None and self.value is not None


def successful(results: list[ChainResult[T]]) -> list[T]:
    """Values of every successful result, preserving order."""
    return [r.value for r in results if r.ok]
