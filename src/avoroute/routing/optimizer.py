"""Minimum-fee selection of source chains.

Every subset of candidate chains whose combined balance covers the target
is priced by the sum of its chains' fees. The cheapest subset wins, with
ties resolved in enumeration order (fewer chains first, then earlier
chains in the balance list).
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterator, Optional, Sequence

from avoroute.errors import InsufficientBalanceError, ValidationError
from avoroute.models import Balance, FeeQuote, SourcingEntry
from avoroute.routing.combinations import subsets_by_size

logger = logging.getLogger(__name__)

DEFAULT_MAX_CANDIDATES = 12


@dataclass(frozen=True)
class CoveringSubset:
    """A set of chains able to cover the target, with its total fee."""

    chain_ids: tuple[int, ...]
    total_balance: Decimal
    total_fee: int


def covering_subsets(
    candidates: Sequence[Balance],
    fees: dict[int, int],
    amount: Decimal,
) -> Iterator[CoveringSubset]:
    """Yield every subset of ``candidates`` whose balances sum to at least ``amount``."""
    for subset in subsets_by_size(candidates):
        total_balance = sum((b.amount for b in subset), Decimal(0))
        if total_balance < amount:
            continue
        yield CoveringSubset(
            chain_ids=tuple(b.chain_id for b in subset),
            total_balance=total_balance,
            total_fee=sum(fees[b.chain_id] for b in subset),
        )


class RouteOptimizer:
    """Builds the cheapest draw-down plan for a target amount."""

    def __init__(self, max_candidates: int = DEFAULT_MAX_CANDIDATES):
        self.max_candidates = max_candidates

    def find_optimal_sources(
        self,
        estimates: Sequence[FeeQuote],
        balances: Sequence[Balance],
        amount: Decimal,
    ) -> list[SourcingEntry]:
        """Pick the minimum-fee set of chains and split ``amount`` across them.

        Args:
            estimates: Fee quotes of chains whose estimation succeeded
            balances: Non-zero balances, in chain registry order
            amount: Target amount in token units

        Returns:
            Plan entries sorted ascending by fee, amounts summing to ``amount``

        Raises:
            InsufficientBalanceError: candidates cannot cover the amount
            ValidationError: amount is not positive
        """
        amount = Decimal(amount)
        quotes = {int(q.chain_id): q for q in estimates}
        candidates = [b for b in balances if int(b.chain_id) in quotes and b.amount > 0]

        if amount <= 0:
            raise ValidationError("amount must be greater than 0")

        available = sum((b.amount for b in candidates), Decimal(0))
        if available < amount:
            raise InsufficientBalanceError()

        if len(candidates) > self.max_candidates:
            logger.warning(
                f"Enumerating {2 ** len(candidates) - 1} subsets for {len(candidates)} candidate chains"
            )

        fees = {int(b.chain_id): quotes[int(b.chain_id)].fee for b in candidates}
        best = self._select(candidates, fees, amount)
        if best is None:
            raise InsufficientBalanceError()

        logger.debug(f"Selected chains {best.chain_ids} with total fee {best.total_fee}")
        entries = self._draw_down(candidates, set(best.chain_ids), quotes, amount)
        return sorted(entries, key=lambda e: e.fees)

    @staticmethod
    def _select(
        candidates: Sequence[Balance],
        fees: dict[int, int],
        amount: Decimal,
    ) -> Optional[CoveringSubset]:
        best: Optional[CoveringSubset] = None
        for subset in covering_subsets(candidates, fees, amount):
            # Strict comparison keeps the first subset found at the minimum
            if best is None or subset.total_fee < best.total_fee:
                best = subset
        return best

    @staticmethod
    def _draw_down(
        candidates: Sequence[Balance],
        selected: set[int],
        quotes: dict[int, FeeQuote],
        amount: Decimal,
    ) -> list[SourcingEntry]:
        entries = []
        sourced = Decimal(0)
        for balance in candidates:
            if balance.chain_id not in selected:
                continue
            take = min(balance.amount, amount - sourced)
            quote = quotes[int(balance.chain_id)]
            entries.append(
                SourcingEntry(
                    chain_id=int(balance.chain_id),
                    chain_name=quote.chain_name,
                    amount_sourced=take,
                    fees=quote.fee_amount,
                )
            )
            sourced += take
            if sourced >= amount:
                break
        return entries
