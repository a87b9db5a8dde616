"""Gas fee model, L1 surcharges, native token prices and fee estimation."""

from avoroute.fees.estimator import FeeEstimator, mock_signatures
from avoroute.fees.l1 import L1FeeEstimator
from avoroute.fees.prices import NativeTokenPriceFeed

__all__ = [
    "FeeEstimator",
    "L1FeeEstimator",
    "NativeTokenPriceFeed",
    "mock_signatures",
]
