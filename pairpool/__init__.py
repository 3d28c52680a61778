"""pairpool - constant-product two-asset pair engine."""

from pairpool.factory import PairFactory, pair_address
from pairpool.pair import PairEngine

__version__ = "0.1.0"
__all__ = ["PairEngine", "PairFactory", "pair_address", "__version__"]
