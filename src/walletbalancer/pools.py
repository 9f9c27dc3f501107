"""Token precision lookup from liquidity pool descriptors."""

from typing import Iterable, Optional

from walletbalancer.models import AssetInfo, PoolInfo


class PoolMetadata:
    """Resolves a token symbol to its decimals via the pools it trades in."""

    def __init__(self, pool_infos: Iterable[PoolInfo]):
        self._pool_infos = list(pool_infos)

    def find_asset(self, symbol: str) -> Optional[AssetInfo]:
        """Return the asset side of the first pool naming this symbol."""
        for pool in self._pool_infos:
            if pool.asset_x.symbol == symbol:
                return pool.asset_x
            if pool.asset_y.symbol == symbol:
                return pool.asset_y
        return None

    def decimals_for(self, symbol: str) -> Optional[int]:
        asset = self.find_asset(symbol)
        return asset.decimals if asset else None
