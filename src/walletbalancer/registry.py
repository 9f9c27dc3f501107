"""Wallet registry - read-only address to configuration lookup."""

from typing import Iterable, Optional

from walletbalancer.config import AppConfig, WalletConfig, WalletEntry


class WalletRegistry:
    """Static mapping of wallet address to its configuration."""

    def __init__(self, wallets: Iterable[WalletEntry]):
        self._wallets: dict[str, WalletEntry] = {}
        for wallet in wallets:
            self._wallets[wallet.address] = wallet

    @classmethod
    def from_config(cls, config: AppConfig) -> "WalletRegistry":
        return cls(config.wallets)

    def find(self, address: str) -> Optional[WalletEntry]:
        return self._wallets.get(address)

    def find_config(self, address: str) -> Optional[WalletConfig]:
        wallet = self.find(address)
        return wallet.wallet_config if wallet else None
