"""Configuration loading and validation using Pydantic."""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings

DEFAULT_ABSOLUTE_TOLERANCE = 10**7


class BalanceConfig(BaseModel):
    """Per-token weight declaration of a wallet.

    portion_in_strategy is the weight used when the token is spread across
    wallets. A wallet without it does not take part in that token's
    allocation. portion_in_wallet is carried for within-wallet balancing.
    """

    symbol: str
    portion_in_strategy: Optional[float] = Field(default=None, ge=0)
    portion_in_wallet: Optional[float] = Field(default=None, ge=0)


class WalletConfig(BaseModel):
    balance_config: Optional[list[BalanceConfig]] = None

    @field_validator("balance_config")
    @classmethod
    def symbols_unique(cls, v):
        if v is None:
            return v
        symbols = [bc.symbol for bc in v]
        duplicates = sorted({s for s in symbols if symbols.count(s) > 1})
        if duplicates:
            raise ValueError(f"duplicate balance_config symbols: {duplicates}")
        return v

    def find_balance_config(self, symbol: str) -> Optional[BalanceConfig]:
        if self.balance_config is None:
            return None
        return next((bc for bc in self.balance_config if bc.symbol == symbol), None)


class WalletEntry(BaseModel):
    """A registered wallet. Keys are managed elsewhere."""

    address: str
    name: str = ""
    wallet_config: WalletConfig = Field(default_factory=WalletConfig)


class RedistributionConfig(BaseModel):
    token_symbols: list[str] = Field(default_factory=list)
    absolute_tolerance: int = Field(default=DEFAULT_ABSOLUTE_TOLERANCE, ge=0)
    relative_tolerance: Optional[float] = Field(default=None, ge=0)
    # Per-token absolute tolerance, for tokens whose decimals make the
    # default meaningless.
    token_tolerances: dict[str, int] = Field(default_factory=dict)
    max_iterations: Optional[int] = Field(default=None, ge=1)

    @field_validator("token_symbols")
    @classmethod
    def token_symbols_unique(cls, v):
        duplicates = sorted({s for s in v if v.count(s) > 1})
        if duplicates:
            raise ValueError(f"duplicate token_symbols: {duplicates}")
        return v

    @field_validator("token_tolerances")
    @classmethod
    def tolerances_non_negative(cls, v):
        negative = sorted(symbol for symbol, tol in v.items() if tol < 0)
        if negative:
            raise ValueError(f"token_tolerances must be >= 0: {negative}")
        return v


class LoggingConfig(BaseModel):
    level: str = "INFO"
    app_log: str = "logs/walletbalancer.log"
    action_log: str = "logs/actions.log"
    max_bytes: int = 10485760
    backup_count: int = 5


class AppConfig(BaseModel):
    wallets: list[WalletEntry] = Field(default_factory=list)
    redistribution: RedistributionConfig = Field(default_factory=RedistributionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def addresses_unique(self):
        seen = set()
        for wallet in self.wallets:
            if wallet.address in seen:
                raise ValueError(f"wallet address '{wallet.address}' registered twice")
            seen.add(wallet.address)
        return self


class Settings(BaseSettings):
    """Loaded from the environment (WALLETBALANCER_*) or a .env file."""

    config_path: Path = Path("config/settings.yaml")
    snapshot_path: Path = Path("snapshot.json")
    output_path: Optional[Path] = None

    model_config = {
        "env_prefix": "WALLETBALANCER_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


def load_config(config_path: Path = Path("config/settings.yaml")) -> AppConfig:
    """Load and validate application configuration from YAML."""
    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    return AppConfig(**raw)
