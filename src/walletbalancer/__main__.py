"""Entry point: python -m walletbalancer"""

import asyncio
import json
import sys

import structlog
import yaml
from pydantic import ValidationError

from walletbalancer.config import Settings, load_config
from walletbalancer.logging_config import configure_logging
from walletbalancer.models import ScenarioSnapshot
from walletbalancer.redistribution.engine import RedistributionEngine
from walletbalancer.registry import WalletRegistry

logger = structlog.get_logger(__name__)


def main() -> int:
    try:
        settings = Settings()
    except ValidationError as e:
        print(f"Failed to load settings from WALLETBALANCER_* environment or .env: {e}", file=sys.stderr)
        return 1

    try:
        config = load_config(settings.config_path)
    except (OSError, yaml.YAMLError, ValidationError) as e:
        print(f"Failed to load config from {settings.config_path}: {e}", file=sys.stderr)
        return 1

    configure_logging(config.logging)

    try:
        with open(settings.snapshot_path) as f:
            snapshot = ScenarioSnapshot.model_validate(json.load(f))
    except (OSError, ValueError) as e:
        logger.error("cli.snapshot_unreadable", path=str(settings.snapshot_path), error=str(e))
        return 1

    engine = RedistributionEngine(WalletRegistry.from_config(config), config.redistribution)
    report = asyncio.run(engine.redistribute(snapshot))

    output = report.snapshot.model_dump_json(indent=2)
    if settings.output_path is None:
        print(output)
    else:
        settings.output_path.write_text(output)
        logger.info("cli.snapshot_written", path=str(settings.output_path))

    return 0


if __name__ == "__main__":
    sys.exit(main())
