"""CLI for discovering centers in a JSON export of notes, either across all of them or within a MOC"""

import argparse
import asyncio
import sys
from pathlib import Path

from loguru import logger

from saligo.ai.orchestrator import AIOrchestrator
from saligo.ai.providers import create_adapter
from saligo.config import Settings
from saligo.discovery.coordinator import CenterDiscoveryCoordinator
from saligo.errors import SaligoError
from saligo.vault.memory import InMemoryVault


async def main(notes_file: str, moc_id: str | None, validate_only: bool) -> None:
    settings = Settings()
    logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])

    vault = InMemoryVault.load(Path(notes_file))
    orchestrator = AIOrchestrator.from_settings(settings, create_adapter(settings))
    coordinator = CenterDiscoveryCoordinator(orchestrator, reader=vault, resolver=vault)

    if moc_id and validate_only:
        result = await coordinator.validate_moc(moc_id)
    elif moc_id:
        result = await coordinator.discover_from_moc(moc_id)
    else:
        result = await coordinator.discover_from_seeds(vault.notes)

    print(result.model_dump_json(indent=2))


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--notes", type=str, required=True, help="JSON file containing a list of notes"
    )
    parser.add_argument(
        "--moc-id", type=str, required=False, help="Discover centers within this MOC", default=None
    )
    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Only validate the MOC, without calling the provider",
    )

    args = parser.parse_args()

    try:
        asyncio.run(main(args.notes, args.moc_id, args.validate_only))
    except SaligoError as e:
        logger.error(f"{e.code.value}: {e.message}")
        sys.exit(1)
