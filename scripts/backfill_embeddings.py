"""Embed behavior and knowledge prompts that were stored without a vector.

Prompts end up without an embedding when the provider was disabled or failing
at write time, or when EMBEDDING_ON_WRITE_ENABLED was off. Run after the
provider is configured:

    python scripts/backfill_embeddings.py --dry-run
    python scripts/backfill_embeddings.py --only knowledge --batch-size 50
"""

from __future__ import annotations

import argparse
import logging
import sys
import time

from sqlalchemy import func

from botpanel.db import models, database
from botpanel.services import get_embedding_service


logger = logging.getLogger("botpanel.scripts.backfill_embeddings")


# Resolved per call so tests can rebind database.SessionLocal
SessionLocal = lambda: database.SessionLocal()

PROMPT_TABLES = {
    "behavior": models.BehaviorPrompt,
    "knowledge": models.KnowledgePrompt,
}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Populate missing prompt embeddings")
    parser.add_argument(
        "--only",
        choices=sorted(PROMPT_TABLES),
        help="Restrict the run to behavior or knowledge prompts",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=100,
        help="Number of rows to process per batch (default: 100)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report prompts without embeddings per table and exit",
    )
    return parser.parse_args(argv)


def pending_by_table(session, prompt_models) -> dict[str, int]:
    """Count prompts with a null embedding, keyed by table name."""
    return {
        model.__tablename__: session.query(func.count())
        .select_from(model)
        .filter(model.embedding.is_(None))
        .scalar()
        for model in prompt_models
    }


def _print_pending(pending: dict[str, int]) -> None:
    for table, count in pending.items():
        print(f"  {table}: {count} without embedding")


def backfill(batch_size: int, dry_run: bool, only: str | None = None) -> int:
    prompt_models = [PROMPT_TABLES[only]] if only else list(PROMPT_TABLES.values())
    session = SessionLocal()
    try:
        pending = pending_by_table(session, prompt_models)
        total = sum(pending.values())
        logger.info("Embedding backfill pending", extra={"pending": pending, "dry_run": dry_run})

        if total == 0:
            print("All prompts already have embeddings.")
            return 0
        print(f"{total} prompts require embeddings:")
        _print_pending(pending)
        if dry_run:
            return 0

        service = get_embedding_service()
        if not service.is_enabled:
            print(
                "Embedding provider is disabled. Set EMBEDDING_PROVIDER before running the backfill.",
                file=sys.stderr,
            )
            logger.error("Embedding provider disabled; aborting backfill run")
            return 1

        started = time.perf_counter()
        updated = service.backfill_missing_embeddings(
            session, batch_size=batch_size, prompt_models=prompt_models
        )
        remaining = pending_by_table(session, prompt_models)
        print(f"Backfilled embeddings for {updated} prompts.")
        if any(remaining.values()):
            # Blank prompt text or provider errors; see the service log for ids
            print("Still without embedding:")
            _print_pending(remaining)
        logger.info(
            "Embedding backfill run finished",
            extra={
                "updated_rows": updated,
                "remaining": remaining,
                "duration_seconds": round(time.perf_counter() - started, 3),
            },
        )
        return 0
    finally:
        session.close()


def main(argv: list[str] | None = None) -> int:
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = parse_args(argv)
    return backfill(batch_size=args.batch_size, dry_run=args.dry_run, only=args.only)


if __name__ == "__main__":  # pragma: no cover - manual execution path
    sys.exit(main())
