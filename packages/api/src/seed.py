# This project was developed with assistance from AI tools.
"""Command-line entrypoint for demo data and audit maintenance.

Usage:
    python -m src.seed                  # Seed demo data
    python -m src.seed --force          # Clear demo deals and re-seed
    python -m src.seed --status         # Show what is seeded
    python -m src.seed --verify-audit   # Recompute the audit hash chain
"""

import argparse
import asyncio
import json
import logging

from db.database import SessionLocal

from .services.audit import verify_audit_chain
from .services.seed.seeder import get_seed_status, seed_demo_data

logger = logging.getLogger(__name__)


async def run(force: bool = False, status: bool = False, verify_audit: bool = False) -> int:
    """Run one command and return the process exit code."""
    async with SessionLocal() as session:
        if verify_audit:
            result = await verify_audit_chain(session)
        elif status:
            result = await get_seed_status(session)
        else:
            result = await seed_demo_data(session, force=force)
            if result.get("status") == "already_seeded":
                logger.info("Demo data already seeded. Use --force to re-seed.")

    print(json.dumps(result, indent=2, default=str))
    return 1 if result.get("status") == "TAMPERED" else 0


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="DealFlow demo data and audit tools")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--force", action="store_true", help="Clear demo deals and re-seed")
    group.add_argument("--status", action="store_true", help="Show seed manifest")
    group.add_argument(
        "--verify-audit", action="store_true", help="Verify the audit log hash chain"
    )
    return parser


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    args = _parser().parse_args()
    raise SystemExit(
        asyncio.run(run(force=args.force, status=args.status, verify_audit=args.verify_audit))
    )
