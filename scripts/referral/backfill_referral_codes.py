"""Assign referral codes to users that were created without one.

Safe to re-run: only users whose referral_code is NULL are touched.

Usage examples:
  # Preview only (default dry-run)
  ENV_FILE=.env.prod python scripts/referral/backfill_referral_codes.py

  # Apply changes
  ENV_FILE=.env.prod python scripts/referral/backfill_referral_codes.py --apply

  # Apply to the first 100 users only
  ENV_FILE=.env.prod python scripts/referral/backfill_referral_codes.py --apply --limit 100
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[2]
sys.path.append(str(PROJECT_ROOT))


def _load_env_file() -> None:
    env_file = os.environ.get("ENV_FILE", ".env.prod")
    env_path = (PROJECT_ROOT / env_file).resolve()
    if not env_path.exists():
        # In containers, env vars are often injected without mounting the env file.
        if os.environ.get("DATABASE_URL"):
            print(f"Env file not found at {env_path}; using existing environment vars.")
            return
        raise FileNotFoundError(f"Env file not found: {env_path}")
    load_dotenv(env_path, override=True)


async def _print_plan(limit: int | None) -> None:
    from libs.db.config import AsyncSessionLocal
    from services.ledger_service.services.user_service import (
        users_missing_referral_code,
    )

    async with AsyncSessionLocal() as session:
        users = await users_missing_referral_code(session, limit=limit)

    print("Dry run summary")
    print(f"Users without referral code: {len(users)}")
    print("")
    print("Sample (first 20):")
    for user in users[:20]:
        print(f"- id={user.id} username={user.username} wallet={user.wallet_address}")


async def _apply(limit: int | None) -> None:
    from libs.db.config import AsyncSessionLocal
    from services.ledger_service.services.user_service import backfill_referral_codes

    async with AsyncSessionLocal() as session:
        updated, failed = await backfill_referral_codes(session, limit=limit)

    for user in updated:
        print(f"[OK] {user.username} -> {user.referral_code}")
    for user in failed:
        print(f"[FAIL] {user.username} (id={user.id}): no unique code found")

    print("")
    print("Backfill complete")
    print(f"Updated: {len(updated)}")
    print(f"Failures: {len(failed)}")


async def _main() -> None:
    parser = argparse.ArgumentParser(
        description="Backfill referral codes for users that have none."
    )
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Apply changes (default is dry-run).",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Limit number of users processed.",
    )
    args = parser.parse_args()

    _load_env_file()

    if not args.apply:
        await _print_plan(limit=args.limit)
        print("")
        print("Dry-run only. Re-run with --apply to execute.")
        return

    await _apply(limit=args.limit)


if __name__ == "__main__":
    asyncio.run(_main())
