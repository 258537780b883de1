"""Operator utility: assign a QR endpoint/port to a tenant by email."""

from __future__ import annotations

import argparse
import logging
import sys

from botpanel.db import models, database
from botpanel.db.repositories import qr as qr_repo


logger = logging.getLogger("botpanel.scripts.assign_qr")

SessionLocal = lambda: database.SessionLocal()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Assign a WhatsApp QR endpoint to a tenant")
    parser.add_argument("email", help="Tenant email (as seen by the auth proxy)")
    parser.add_argument("--url", required=True, help="URL serving the QR code")
    parser.add_argument("--port", required=True, help="Port of the tenant's bot instance")
    parser.add_argument(
        "--unassigned",
        action="store_true",
        help="Record the endpoint without marking it assigned",
    )
    return parser.parse_args(argv)


def run(email: str, url: str, port: str, assigned: bool = True) -> int:
    session = SessionLocal()
    try:
        user = session.query(models.User).filter(models.User.email == email.strip().lower()).first()
        if user is None:
            print(f"No user with email {email}", file=sys.stderr)
            return 1
        row = qr_repo.assign_qr(session, user_id=user.id, url_qr=url, port=port, is_assigned=assigned)
        logger.info("QR assigned", extra={"user_id": str(user.id), "port": row.port})
        print(f"Assigned {row.url_qr} (port {row.port}) to {user.email}.")
        return 0
    finally:
        session.close()


def main(argv: list[str] | None = None) -> int:
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = parse_args(argv)
    return run(args.email, args.url, args.port, assigned=not args.unassigned)


if __name__ == "__main__":  # pragma: no cover - manual execution path
    sys.exit(main())
