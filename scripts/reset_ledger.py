"""Wipe balances, bets, transactions and deposits. Development use only."""
import argparse

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.models import Balance, Bet, Deposit, Transaction


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--yes", action="store_true", help="skip the confirmation prompt")
    args = parser.parse_args()

    settings = get_settings()
    if (settings.environment or "").lower() == "production":
        raise SystemExit("Refusing to reset the ledger in production.")
    if not args.yes:
        answer = input(f"Reset all ledger data in {settings.database_url}? [y/N] ")
        if answer.strip().lower() != "y":
            return

    db = SessionLocal()
    try:
        for model in (Transaction, Bet, Deposit, Balance):
            deleted = db.query(model).delete()
            print(f"{model.__tablename__}: {deleted} rows deleted")
        db.commit()
    finally:
        db.close()


if __name__ == "__main__":
    main()
