#!/usr/bin/env python3
"""Migration script to make customer credit currency-aware.

Customer tables carried over from the shop's earlier app have:
- customers.credit_balance, a single balance that was always NPR
- credit_transactions without a currency column
- repayments typed 'credit_received'

This migration:
- renames customers.credit_balance to credit_balance_npr
- adds customers.credit_balance_inr (NUMERIC, default 0)
- adds credit_transactions.currency (VARCHAR, default 'NPR')
- retypes 'credit_received' credit records as 'payment_received'

Every existing credit record is treated as NPR, which is what the old
ledger assumed. Afterwards customer balances are checked against their
credit history and any mismatch is reported.

Usage:
    python migrations/migrate_add_credit_currency.py [--db-path PATH]
"""

import sys
from pathlib import Path

# Add src to path so we can import exledger modules
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sqlalchemy import text, inspect
from exledger.database.factories import create_sqlite_database
from exledger.domain.credit import CreditService


def column_exists(engine, table_name: str, column_name: str) -> bool:
    """Check if a column exists in a table.

    Args:
        engine: SQLAlchemy engine
        table_name: Name of the table
        column_name: Name of the column

    Returns:
        True if column exists, False otherwise
    """
    inspector = inspect(engine)
    columns = [col["name"] for col in inspector.get_columns(table_name)]
    return column_name in columns


def migrate_database(database_path: str | None = None) -> None:
    """Add the currency columns and verify customer balances.

    Args:
        database_path: Path to database file. If None, uses default location.

    Raises:
        Exception: If migration fails
    """
    db = create_sqlite_database(database_path=database_path)
    db.connect()

    try:
        engine = db.engine
        inspector = inspect(engine)
        for table in ("credit_transactions", "customers"):
            if table not in inspector.get_table_names():
                raise Exception(f"Table '{table}' does not exist. Please initialize the database schema first.")

        # Read both tables before altering either.
        customer_columns = {col["name"] for col in inspector.get_columns("customers")}
        has_currency = column_exists(engine, "credit_transactions", "currency")

        changes = []
        with engine.begin() as conn:
            if "credit_balance_npr" not in customer_columns:
                if "credit_balance" in customer_columns:
                    conn.execute(text(
                        "ALTER TABLE customers RENAME COLUMN credit_balance TO credit_balance_npr"
                    ))
                    changes.append("customers.credit_balance -> credit_balance_npr")
                else:
                    conn.execute(text(
                        "ALTER TABLE customers ADD COLUMN credit_balance_npr NUMERIC(14, 2) NOT NULL DEFAULT 0"
                    ))
                    changes.append("customers.credit_balance_npr")
            if not has_currency:
                conn.execute(text(
                    "ALTER TABLE credit_transactions ADD COLUMN currency VARCHAR(3) NOT NULL DEFAULT 'NPR'"
                ))
                changes.append("credit_transactions.currency")
            if "credit_balance_inr" not in customer_columns:
                conn.execute(text(
                    "ALTER TABLE customers ADD COLUMN credit_balance_inr NUMERIC(14, 2) NOT NULL DEFAULT 0"
                ))
                changes.append("customers.credit_balance_inr")
            retyped = conn.execute(text(
                "UPDATE credit_transactions SET transaction_type = 'payment_received' "
                "WHERE transaction_type = 'credit_received'"
            )).rowcount
            if retyped:
                changes.append(f"{retyped} credit_received record(s) -> payment_received")

        if not changes:
            print("Migration already applied: credit is currency-aware")
            return
        for change in changes:
            print(f"  {change}")

        print("Checking customer balances against credit history...")
        credit_service = CreditService(db)
        mismatched = [
            customer for customer in db.list_customers()
            if not credit_service.balances_consistent(customer.id)
        ]
        for customer in mismatched:
            recomputed = credit_service.recompute_balances(customer.id)
            print(
                f"  Customer {customer.id} ({customer.name}): stored NPR "
                f"{customer.credit_balance_npr}, history says "
                + ", ".join(f"{c.value} {amount}" for c, amount in recomputed.items())
            )
        if not mismatched:
            print("  All balances match")

        print("Migration completed successfully!")

    except Exception as e:
        print(f"Migration failed: {e}")
        raise
    finally:
        db.disconnect()


def main():
    """Main entry point for migration script."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Migrate database to currency-aware customer credit"
    )
    parser.add_argument(
        "--db-path",
        type=str,
        help="Path to database file (overrides EXLEDGER_DB_PATH environment variable)",
    )
    args = parser.parse_args()

    try:
        migrate_database(database_path=args.db_path)
        return 0
    except Exception as e:
        print(f"\nMigration failed: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
