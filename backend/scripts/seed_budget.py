#!/usr/bin/env python3
"""Seed a user's month with a sample budget and a few expenses.

Usage:
    python scripts/seed_budget.py <user_id> [YYYY-MM]
"""

import sys
from datetime import date, timedelta
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

load_dotenv()

from app.database import Database, get_supabase_client  # noqa: E402
from app.schemas.budget import DEFAULT_CATEGORIES, BudgetCategoryInput  # noqa: E402
from app.utils.dates import days_in_month, format_local_date, get_month_key, parse_month_key  # noqa: E402


MONTHLY_INCOME = 5000.0

# (preset name, allocated amount)
ALLOCATIONS = [
    ("Housing", 1500.0),
    ("Groceries", 600.0),
    ("Food & Dining", 250.0),
    ("Transportation", 300.0),
    ("Utilities", 200.0),
    ("Entertainment", 150.0),
    ("Savings", 1000.0),
]

# (day of month, amount, description, preset name)
SAMPLE_EXPENSES = [
    (1, 1500.0, "Rent", "Housing"),
    (3, 82.45, "Weekly groceries", "Groceries"),
    (5, 45.0, "Gas", "Transportation"),
    (7, 38.9, "Dinner with friends", "Food & Dining"),
    (10, 120.0, "Electric bill", "Utilities"),
    (12, 64.2, "Costco run", "Groceries"),
    (14, 22.0, "Movie tickets", "Entertainment"),
]


def _category_id(name: str) -> str:
    return name.lower().replace(" & ", "-").replace(" ", "-")


def build_categories() -> list[BudgetCategoryInput]:
    """Budget categories for the seeded month, styled from the presets."""
    presets = {preset.name: preset for preset in DEFAULT_CATEGORIES}
    categories = []
    for name, allocated in ALLOCATIONS:
        preset = presets[name]
        categories.append(
            BudgetCategoryInput(
                id=_category_id(name),
                name=name,
                allocated_amount=allocated,
                color=preset.color,
                icon=preset.icon,
                is_custom=False,
            )
        )
    return categories


def seed_budget(db: Database, user_id: str, month: str) -> None:
    """Create or replace the month's budget."""
    print(f"Seeding budget for {month}...")
    categories = build_categories()
    db.upsert_budget(
        {
            "user_id": user_id,
            "month": month,
            "monthly_income": MONTHLY_INCOME,
            "categories": [category.model_dump() for category in categories],
        }
    )
    allocated = sum(category.allocated_amount for category in categories)
    print(f"  {len(categories)} categories, {allocated:.2f} of {MONTHLY_INCOME:.2f} allocated")


def seed_transactions(db: Database, user_id: str, month: str) -> None:
    """Insert sample expenses, skipping ones already present."""
    print("Seeding transactions...")
    year, month_number = parse_month_key(month)
    last_day = days_in_month(year, month_number)
    existing = {
        (row["date"], row["description"])
        for row in db.get_transactions(
            user_id,
            date_from=format_local_date(date(year, month_number, 1)),
            date_before=format_local_date(date(year, month_number, last_day) + timedelta(days=1)),
        )
    }

    total = 0
    for day, amount, description, category_name in SAMPLE_EXPENSES:
        expense_date = format_local_date(date(year, month_number, min(day, last_day)))
        if (expense_date, description) in existing:
            continue
        try:
            db.create_transaction(
                {
                    "user_id": user_id,
                    "amount": amount,
                    "description": description,
                    "category_id": _category_id(category_name),
                    "category_name": category_name,
                    "date": expense_date,
                    "is_ai_categorized": False,
                }
            )
            total += 1
        except Exception as e:
            print(f"  Error seeding transaction {description}: {e}")

    print(f"  Seeded {total} new transactions")


def main():
    """Main entry point."""
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    user_id = sys.argv[1]
    month = sys.argv[2] if len(sys.argv) > 2 else get_month_key(date.today())

    try:
        parse_month_key(month)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print("Allocatr - Budget Seeder")
    print("=" * 40)

    db = Database(get_supabase_client())
    seed_budget(db, user_id, month)
    seed_transactions(db, user_id, month)

    print("=" * 40)
    print("Seeding complete!")


if __name__ == "__main__":
    main()
