import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Optional

from sqlalchemy.orm import Session

from app.models.batch import Batch
from app.models.pricing_rule import PricingRule
from app.models.product import Product

logger = logging.getLogger(__name__)

PRODUCTS_FILE = "products.json"
PRICING_RULES_FILE = "pricing_rules.json"


def _load(path: Path) -> list:
    with path.open(encoding="utf-8") as fh:
        return json.load(fh)


def _date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


def _datetime(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def seed_products(db: Session, path: Path) -> int:
    """Insert fixture products with their batches; batch ids come from the database."""
    count = 0
    for row in _load(path):
        batches = row.pop("batches", [])
        product = Product(**row)
        for b in batches:
            product.batches.append(
                Batch(
                    batch_number=b["batch_number"],
                    manufacturing_date=_date(b.get("manufacturing_date")),
                    expiry_date=_date(b["expiry_date"]),
                    received_date=_date(b.get("received_date")),
                    quantity=b["quantity"],
                    supplier_name=b.get("supplier_name"),
                    quality_check_status=b.get("quality_check_status", "pending"),
                    storage_location=b.get("storage_location"),
                )
            )
        db.add(product)
        db.flush()
        count += 1
    return count


def seed_pricing_rules(db: Session, path: Path) -> int:
    count = 0
    # the database assigns rule ids, in fixture order
    for row in sorted(_load(path), key=lambda r: r.get("id", 0)):
        row.pop("id", None)
        for key in ("valid_from", "valid_until"):
            row[key] = _datetime(row.get(key))
        for key in ("created_date", "last_modified"):
            row[key] = _date(row.get(key))
        db.add(PricingRule(**row))
        count += 1
    return count


def seed_database(db: Session, fixtures_dir: Path) -> None:
    """Load the fixture catalog once; a non-empty database is left alone."""
    if db.query(Product).first() is not None:
        logger.info("Products already present, skipping seed")
        return

    fixtures_dir = Path(fixtures_dir)
    products = seed_products(db, fixtures_dir / PRODUCTS_FILE)
    rules = seed_pricing_rules(db, fixtures_dir / PRICING_RULES_FILE)
    db.commit()
    logger.info("Seeded %d products and %d pricing rules from %s", products, rules, fixtures_dir)
