from datetime import date, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database.connection import Base, make_engine
from app.models.batch import Batch
from app.models.pricing_rule import PricingRule
from app.models.product import Product

TEST_DB_URL = "sqlite://"

engine = create_engine(
    TEST_DB_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db():
    # services commit, so every test gets freshly created tables
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def session_factory(tmp_path):
    """Sessions on a file-backed database, one connection each, like real requests."""
    file_engine = make_engine(f"sqlite:///{tmp_path / 'stock.db'}")
    Base.metadata.create_all(bind=file_engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=file_engine)
    finally:
        file_engine.dispose()


@pytest.fixture()
def make_product(db):
    def _make(product_id=None, current_stock=100, reorder_level=20, batches=(), **overrides):
        fields = dict(
            name="Test Product",
            sku="TEST-SKU",
            category="test",
            brand="Acme",
            base_uom="pcs",
            current_stock=current_stock,
            reorder_level=reorder_level,
            status="active",
            pricing=[
                {"tier": "retail", "price_per_unit": 100.0},
                {"tier": "wholesale", "price_per_unit": 90.0},
            ],
        )
        fields.update(overrides)
        product = Product(id=product_id, **fields)
        for b in batches:
            product.batches.append(Batch(**b))
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture()
def make_rule(db):
    def _make(**overrides):
        fields = dict(
            name="Test rule",
            description=None,
            rule_type="customer_tier",
            discount_type="volume",
            is_active=True,
            priority=1,
            applicable_products=[1],
            applicable_customers=[],
            customer_tiers=[],
            volume_brackets=[],
            discount_value=None,
            min_quantity=None,
            valid_from=None,
            valid_until=None,
            created_date=date.today(),
            last_modified=date.today(),
        )
        fields.update(overrides)
        rule = PricingRule(**fields)
        db.add(rule)
        db.commit()
        db.refresh(rule)
        return rule

    return _make


def _batch_fields(**overrides):
    fields = dict(
        batch_number="LOT-001",
        manufacturing_date=date.today() - timedelta(days=30),
        expiry_date=date.today() + timedelta(days=180),
        received_date=date.today() - timedelta(days=20),
        quantity=50,
        supplier_name="Acme Supplies",
        quality_check_status="passed",
        storage_location="WH-1",
    )
    fields.update(overrides)
    return fields


@pytest.fixture()
def batch_fields():
    return _batch_fields
