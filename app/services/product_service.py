import logging
from threading import Lock
from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.enums.inventory import ProductStatus, StockOperation
from app.models.batch import Batch
from app.models.product import Product
from app.schemas.pricing import ProductPricingResult
from app.schemas.product import ReorderSuggestion, ProductResponse, StockReconciliation
from app.services.identifiers import parse_id
from app.services.pricing_service.calculate_price import calculate_optimal_price

logger = logging.getLogger(__name__)

# Guards every read-check-write on current_stock and batch quantities.
STOCK_LOCK = Lock()


# --------------------------
# GET PRODUCT
# --------------------------
def get_product(db: Session, product_id) -> Product:
    product_id = parse_id(product_id, "Product")
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product

# --------------------------
# LIST / SEARCH PRODUCTS
# --------------------------
def get_products(db: Session) -> List[Product]:
    return db.query(Product).order_by(Product.id).all()


def search_products(db: Session, query: str) -> List[Product]:
    term = f"%{query.lower()}%"
    return (
        db.query(Product)
        .filter(
            or_(
                func.lower(Product.name).like(term),
                func.lower(Product.category).like(term),
                func.lower(Product.brand).like(term),
            )
        )
        .order_by(Product.id)
        .all()
    )


def get_products_by_category(db: Session, category: str) -> List[Product]:
    return db.query(Product).filter(Product.category == category).order_by(Product.id).all()

# --------------------------
# LEGACY STOCK PATH
# --------------------------
def _refresh_status(product: Product) -> None:
    if product.current_stock <= product.reorder_level:
        product.status = ProductStatus.low_stock.value
    else:
        product.status = ProductStatus.active.value


def update_stock(db: Session, product_id, quantity: int, operation="add") -> Product:
    """
    Adjust current_stock without touching any batch.

    `subtract` never takes stock below zero, it clamps silently instead of
    failing (batch allocation is the strict path).
    """
    operation = StockOperation(operation)
    with STOCK_LOCK:
        product = get_product(db, product_id)

        if operation == StockOperation.add:
            product.current_stock += quantity
        else:
            product.current_stock = max(0, product.current_stock - quantity)

        _refresh_status(product)
        db.commit()
        db.refresh(product)

    logger.info(
        "Stock %s %s for product %s -> %s (%s)",
        operation.value, quantity, product.id, product.current_stock, product.status,
    )
    return product

# --------------------------
# REORDER POINTS
# --------------------------
def get_low_stock(db: Session) -> List[Product]:
    return (
        db.query(Product)
        .filter(Product.current_stock <= Product.reorder_level)
        .order_by(Product.id)
        .all()
    )


def suggested_order_quantity(product: Product) -> int:
    return max(product.reorder_level * 2 - product.current_stock, product.reorder_level)


def check_reorder_points(db: Session) -> List[ReorderSuggestion]:
    return [
        ReorderSuggestion(
            **ProductResponse.model_validate(p).model_dump(),
            suggested_order_quantity=suggested_order_quantity(p),
        )
        for p in get_low_stock(db)
    ]


def get_reorder_suggestion(db: Session, product_id) -> ReorderSuggestion:
    product = get_product(db, product_id)
    suggested = suggested_order_quantity(product)

    estimated_cost = None
    if product.pricing:
        estimated_cost = suggested * float(product.pricing[0]["price_per_unit"])

    return ReorderSuggestion(
        **ProductResponse.model_validate(product).model_dump(),
        suggested_order_quantity=suggested,
        estimated_cost=estimated_cost,
    )


def get_stock_reconciliation(db: Session, product_id) -> StockReconciliation:
    """Compare current_stock with the sum of its batch quantities (read only)."""
    product = get_product(db, product_id)
    batch_total = (
        db.query(func.coalesce(func.sum(Batch.quantity), 0))
        .filter(Batch.product_id == product.id)
        .scalar()
    )
    difference = product.current_stock - int(batch_total)
    if difference:
        logger.warning(
            "Product %s stock %s differs from batch total %s",
            product.id, product.current_stock, batch_total,
        )
    return StockReconciliation(
        product_id=product.id,
        current_stock=product.current_stock,
        batch_total=int(batch_total),
        difference=difference,
        is_consistent=difference == 0,
    )

# --------------------------
# PRICING TIERS
# --------------------------
def get_pricing_tiers(db: Session, product_id) -> List[dict]:
    return list(get_product(db, product_id).pricing or [])


def update_pricing_tier(db: Session, product_id, tier: str, price_per_unit: float) -> List[dict]:
    product = get_product(db, product_id)

    # JSON column: assign a new list so the change is tracked
    pricing = [dict(p) for p in product.pricing or []]
    for entry in pricing:
        if entry["tier"] == tier:
            entry["price_per_unit"] = price_per_unit
            break
    else:
        pricing.append({"tier": tier, "price_per_unit": price_per_unit})

    product.pricing = pricing
    db.commit()
    db.refresh(product)
    return list(product.pricing)


def _base_price_for(product: Product) -> tuple:
    pricing = product.pricing or []
    for entry in pricing:
        if entry["tier"] == "retail":
            return entry["tier"], float(entry["price_per_unit"])
    if pricing:
        return pricing[0]["tier"], float(pricing[0]["price_per_unit"])
    return None, None


def calculate_product_price(
    db: Session,
    product_id,
    customer_id,
    quantity: int = 1,
) -> ProductPricingResult:
    """Price a product from its retail tier (else its first tier)."""
    product = get_product(db, product_id)
    tier, base_price = _base_price_for(product)
    if base_price is None:
        raise HTTPException(status_code=400, detail="Product has no pricing tiers")

    result = calculate_optimal_price(db, product.id, customer_id, quantity, base_price)
    return ProductPricingResult(
        **result.model_dump(),
        product_id=product.id,
        customer_id=parse_id(customer_id, "Customer"),
        quantity=quantity,
        price_tier=tier,
    )
