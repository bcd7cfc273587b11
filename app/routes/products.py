from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database.connection import get_db
from app.schemas.product import (
    PricingTierSchema,
    PricingTierUpdate,
    ProductResponse,
    ReorderSuggestion,
    StockReconciliation,
    StockUpdateRequest,
)
from app.services.product_service import (
    get_pricing_tiers,
    get_product,
    get_products,
    get_products_by_category,
    get_reorder_suggestion,
    get_stock_reconciliation,
    search_products,
    update_pricing_tier,
    update_stock,
)

router = APIRouter(prefix="/products", tags=["Products & Stock"])

# LIST
@router.get("/", response_model=list[ProductResponse])
def list_all(category: Optional[str] = None, db: Session = Depends(get_db)):
    if category:
        return get_products_by_category(db, category)
    return get_products(db)

# SEARCH
@router.get("/search", response_model=list[ProductResponse])
def search(q: str, db: Session = Depends(get_db)):
    return search_products(db, q)

# GET BY ID
@router.get("/{product_id}", response_model=ProductResponse)
def get(product_id: int, db: Session = Depends(get_db)):
    return get_product(db, product_id)

# STOCK UPDATE (legacy, batch-unaware)
@router.post("/{product_id}/stock", response_model=ProductResponse)
def adjust_stock(product_id: int, body: StockUpdateRequest, db: Session = Depends(get_db)):
    return update_stock(db, product_id, body.quantity, body.operation)

# REORDER SUGGESTION
@router.get("/{product_id}/reorder-suggestion", response_model=ReorderSuggestion)
def reorder_suggestion(product_id: int, db: Session = Depends(get_db)):
    return get_reorder_suggestion(db, product_id)

# STOCK VS BATCHES
@router.get("/{product_id}/stock-reconciliation", response_model=StockReconciliation)
def stock_reconciliation(product_id: int, db: Session = Depends(get_db)):
    return get_stock_reconciliation(db, product_id)

# PRICING TIERS
@router.get("/{product_id}/pricing-tiers", response_model=list[PricingTierSchema])
def pricing_tiers(product_id: int, db: Session = Depends(get_db)):
    return get_pricing_tiers(db, product_id)


@router.put("/{product_id}/pricing-tiers/{tier}", response_model=list[PricingTierSchema])
def set_pricing_tier(
    product_id: int,
    tier: str,
    body: PricingTierUpdate,
    db: Session = Depends(get_db),
):
    return update_pricing_tier(db, product_id, tier, body.price_per_unit)
