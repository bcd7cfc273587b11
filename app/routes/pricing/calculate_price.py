import logging
from time import perf_counter

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database.connection import get_db
from app.schemas.pricing import (
    PriceCalculationRequest,
    PricingResult,
    ProductPricingResult,
    VolumeBreakpoint,
)
from app.services.pricing_service.calculate_price import (
    calculate_optimal_price,
    get_volume_breakpoints,
)
from app.services.product_service import calculate_product_price

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Pricing & Calculation"])

SLOW_CALCULATION_MS = 30.0


@router.post("/pricing/calculate", response_model=PricingResult)
def calculate_price(body: PriceCalculationRequest, db: Session = Depends(get_db)):
    """
    Final unit price for a caller-supplied base price.

    Discounts apply in order:
    1. Volume brackets
    2. Customer specific
    3. Promotional
    """
    start = perf_counter()
    result = calculate_optimal_price(
        db=db,
        product_id=body.product_id,
        customer_id=body.customer_id,
        quantity=body.quantity,
        base_price=body.base_price,
    )
    duration_ms = (perf_counter() - start) * 1000.0
    if duration_ms > SLOW_CALCULATION_MS:
        logger.warning(
            "Price calculation for product %s took %.2f ms (quantity=%s)",
            body.product_id, duration_ms, body.quantity,
        )
    return result


@router.get("/pricing/volume-breakpoints", response_model=list[VolumeBreakpoint])
def volume_breakpoints(product_id: int, customer_id: int, db: Session = Depends(get_db)):
    return get_volume_breakpoints(db, product_id, customer_id)


@router.get("/products/{product_id}/calculate-price", response_model=ProductPricingResult)
def calculate_price_for_product(
    product_id: int,
    customer_id: int,
    quantity: int = 1,
    db: Session = Depends(get_db),
):
    """Price a catalog product from its retail tier."""
    if quantity <= 0:
        raise HTTPException(status_code=400, detail="Quantity must be positive")
    return calculate_product_price(db, product_id, customer_id, quantity)
