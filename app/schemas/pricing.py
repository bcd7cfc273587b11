from typing import List, Optional

from pydantic import BaseModel, Field

from app.enums.pricing import AdjustmentType, DiscountType


class PriceCalculationRequest(BaseModel):
    product_id: int
    customer_id: int
    quantity: int = Field(default=1, ge=1)
    base_price: float = Field(ge=0)


class AppliedDiscount(BaseModel):
    rule_id: int
    rule_name: str
    type: DiscountType
    discount: float
    description: str


class PricingResult(BaseModel):
    original_price: float
    final_price: float
    total_discount: float
    applied_discounts: List[AppliedDiscount] = []
    savings_percent: str


class ProductPricingResult(PricingResult):
    product_id: int
    customer_id: int
    quantity: int
    price_tier: Optional[str] = None


class VolumeBreakpoint(BaseModel):
    quantity: int
    discount: float
    discount_type: AdjustmentType
    description: str
