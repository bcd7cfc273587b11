from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.enums.inventory import StockOperation


class PricingTierSchema(BaseModel):
    tier: str
    price_per_unit: float = Field(ge=0)


class PricingTierUpdate(BaseModel):
    price_per_unit: float = Field(ge=0)


class ProductBase(BaseModel):
    name: str
    sku: Optional[str] = None
    category: str
    brand: Optional[str] = None
    base_uom: str = "pcs"
    current_stock: int = 0
    reorder_level: int = 0
    pricing: List[PricingTierSchema] = []


class ProductResponse(ProductBase):
    id: int
    status: str

    model_config = ConfigDict(from_attributes=True)


class ReorderSuggestion(ProductResponse):
    suggested_order_quantity: int
    estimated_cost: Optional[float] = None


class StockUpdateRequest(BaseModel):
    quantity: int = Field(ge=0)
    operation: StockOperation = StockOperation.add


class StockReconciliation(BaseModel):
    product_id: int
    current_stock: int
    batch_total: int
    difference: int
    is_consistent: bool
