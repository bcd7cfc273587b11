from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.enums.pricing import AdjustmentType, DiscountType, RuleType


class VolumeBracketSchema(BaseModel):
    min_quantity: int = Field(ge=0)
    max_quantity: Optional[int] = None
    discount_value: float = Field(ge=0)
    discount_type: AdjustmentType = AdjustmentType.percentage


class DiscountValueSchema(BaseModel):
    type: AdjustmentType = AdjustmentType.percentage
    value: float = Field(default=0.0, ge=0)


class PricingRuleBase(BaseModel):
    name: str
    description: Optional[str] = None
    rule_type: RuleType
    discount_type: DiscountType
    is_active: bool = True
    priority: int = 1
    applicable_products: List[int] = []
    applicable_customers: List[int] = []
    customer_tiers: List[str] = []
    volume_brackets: List[VolumeBracketSchema] = []
    discount_value: Optional[DiscountValueSchema] = None
    min_quantity: Optional[int] = None
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None


class PricingRuleCreate(PricingRuleBase):
    pass


class PricingRuleUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    rule_type: Optional[RuleType] = None
    discount_type: Optional[DiscountType] = None
    is_active: Optional[bool] = None
    priority: Optional[int] = None
    applicable_products: Optional[List[int]] = None
    applicable_customers: Optional[List[int]] = None
    customer_tiers: Optional[List[str]] = None
    volume_brackets: Optional[List[VolumeBracketSchema]] = None
    discount_value: Optional[DiscountValueSchema] = None
    min_quantity: Optional[int] = None
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None


class PricingRuleResponse(PricingRuleBase):
    id: int
    created_date: Optional[date] = None
    last_modified: Optional[date] = None

    model_config = ConfigDict(from_attributes=True)


# ---------- Validation ----------

class PricingRuleDraft(BaseModel):
    """Unvalidated rule payload from the rule editor."""

    name: Optional[str] = None
    discount_type: Optional[str] = None
    volume_brackets: Optional[List[dict]] = None
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None

    model_config = ConfigDict(extra="allow")


class ValidationResult(BaseModel):
    is_valid: bool
    errors: List[str] = []
