import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from fastapi import HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.pricing_rule import PricingRule
from app.schemas.pricing import AppliedDiscount, PricingResult, VolumeBreakpoint
from app.schemas.pricing_rule import ValidationResult
from app.services.pricing_service.pricing_service import (
    applies_to_customer,
    applies_to_product,
    get_active_rules,
    to_naive_utc,
)

logger = logging.getLogger(__name__)


# ===================== RULE SELECTION =====================


def _get_applicable_rules(
    db: Session,
    product_id,
    customer_id,
    now: Optional[datetime] = None,
) -> List[PricingRule]:
    """
    Active rules that apply to both the product and the customer.

    NOTE: a rule with no customer tiers applies to every customer, so a rule
    saved without tiers behaves like a global discount.
    """
    product_rules = [r for r in get_active_rules(db, now) if applies_to_product(r, product_id)]
    return [r for r in product_rules if applies_to_customer(r, customer_id)]


# ===================== PRICING ENGINE =====================


def calculate_optimal_price(
    db: Session,
    product_id,
    customer_id,
    quantity: int,
    base_price: Optional[float],
    now: Optional[datetime] = None,
) -> PricingResult:
    """
    Price one unit of a product for a customer at a given quantity.

    Discounts stack in a fixed order, each computed on the running price:
    1. Volume (first matching bracket of each rule)
    2. Customer specific
    3. Promotional (subject to the rule's min_quantity)

    The rule `priority` field does not affect this order.
    """
    if base_price is None:
        raise HTTPException(status_code=400, detail="Base price is required")

    base_price = float(base_price)
    rules = _get_applicable_rules(db, product_id, customer_id, now)

    final_price = base_price
    applied: List[AppliedDiscount] = []

    # ---- 1) Volume brackets ----
    for rule in (r for r in rules if r.discount_type == "volume"):
        bracket = _match_bracket(rule.volume_brackets or [], quantity)
        if bracket is None:
            continue
        amount = _discount_amount(
            final_price, bracket.get("discount_type") or "percentage", bracket["discount_value"]
        )
        final_price -= amount
        applied.append(
            AppliedDiscount(
                rule_id=rule.id,
                rule_name=rule.name,
                type="volume",
                discount=amount,
                description=_bracket_description(bracket),
            )
        )

    # ---- 2) Customer specific ----
    for rule in (r for r in rules if r.discount_type == "customer_specific"):
        value = rule.discount_value or {}
        amount = _discount_amount(final_price, value.get("type"), value.get("value"))
        final_price -= amount
        applied.append(
            AppliedDiscount(
                rule_id=rule.id,
                rule_name=rule.name,
                type="customer_specific",
                discount=amount,
                description=f"Customer-specific discount: {_format_value(value)}",
            )
        )

    # ---- 3) Promotional ----
    for rule in (r for r in rules if r.discount_type == "promotional"):
        if quantity < (rule.min_quantity or 0):
            continue
        value = rule.discount_value or {}
        amount = _discount_amount(final_price, value.get("type"), value.get("value"))
        final_price -= amount
        applied.append(
            AppliedDiscount(
                rule_id=rule.id,
                rule_name=rule.name,
                type="promotional",
                discount=amount,
                description=rule.description or f"Promotional discount: {_format_value(value)}",
            )
        )

    final_price = max(0.0, final_price)
    total_discount = base_price - final_price

    if base_price > 0:
        savings_percent = f"{total_discount / base_price * 100:.1f}"
    else:
        savings_percent = "0"

    logger.debug(
        "Priced product=%s customer=%s qty=%s: %.2f -> %.2f (%d rules)",
        product_id, customer_id, quantity, base_price, final_price, len(applied),
    )

    return PricingResult(
        original_price=base_price,
        final_price=final_price,
        total_discount=total_discount,
        applied_discounts=applied,
        savings_percent=savings_percent,
    )


def get_volume_breakpoints(
    db: Session,
    product_id,
    customer_id,
    now: Optional[datetime] = None,
) -> List[VolumeBreakpoint]:
    breakpoints: List[VolumeBreakpoint] = []
    for rule in _get_applicable_rules(db, product_id, customer_id, now):
        if rule.discount_type != "volume":
            continue
        for bracket in rule.volume_brackets or []:
            breakpoints.append(
                VolumeBreakpoint(
                    quantity=bracket["min_quantity"],
                    discount=bracket["discount_value"],
                    discount_type=bracket.get("discount_type") or "percentage",
                    description=_bracket_description(bracket),
                )
            )
    return sorted(breakpoints, key=lambda b: b.quantity)


# ===================== VALIDATION =====================


def validate_pricing_rule(rule_data: Union[BaseModel, Dict[str, Any]]) -> ValidationResult:
    """Check a rule draft without saving it."""
    if isinstance(rule_data, BaseModel):
        rule_data = rule_data.model_dump()

    errors: List[str] = []

    name = rule_data.get("name")
    if not name or not str(name).strip():
        errors.append("Rule name is required")

    discount_type = rule_data.get("discount_type")
    if not discount_type:
        errors.append("Discount type is required")

    if discount_type == "volume" and not rule_data.get("volume_brackets"):
        errors.append("Volume brackets are required for volume discount rules")

    valid_from = _window_bound(rule_data.get("valid_from"), "Valid from", errors)
    valid_until = _window_bound(rule_data.get("valid_until"), "Valid until", errors)
    if valid_from and valid_until and valid_from >= valid_until:
        errors.append("Valid from date must be before valid until date")

    return ValidationResult(is_valid=not errors, errors=errors)


# ===================== DISCOUNT HELPERS =====================


def _match_bracket(brackets: List[Dict[str, Any]], quantity: int) -> Optional[Dict[str, Any]]:
    """First bracket (in list order) whose range contains quantity."""
    for bracket in brackets:
        max_q = bracket.get("max_quantity")
        if quantity >= bracket["min_quantity"] and (max_q is None or quantity <= max_q):
            return bracket
    return None


def _discount_amount(price: float, discount_type: Optional[str], value) -> float:
    """
    percentage: price=100, value=10 -> 10
    fixed:      price=100, value=10 -> 10
    """
    value = float(value or 0.0)
    if discount_type == "percentage":
        return price * value / 100.0
    return value


def _format_value(value: Dict[str, Any]) -> str:
    suffix = "%" if value.get("type") == "percentage" else f" {settings.CURRENCY_SYMBOL}"
    return f"{_format_number(value.get('value'))}{suffix}"


def _bracket_description(bracket: Dict[str, Any]) -> str:
    value = {
        "type": bracket.get("discount_type") or "percentage",
        "value": bracket.get("discount_value"),
    }
    return f"{_format_value(value)} off for {bracket['min_quantity']}+ units"


def _format_number(value) -> str:
    value = float(value or 0)
    return str(int(value)) if value.is_integer() else f"{value:g}"


def _as_datetime(value) -> datetime:
    if not isinstance(value, datetime):
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text)
    return to_naive_utc(value)


def _window_bound(value, label: str, errors: List[str]) -> Optional[datetime]:
    """Parsed validity bound, or None with an error noted when it is not a date."""
    if value is None or value == "":
        return None
    try:
        return _as_datetime(value)
    except (TypeError, ValueError):
        errors.append(f"{label} date is not a valid date")
        return None
