import logging
from datetime import date, datetime, timezone
from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.models.pricing_rule import PricingRule
from app.schemas.pricing_rule import PricingRuleCreate, PricingRuleUpdate
from app.services.identifiers import parse_id, try_parse_id

logger = logging.getLogger(__name__)


_DATETIME_FIELDS = ("valid_from", "valid_until")


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def create_pricing_rule(db: Session, rule: PricingRuleCreate) -> PricingRule:
    today = date.today()
    db_rule = PricingRule(**rule.model_dump(mode="json", exclude=set(_DATETIME_FIELDS)))
    db_rule.valid_from = to_naive_utc(rule.valid_from)
    db_rule.valid_until = to_naive_utc(rule.valid_until)
    # new rules always start active
    db_rule.is_active = True
    db_rule.created_date = today
    db_rule.last_modified = today
    db.add(db_rule)
    db.commit()
    db.refresh(db_rule)
    logger.info("Created pricing rule %s (%s)", db_rule.id, db_rule.name)
    return db_rule


def get_pricing_rules(db: Session, skip: int = 0, limit: int = 100) -> List[PricingRule]:
    return db.query(PricingRule).order_by(PricingRule.id).offset(skip).limit(limit).all()


def get_pricing_rule(db: Session, rule_id) -> PricingRule:
    rule_id = parse_id(rule_id, "Pricing rule")
    db_rule = db.query(PricingRule).filter(PricingRule.id == rule_id).first()
    if not db_rule:
        raise HTTPException(status_code=404, detail="Pricing rule not found")
    return db_rule


def update_pricing_rule(db: Session, rule_id, rule_update: PricingRuleUpdate) -> PricingRule:
    db_rule = get_pricing_rule(db, rule_id)

    for key, value in rule_update.model_dump(mode="json", exclude_unset=True).items():
        if key in _DATETIME_FIELDS:
            value = to_naive_utc(getattr(rule_update, key))
        setattr(db_rule, key, value)

    db_rule.last_modified = date.today()
    db.commit()
    db.refresh(db_rule)
    return db_rule


def delete_pricing_rule(db: Session, rule_id) -> bool:
    db_rule = get_pricing_rule(db, rule_id)
    db.delete(db_rule)
    db.commit()
    logger.info("Deleted pricing rule %s", db_rule.id)
    return True


def deactivate_pricing_rule(db: Session, rule_id) -> PricingRule:
    db_rule = get_pricing_rule(db, rule_id)
    db_rule.is_active = False
    db_rule.last_modified = date.today()
    db.commit()
    db.refresh(db_rule)
    return db_rule


def activate_pricing_rule(db: Session, rule_id) -> PricingRule:
    db_rule = get_pricing_rule(db, rule_id)
    db_rule.is_active = True
    db_rule.last_modified = date.today()
    db.commit()
    db.refresh(db_rule)
    return db_rule


# ---------- LOOKUPS ----------

def is_rule_active(rule: PricingRule, now: Optional[datetime] = None) -> bool:
    now = now or datetime.utcnow()
    if not rule.is_active:
        return False
    if rule.valid_from and rule.valid_from > now:
        return False
    if rule.valid_until and rule.valid_until < now:
        return False
    return True


def get_active_rules(db: Session, now: Optional[datetime] = None) -> List[PricingRule]:
    rules = db.query(PricingRule).filter(PricingRule.is_active.is_(True)).order_by(PricingRule.id).all()
    return [r for r in rules if is_rule_active(r, now)]


def applies_to_product(rule: PricingRule, product_id) -> bool:
    return (
        try_parse_id(product_id) in (rule.applicable_products or [])
        or rule.rule_type == "global"
    )


def applies_to_customer(rule: PricingRule, customer_id) -> bool:
    # A rule without customer tiers is open to every customer.
    return (
        try_parse_id(customer_id) in (rule.applicable_customers or [])
        or not rule.customer_tiers
        or rule.rule_type == "global"
    )


def get_rules_by_product(db: Session, product_id) -> List[PricingRule]:
    return [r for r in get_pricing_rules(db, limit=None) if applies_to_product(r, product_id)]


def get_rules_by_customer(db: Session, customer_id) -> List[PricingRule]:
    customer_id = try_parse_id(customer_id)
    return [
        r
        for r in get_pricing_rules(db, limit=None)
        if customer_id in (r.applicable_customers or []) or r.rule_type == "global"
    ]
