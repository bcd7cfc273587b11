from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database.connection import get_db
from app.schemas.pricing_rule import (
    PricingRuleCreate,
    PricingRuleDraft,
    PricingRuleResponse,
    PricingRuleUpdate,
    ValidationResult,
)
from app.services.pricing_service.calculate_price import validate_pricing_rule
from app.services.pricing_service.pricing_service import (
    activate_pricing_rule,
    create_pricing_rule,
    deactivate_pricing_rule,
    delete_pricing_rule,
    get_active_rules,
    get_pricing_rule,
    get_pricing_rules,
    get_rules_by_customer,
    get_rules_by_product,
    update_pricing_rule,
)

router = APIRouter(prefix="/pricing-rules", tags=["Pricing Rules"])


@router.post("/", response_model=PricingRuleResponse, status_code=201)
def create_rule(rule: PricingRuleCreate, db: Session = Depends(get_db)):
    return create_pricing_rule(db, rule)


@router.get("/", response_model=list[PricingRuleResponse])
def list_rules(skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    return get_pricing_rules(db, skip=skip, limit=limit)


@router.post("/validate", response_model=ValidationResult)
def validate_rule(rule: PricingRuleDraft):
    """
    Check a rule draft. Never saves anything; invalid drafts
    come back as is_valid=false with the list of problems.
    """
    return validate_pricing_rule(rule)


@router.get("/active", response_model=list[PricingRuleResponse])
def list_active_rules(db: Session = Depends(get_db)):
    return get_active_rules(db)


@router.get("/by-product/{product_id}", response_model=list[PricingRuleResponse])
def rules_for_product(product_id: int, db: Session = Depends(get_db)):
    return get_rules_by_product(db, product_id)


@router.get("/by-customer/{customer_id}", response_model=list[PricingRuleResponse])
def rules_for_customer(customer_id: int, db: Session = Depends(get_db)):
    return get_rules_by_customer(db, customer_id)


@router.get("/{rule_id}", response_model=PricingRuleResponse)
def get_rule(rule_id: int, db: Session = Depends(get_db)):
    return get_pricing_rule(db, rule_id)


@router.put("/{rule_id}", response_model=PricingRuleResponse)
def update_rule(rule_id: int, rule: PricingRuleUpdate, db: Session = Depends(get_db)):
    return update_pricing_rule(db, rule_id, rule)


@router.delete("/{rule_id}")
def delete_rule(rule_id: int, db: Session = Depends(get_db)):
    delete_pricing_rule(db, rule_id)
    return {"message": "Pricing rule deleted"}


@router.post("/{rule_id}/activate", response_model=PricingRuleResponse)
def activate_rule(rule_id: int, db: Session = Depends(get_db)):
    return activate_pricing_rule(db, rule_id)


@router.post("/{rule_id}/deactivate", response_model=PricingRuleResponse)
def deactivate_rule(rule_id: int, db: Session = Depends(get_db)):
    return deactivate_pricing_rule(db, rule_id)
