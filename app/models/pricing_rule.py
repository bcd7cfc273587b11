from sqlalchemy import Column, Integer, String, JSON, Boolean, DateTime, Date

from app.database.connection import Base


class PricingRule(Base):
    __tablename__ = "pricing_rules"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    rule_type = Column(String, nullable=False)  # global, customer_tier, customer_specific, promotional, seasonal
    discount_type = Column(String, nullable=False)  # volume, customer_specific, promotional
    is_active = Column(Boolean, default=True)
    # stored for display only, application order is fixed by discount_type
    priority = Column(Integer, default=1)

    applicable_products = Column(JSON, default=list)
    applicable_customers = Column(JSON, default=list)
    customer_tiers = Column(JSON, default=list)

    # volume rules: [{"min_quantity", "max_quantity", "discount_value", "discount_type"}]
    volume_brackets = Column(JSON, default=list)
    # customer_specific / promotional rules: {"type": "percentage", "value": 5}
    discount_value = Column(JSON, nullable=True)
    min_quantity = Column(Integer, nullable=True)

    valid_from = Column(DateTime, nullable=True)
    valid_until = Column(DateTime, nullable=True)
    created_date = Column(Date)
    last_modified = Column(Date)
