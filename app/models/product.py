from sqlalchemy import Column, String, Integer, JSON
from sqlalchemy.orm import relationship

from app.database.connection import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    sku = Column(String, nullable=True, index=True)
    category = Column(String, nullable=False, index=True)
    brand = Column(String, nullable=True)
    base_uom = Column(String, default="pcs")

    current_stock = Column(Integer, nullable=False, default=0)
    reorder_level = Column(Integer, nullable=False, default=0)
    status = Column(String, default="active")  # active / low_stock

    # e.g. [{"tier": "retail", "price_per_unit": 120.0}, ...]
    pricing = Column(JSON, default=list)

    batches = relationship(
        "Batch",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="Batch.id",
    )
