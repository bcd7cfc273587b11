from sqlalchemy import Column, Integer, String, Date, ForeignKey
from sqlalchemy.orm import relationship

from app.database.connection import Base


class Batch(Base):
    __tablename__ = "batches"
    # ids are never reused, even across products
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(
        Integer, ForeignKey("products.id"), nullable=False, index=True
    )
    batch_number = Column(String, nullable=False, index=True)  # lot no., not unique
    manufacturing_date = Column(Date, nullable=True)
    expiry_date = Column(Date, nullable=False, index=True)
    received_date = Column(Date, nullable=True)
    quantity = Column(Integer, nullable=False, default=0)
    supplier_name = Column(String, nullable=True)
    quality_check_status = Column(String, default="pending")  # pending / passed / failed
    storage_location = Column(String, nullable=True)

    product = relationship("Product", back_populates="batches")
