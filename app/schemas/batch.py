from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.enums.inventory import QualityStatus


class BatchBase(BaseModel):
    batch_number: str
    manufacturing_date: Optional[date] = None
    expiry_date: date
    quantity: int
    supplier_name: Optional[str] = None
    quality_check_status: QualityStatus = QualityStatus.pending
    storage_location: Optional[str] = None


class BatchCreate(BatchBase):
    quantity: int = Field(gt=0)


class BatchUpdate(BaseModel):
    batch_number: Optional[str] = None
    manufacturing_date: Optional[date] = None
    expiry_date: Optional[date] = None
    quantity: Optional[int] = Field(default=None, ge=0)
    supplier_name: Optional[str] = None
    storage_location: Optional[str] = None


class BatchResponse(BatchBase):
    id: int
    product_id: int
    received_date: Optional[date] = None

    model_config = ConfigDict(from_attributes=True)


class BatchWithProduct(BatchResponse):
    product_name: str
    product_category: Optional[str] = None


class ExpiringBatch(BatchResponse):
    product_name: str
    days_to_expiry: int


# ---------- Allocation ----------

class AllocationRequest(BaseModel):
    quantity: int = Field(gt=0)


class AllocationReceipt(BaseModel):
    batch_id: int
    batch_number: str
    allocated_quantity: int
    expiry_date: date


class QualityStatusUpdate(BaseModel):
    status: QualityStatus
