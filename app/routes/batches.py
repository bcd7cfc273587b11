from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database.connection import get_db
from app.schemas.batch import (
    AllocationReceipt,
    AllocationRequest,
    BatchCreate,
    BatchResponse,
    BatchUpdate,
    BatchWithProduct,
    ExpiringBatch,
    QualityStatusUpdate,
)
from app.services.batch_service import (
    allocate_batch,
    create_batch,
    get_all_batches,
    get_batch,
    get_batches,
    get_expiring_soon,
    search_batches,
    update_batch,
    update_quality_status,
)

router = APIRouter(tags=["Batches"])


# ---------- ALL BATCHES ----------

@router.get("/batches", response_model=list[BatchWithProduct])
def list_all_batches(db: Session = Depends(get_db)):
    return get_all_batches(db)


@router.get("/batches/search", response_model=list[BatchWithProduct])
def search(q: str, db: Session = Depends(get_db)):
    return search_batches(db, q)


@router.get("/batches/expiring", response_model=list[ExpiringBatch])
def expiring_soon(days: int = Query(30, ge=0), db: Session = Depends(get_db)):
    """
    Batches expiring within `days`, most urgent first
    (expired ones included with negative days_to_expiry).
    """
    return get_expiring_soon(db, days)


# ---------- PER PRODUCT ----------

@router.get("/products/{product_id}/batches", response_model=list[BatchResponse])
def list_batches(product_id: int, db: Session = Depends(get_db)):
    return get_batches(db, product_id)


@router.post("/products/{product_id}/batches", response_model=BatchResponse, status_code=201)
def receive_batch(product_id: int, data: BatchCreate, db: Session = Depends(get_db)):
    return create_batch(db, product_id, data)


@router.get("/products/{product_id}/batches/{batch_id}", response_model=BatchResponse)
def get_one(product_id: int, batch_id: int, db: Session = Depends(get_db)):
    return get_batch(db, product_id, batch_id)


@router.put("/products/{product_id}/batches/{batch_id}", response_model=BatchResponse)
def edit_batch(product_id: int, batch_id: int, data: BatchUpdate, db: Session = Depends(get_db)):
    return update_batch(db, product_id, batch_id, data)


@router.post(
    "/products/{product_id}/batches/{batch_id}/allocate",
    response_model=AllocationReceipt,
)
def allocate(
    product_id: int,
    batch_id: int,
    body: AllocationRequest,
    db: Session = Depends(get_db),
):
    return allocate_batch(db, product_id, batch_id, body.quantity)


@router.post(
    "/products/{product_id}/batches/{batch_id}/quality",
    response_model=BatchResponse,
)
def set_quality_status(
    product_id: int,
    batch_id: int,
    body: QualityStatusUpdate,
    db: Session = Depends(get_db),
):
    return update_quality_status(db, product_id, batch_id, body.status)
