import logging
import math
from datetime import date, datetime, time, timedelta
from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy import and_, update
from sqlalchemy.orm import Session

from app.enums.inventory import QualityStatus
from app.models.batch import Batch
from app.models.product import Product
from app.schemas.batch import (
    AllocationReceipt,
    BatchCreate,
    BatchResponse,
    BatchUpdate,
    BatchWithProduct,
    ExpiringBatch,
)
from app.services.identifiers import parse_id
from app.services.product_service import STOCK_LOCK, get_product

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60

# pending is the only non-terminal state
_QUALITY_TRANSITIONS = {
    QualityStatus.pending: {QualityStatus.passed, QualityStatus.failed},
    QualityStatus.passed: set(),
    QualityStatus.failed: set(),
}


# ---------- LOOKUPS ----------

def get_batches(db: Session, product_id) -> List[Batch]:
    return list(get_product(db, product_id).batches)


def _get_owned_batch(db: Session, product: Product, batch_id) -> Batch:
    batch_id = parse_id(batch_id, "Batch")
    batch = (
        db.query(Batch)
        .filter(Batch.id == batch_id, Batch.product_id == product.id)
        .first()
    )
    if not batch:
        raise HTTPException(status_code=404, detail="Batch not found")
    return batch


def get_batch(db: Session, product_id, batch_id) -> Batch:
    return _get_owned_batch(db, get_product(db, product_id), batch_id)


def _with_product(batch: Batch) -> BatchWithProduct:
    return BatchWithProduct(
        **BatchResponse.model_validate(batch).model_dump(),
        product_name=batch.product.name,
        product_category=batch.product.category,
    )


def get_all_batches(db: Session) -> List[BatchWithProduct]:
    batches = db.query(Batch).join(Product).order_by(Product.id, Batch.id).all()
    return [_with_product(b) for b in batches]


def search_batches(db: Session, query: str) -> List[BatchWithProduct]:
    term = query.lower()
    return [
        b
        for b in get_all_batches(db)
        if term in b.batch_number.lower()
        or term in b.product_name.lower()
        or term in (b.supplier_name or "").lower()
    ]


# ---------- CREATE / UPDATE ----------

def create_batch(db: Session, product_id, data: BatchCreate) -> Batch:
    """Receive a new lot: the product's current_stock grows by its quantity."""
    with STOCK_LOCK:
        product = get_product(db, product_id)

        fields = data.model_dump()
        fields["quality_check_status"] = data.quality_check_status.value
        batch = Batch(**fields, received_date=date.today())

        product.batches.append(batch)
        product.current_stock += data.quantity

        db.commit()
        db.refresh(batch)

    logger.info(
        "Created batch %s (%s) for product %s, qty=%s",
        batch.id, batch.batch_number, product.id, batch.quantity,
    )
    return batch


def update_batch(db: Session, product_id, batch_id, data: BatchUpdate) -> Batch:
    """Edit lot details; a quantity change moves current_stock by the delta."""
    with STOCK_LOCK:
        product = get_product(db, product_id)
        batch = _get_owned_batch(db, product, batch_id)

        changes = data.model_dump(exclude_unset=True)
        if changes.get("quantity") is not None:
            product.current_stock += changes["quantity"] - batch.quantity

        for key, value in changes.items():
            if value is not None:
                setattr(batch, key, value)

        db.commit()
        db.refresh(batch)
    return batch


def update_quality_status(db: Session, product_id, batch_id, status) -> Batch:
    status = QualityStatus(status)
    batch = get_batch(db, product_id, batch_id)
    current = QualityStatus(batch.quality_check_status or QualityStatus.pending.value)

    if status == current:
        return batch
    if status not in _QUALITY_TRANSITIONS[current]:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid quality status transition: {current.value} -> {status.value}",
        )

    batch.quality_check_status = status.value
    db.commit()
    db.refresh(batch)
    logger.info("Batch %s quality check %s", batch.id, status.value)
    return batch


# ---------- ALLOCATION ----------

def allocate_batch(db: Session, product_id, batch_id, quantity: int) -> AllocationReceipt:
    """
    Take `quantity` units out of one specific lot for an order.

    All or nothing: fails with 409 if the lot holds less than requested,
    otherwise the lot and the product's current_stock drop by the same amount.
    """
    quantity = int(quantity)
    if quantity <= 0:
        raise HTTPException(status_code=400, detail="Allocation quantity must be positive")

    with STOCK_LOCK:
        product = get_product(db, product_id)
        batch = _get_owned_batch(db, product, batch_id)

        res = db.execute(
            update(Batch)
            .where(and_(Batch.id == batch.id, Batch.quantity >= quantity))
            .values(quantity=Batch.quantity - quantity)
        )
        if res.rowcount != 1:
            # nothing was written, the guarded UPDATE matched no row
            logger.warning(
                "Allocation of %s from batch %s refused (available=%s)",
                quantity, batch.id, batch.quantity,
            )
            raise HTTPException(status_code=409, detail="Insufficient batch quantity")

        db.execute(
            update(Product)
            .where(Product.id == product.id)
            .values(current_stock=Product.current_stock - quantity)
        )
        db.commit()
        db.refresh(batch)

    logger.info("Allocated %s from batch %s (%s)", quantity, batch.id, batch.batch_number)
    return AllocationReceipt(
        batch_id=batch.id,
        batch_number=batch.batch_number,
        allocated_quantity=quantity,
        expiry_date=batch.expiry_date,
    )


# ---------- EXPIRY ----------

def days_to_expiry(expiry_date: date, now: datetime) -> int:
    expires_at = datetime.combine(expiry_date, time.min)
    return math.ceil((expires_at - now).total_seconds() / SECONDS_PER_DAY)


def get_expiring_soon(
    db: Session,
    days: int = 30,
    now: Optional[datetime] = None,
) -> List[ExpiringBatch]:
    """
    Batches expiring on or before now + days, most urgent first.

    Already expired stock is included with a negative days_to_expiry.
    """
    now = now or datetime.utcnow()
    cutoff = now + timedelta(days=days)

    expiring: List[ExpiringBatch] = []
    for batch in db.query(Batch).join(Product).order_by(Product.id, Batch.id).all():
        if datetime.combine(batch.expiry_date, time.min) > cutoff:
            continue
        expiring.append(
            ExpiringBatch(
                **BatchResponse.model_validate(batch).model_dump(),
                product_name=batch.product.name,
                days_to_expiry=days_to_expiry(batch.expiry_date, now),
            )
        )

    return sorted(expiring, key=lambda b: b.days_to_expiry)
