from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database.connection import get_db
from app.schemas.product import ProductResponse, ReorderSuggestion
from app.services.product_service import check_reorder_points, get_low_stock

router = APIRouter(prefix="/inventory", tags=["Inventory"])


@router.get("/low-stock", response_model=list[ProductResponse])
def low_stock(db: Session = Depends(get_db)):
    return get_low_stock(db)


@router.get("/reorder-points", response_model=list[ReorderSuggestion])
def reorder_points(db: Session = Depends(get_db)):
    """
    Products at or below their reorder level with a suggested order
    quantity of max(2 * reorder_level - current_stock, reorder_level).
    """
    return check_reorder_points(db)
