from enum import Enum


class QualityStatus(str, Enum):
    pending = "pending"
    passed = "passed"
    failed = "failed"


class StockOperation(str, Enum):
    add = "add"
    subtract = "subtract"


class ProductStatus(str, Enum):
    active = "active"
    low_stock = "low_stock"
