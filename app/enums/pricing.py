from enum import Enum


class RuleType(str, Enum):
    global_ = "global"
    customer_tier = "customer_tier"
    customer_specific = "customer_specific"
    promotional = "promotional"
    seasonal = "seasonal"


class DiscountType(str, Enum):
    volume = "volume"
    customer_specific = "customer_specific"
    promotional = "promotional"


class AdjustmentType(str, Enum):
    percentage = "percentage"
    fixed = "fixed"
