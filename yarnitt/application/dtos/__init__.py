"""Application DTOs."""
from .order_dto import (
    CancelOrderRequest,
    CreateOrderRequest,
    OrderDTO,
    OrderFiltersRequest,
    OrderItemDTO,
    OrderItemInput,
    OrderListDTO,
    OrderStatsDTO,
    PaginationDTO,
    ProductSalesDTO,
    RecordPaymentRequest,
    RefundOrderRequest,
    SellerStatsDTO,
    ShipOrderRequest,
    ShippingAddressDTO,
    UpdateStatusRequest,
)

__all__ = [
    "CancelOrderRequest",
    "CreateOrderRequest",
    "OrderDTO",
    "OrderFiltersRequest",
    "OrderItemDTO",
    "OrderItemInput",
    "OrderListDTO",
    "OrderStatsDTO",
    "PaginationDTO",
    "ProductSalesDTO",
    "RecordPaymentRequest",
    "RefundOrderRequest",
    "SellerStatsDTO",
    "ShipOrderRequest",
    "ShippingAddressDTO",
    "UpdateStatusRequest",
]
