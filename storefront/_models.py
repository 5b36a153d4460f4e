"""
Wire models — payloads exchanged with the storefront backend.

Prices travel as decimal strings ("100.00"); pydantic's lax mode parses them
to float, matching the client-side float accumulation of totals.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _Wire(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


# ═══════════════════════════════════════════════════════════════════════════════
# Catalog
# ═══════════════════════════════════════════════════════════════════════════════


class Color(_Wire):
    id: int
    color: str = ""


class Size(_Wire):
    id: int
    size: str = ""


class ProductVariation(_Wire):
    id: int
    color: Color | None = None
    size: Size | None = None
    original_price: float
    discount_price: float
    stock: int = Field(ge=0)
    product_name: str = ""
    product_image: str = ""


# ═══════════════════════════════════════════════════════════════════════════════
# Cart
# ═══════════════════════════════════════════════════════════════════════════════


class CartLine(_Wire):
    id: int
    product: ProductVariation
    quantity: int = Field(ge=0)
    customer: int | None = None

    @property
    def variation_id(self) -> int:
        return self.product.id

    @property
    def stock(self) -> int:
        return self.product.stock

    def with_quantity(self, quantity: int) -> CartLine:
        return self.model_copy(update={"quantity": quantity})


class CartUpdate(_Wire):
    product_variation_id: int
    quantity: int


# ═══════════════════════════════════════════════════════════════════════════════
# Addresses
# ═══════════════════════════════════════════════════════════════════════════════


class Address(_Wire):
    id: int
    name: str
    email: str
    phone: str
    flat_building_no: str
    city: str
    pincode: int
    state: str
    country: str


class AddressFields(BaseModel):
    """New-address form as typed by the user. Every field is raw text."""

    name: str = ""
    email: str = ""
    phone: str = ""
    flat_building_no: str = ""
    city: str = ""
    pincode: str = ""
    state: str = ""
    country: str = ""

    def missing(self) -> list[str]:
        return [name for name, value in self.model_dump().items() if not value.strip()]


# ═══════════════════════════════════════════════════════════════════════════════
# Payment / Orders
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentConfirmation(_Wire):
    amount: float
    razorpay_payment_id: str
    payment_status: str = "Success"


class OrderRequest(_Wire):
    payment_id: str
    product_variation_id: int
    quantity: int
    shipment_address_id: int


class OrderedVariation(_Wire):
    id: int
    product_name: str = ""
    product_image: str = ""
    color: Color | None = None
    size: Size | None = None


class OrderSummary(_Wire):
    order_id: int
    customer: int | None = None
    product_variation: OrderedVariation
    order_status: str = ""
    order_date: str = ""


ORDER_STAGES = ("Processing", "Shipped", "Out For Delivery", "Delivered")


class OrderDetail(OrderSummary):
    order_id: int | None = None
    quantity: int = 0
    order_status_date: str | None = None

    def progress(self) -> float:
        """
        Position of the order along ORDER_STAGES.

        A cancelled order sits between the first two stages; an unknown
        status is -1.
        """
        if self.order_status == "Cancelled":
            return 1.5
        if self.order_status in ORDER_STAGES:
            return float(ORDER_STAGES.index(self.order_status))
        return -1.0


__all__ = (
    "Color",
    "Size",
    "ProductVariation",
    "CartLine",
    "CartUpdate",
    "Address",
    "AddressFields",
    "PaymentConfirmation",
    "OrderRequest",
    "OrderedVariation",
    "OrderSummary",
    "OrderDetail",
    "ORDER_STAGES",
)
