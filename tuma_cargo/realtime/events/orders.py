from __future__ import annotations

from typing import TYPE_CHECKING
from typing import Any

if TYPE_CHECKING:  # import for type checking only
    from tuma_cargo.orders.models import Order
from tuma_cargo.realtime.socketio import ROOM_ADMINS
from tuma_cargo.realtime.socketio import emit_event_to_room

ORDER_EVENT = "order:new"


def build_order_payload(order: Order) -> dict[str, Any]:
    customer = order.user
    customer_name = customer.full_name or "Customer"
    return {
        "type": "order_created",
        "title": "New Order Received",
        "message": (
            f'New order "{order.product_name}" from {customer_name}. '
            f"Order ID: {order.order_id}"
        ),
        "data": {
            "orderId": order.order_id,
            "id": order.pk,
            "userId": order.user_id,
            "productName": order.product_name,
            "quantity": order.quantity,
            "finalAmount": str(order.final_amount),
            "currency": order.currency,
            "status": order.status,
        },
        "link": f"/admin/orders/{order.pk}",
        "icon": "package",
        "priority": "high",
    }


def publish_order_created(order: Order) -> None:
    """Tell every connected admin that a customer placed an order."""

    emit_event_to_room(ROOM_ADMINS, ORDER_EVENT, build_order_payload(order))
