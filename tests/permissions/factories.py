from __future__ import annotations

from dataclasses import dataclass

from django.contrib.auth import get_user_model

from tuma_cargo.orders.models import Order

User = get_user_model()


@dataclass
class RoleContext:
    user: User
    order: Order


def create_user_with_role(
    name: str,
    *,
    role: str = "user",
    is_active: bool = True,
) -> RoleContext:
    user = User.objects.create_user(
        email=f"{name}@example.com",
        password="TestPass123!",  # noqa: S106
        full_name=name.title(),
        role=role,
        verified=True,
        approved=True,
        is_superuser=role == "super_admin",
        is_active=is_active,
    )
    order = Order.objects.create(
        user=user,
        product_name=f"{name.title()} sample order",
        quantity=1,
        unit_price="5.00",
    )
    return RoleContext(user=user, order=order)
