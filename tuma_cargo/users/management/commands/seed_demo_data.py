from __future__ import annotations

from decimal import Decimal

from django.core.management.base import BaseCommand
from django.core.management.base import CommandParser
from django.db import transaction

from tuma_cargo.chat.services import open_support_chat
from tuma_cargo.chat.services import send_message
from tuma_cargo.orders.models import Order
from tuma_cargo.orders.services import change_status
from tuma_cargo.orders.services import create_order
from tuma_cargo.products.models import Product
from tuma_cargo.users.models import User

DEMO_PASSWORD = "DemoPass123!"  # noqa: S105

STAFF = [
    ("superadmin@tuma.local", "Super Admin", User.Role.SUPER_ADMIN),
    ("admin@tuma.local", "Support Admin", User.Role.ADMIN),
]
CUSTOMERS = [
    ("alice@tuma.local", "Alice Uwase", "+250788000001", "Kigali"),
    ("brian@tuma.local", "Brian Mugisha", "+250788000002", "Musanze"),
    ("claire@tuma.local", "Claire Ingabire", "+250788000003", "Huye"),
]
PRODUCTS = [
    {
        "name": "Wireless Earbuds",
        "description": "Bluetooth 5.3 earbuds with charging case.",
        "price": Decimal("18.50"),
        "original_price": Decimal("25.00"),
        "category": "Electronics",
        "tags": ["audio", "bluetooth"],
        "supplier": {"name": "Shenzhen Audio Co.", "platform": "alibaba"},
        "featured": True,
    },
    {
        "name": "Solar Power Bank 20000mAh",
        "description": "Dual USB power bank with a solar panel.",
        "price": Decimal("14.00"),
        "category": "Electronics",
        "tags": ["solar", "charging"],
        "supplier": {"name": "Yiwu Energy", "platform": "1688"},
        "featured": True,
    },
    {
        "name": "Cotton Kitenge Fabric (6 yards)",
        "description": "Printed cotton fabric, assorted patterns.",
        "price": Decimal("9.75"),
        "category": "Fashion",
        "tags": ["fabric"],
        "supplier": {"name": "Guangzhou Textiles", "platform": "taobao"},
    },
    {
        "name": "Stainless Steel Cookware Set",
        "description": "Ten piece induction-ready cookware set.",
        "price": Decimal("42.00"),
        "category": "Home & Kitchen",
        "tags": ["kitchen"],
        "supplier": {"name": "Chaozhou Steelware", "platform": "alibaba"},
        "status": Product.Status.DRAFT,
    },
]


class Command(BaseCommand):
    help = "Populate the database with demo users, products, orders and a chat"

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument(
            "--password",
            default=DEMO_PASSWORD,
            help="Password given to every account this command creates",
        )

    @transaction.atomic
    def handle(self, *args, **options) -> None:
        password: str = options["password"]
        admins = [self._user(email, name, role, password) for email, name, role in STAFF]
        customers = [
            self._user(email, name, User.Role.USER, password, phone=phone, city=city)
            for email, name, phone, city in CUSTOMERS
        ]

        products = []
        for data in PRODUCTS:
            product, created = Product.objects.get_or_create(
                name=data["name"],
                defaults={**data, "created_by": admins[0]},
            )
            if created:
                self.stdout.write(f"Created product {product.name}")
            products.append(product)

        for index, customer in enumerate(customers):
            self._orders_for(customer, products, admins[1], offset=index)

        chat, created = open_support_chat(customers[0])
        if created:
            send_message(
                customers[0],
                chat_id=chat.pk,
                content="Hello, when will my earbuds arrive in Kigali?",
            )
            send_message(
                admins[1],
                chat_id=chat.pk,
                content="They are at our warehouse and ship this week.",
            )

        self.stdout.write(self.style.SUCCESS("Demo data is ready."))

    def _user(self, email, full_name, role, password, **extra) -> User:
        user = User.objects.filter(email__iexact=email).first()
        if user is not None:
            return user
        user = User.objects.create_user(
            email=email,
            password=password,
            full_name=full_name,
            role=role,
            verified=True,
            approved=True,
            is_superuser=role == User.Role.SUPER_ADMIN,
            country="Rwanda",
            **extra,
        )
        self.stdout.write(f"Created {role} {email}")
        return user

    def _orders_for(self, customer: User, products, admin: User, offset: int) -> None:
        if customer.orders.exists():
            return
        published = [p for p in products if p.status == Product.Status.PUBLISHED]
        flow = [Order.Status.PROCESSING, Order.Status.SHIPPED, Order.Status.DELIVERED]
        for index, product in enumerate(published[:2]):
            order = create_order(
                customer,
                {
                    "product_name": product.name,
                    "product_image": product.image_url,
                    "quantity": index + offset + 1,
                    "unit_price": product.price,
                    "currency": product.currency,
                    "description": f"Demo order for {product.name}",
                },
            )
            for status in flow[: (index + offset) % (len(flow) + 1)]:
                change_status(order, status, admin, notes="Demo progress")
        self.stdout.write(f"Created demo orders for {customer.email}")
