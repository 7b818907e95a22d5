from __future__ import annotations

import getpass

from django.core.management.base import BaseCommand
from django.core.management.base import CommandError
from django.core.management.base import CommandParser

from tuma_cargo.users.models import User


class Command(BaseCommand):
    help = "Create (or promote) an admin or super admin account"

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument("--email", required=True)
        parser.add_argument(
            "--password",
            dest="password",
            help="Plain-text password (omit to be prompted securely)",
        )
        parser.add_argument("--full-name", dest="full_name", default="Administrator")
        parser.add_argument(
            "--role",
            choices=[User.Role.ADMIN, User.Role.SUPER_ADMIN],
            default=User.Role.SUPER_ADMIN,
        )

    def handle(self, *args, **options) -> str | None:
        email: str = options["email"].strip().lower()
        role: str = options["role"]
        pwd: str | None = options.get("password")

        user = User.objects.filter(email__iexact=email).first()
        if user is not None:
            user.role = role
            user.is_active = True
            user.approved = True
            user.save(update_fields=["role", "is_staff", "is_active", "approved"])
            self.stdout.write(
                self.style.SUCCESS(f"Updated {email} to role '{role}'."),
            )
            return None

        if not pwd:
            pwd = getpass.getpass("Password: ")
            confirm = getpass.getpass("Confirm:  ")
            if pwd != confirm:
                msg = "Passwords do not match."
                raise CommandError(msg)

        User.objects.create_user(
            email=email,
            password=pwd,
            full_name=options["full_name"],
            role=role,
            verified=True,
            approved=True,
            is_superuser=role == User.Role.SUPER_ADMIN,
        )
        self.stdout.write(self.style.SUCCESS(f"Created {role} account {email}."))
        return None
