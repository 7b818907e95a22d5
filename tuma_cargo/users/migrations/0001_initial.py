import django.utils.timezone
from django.db import migrations, models

import tuma_cargo.users.managers


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                ("is_superuser", models.BooleanField(default=False, help_text="Designates that this user has all permissions without explicitly assigning them.", verbose_name="superuser status")),
                ("is_staff", models.BooleanField(default=False, help_text="Designates whether the user can log into this admin site.", verbose_name="staff status")),
                ("is_active", models.BooleanField(default=True, help_text="Designates whether this user should be treated as active. Unselect this instead of deleting accounts.", verbose_name="active")),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now, verbose_name="date joined")),
                ("full_name", models.CharField(max_length=100, verbose_name="Full Name")),
                ("email", models.EmailField(max_length=254, unique=True, verbose_name="email address")),
                ("phone", models.CharField(blank=True, max_length=30, null=True, unique=True)),
                ("role", models.CharField(choices=[("user", "User"), ("admin", "Admin"), ("super_admin", "Super Admin")], default="user", max_length=20)),
                ("verified", models.BooleanField(default=False)),
                ("email_verification_token", models.CharField(blank=True, db_index=True, max_length=128)),
                ("email_verification_expires", models.DateTimeField(blank=True, null=True)),
                ("email_verified_at", models.DateTimeField(blank=True, null=True)),
                ("approved", models.BooleanField(default=False)),
                ("profile_image", models.CharField(blank=True, max_length=500)),
                ("street", models.CharField(blank=True, max_length=255)),
                ("city", models.CharField(blank=True, max_length=100)),
                ("state", models.CharField(blank=True, max_length=100)),
                ("country", models.CharField(blank=True, max_length=100)),
                ("zip_code", models.CharField(blank=True, max_length=20)),
                ("currency", models.CharField(choices=[("RWF", "RWF"), ("Yuan", "Yuan"), ("USD", "USD")], default="RWF", max_length=4)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("groups", models.ManyToManyField(blank=True, help_text="The groups this user belongs to. A user will get all permissions granted to each of their groups.", related_name="user_set", related_query_name="user", to="auth.group", verbose_name="groups")),
                ("user_permissions", models.ManyToManyField(blank=True, help_text="Specific permissions for this user.", related_name="user_set", related_query_name="user", to="auth.permission", verbose_name="user permissions")),
            ],
            options={
                "ordering": ["-created_at"],
            },
            managers=[
                ("objects", tuma_cargo.users.managers.UserManager()),
            ],
        ),
    ]
