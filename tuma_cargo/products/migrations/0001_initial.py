import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("description", models.CharField(max_length=1000)),
                ("price", models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(0)])),
                ("original_price", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True, validators=[django.core.validators.MinValueValidator(0)])),
                ("currency", models.CharField(default="USD", max_length=10)),
                ("image_url", models.CharField(blank=True, max_length=1000)),
                ("images", models.JSONField(blank=True, default=list)),
                ("category", models.CharField(db_index=True, max_length=100)),
                ("subcategory", models.CharField(blank=True, max_length=100)),
                ("tags", models.JSONField(blank=True, default=list)),
                ("specifications", models.JSONField(blank=True, default=dict)),
                ("supplier", models.JSONField(blank=True, default=dict)),
                ("stock", models.JSONField(blank=True, default=dict)),
                ("shipping", models.JSONField(blank=True, default=dict)),
                ("views", models.PositiveIntegerField(default=0)),
                ("orders_count", models.PositiveIntegerField(default=0)),
                ("rating", models.FloatField(default=0, validators=[django.core.validators.MinValueValidator(0), django.core.validators.MaxValueValidator(5)])),
                ("review_count", models.PositiveIntegerField(default=0)),
                ("featured", models.BooleanField(db_index=True, default=False)),
                ("status", models.CharField(choices=[("draft", "Draft"), ("published", "Published")], default="published", max_length=20)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="products_created", to=settings.AUTH_USER_MODEL)),
                ("last_updated_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="products_updated", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-featured", "-orders_count", "-created_at"],
            },
        ),
    ]
