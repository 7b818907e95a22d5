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
            name="Notification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("notification_type", models.CharField(choices=[("order_update", "Order Update"), ("order_created", "Order Created"), ("order_cancelled", "Order Cancelled"), ("message_received", "Message Received"), ("message_sent", "Message Sent"), ("admin_action", "Admin Action"), ("system_announcement", "System Announcement"), ("account_approved", "Account Approved"), ("account_rejected", "Account Rejected"), ("payment_received", "Payment Received"), ("shipment_update", "Shipment Update")], max_length=30)),
                ("title", models.CharField(max_length=100)),
                ("message", models.CharField(max_length=500)),
                ("is_read", models.BooleanField(default=False)),
                ("read_at", models.DateTimeField(blank=True, null=True)),
                ("data", models.JSONField(blank=True, default=dict)),
                ("link", models.CharField(blank=True, default="", max_length=500)),
                ("icon", models.CharField(default="bell", max_length=50)),
                ("priority", models.CharField(choices=[("low", "Low"), ("medium", "Medium"), ("high", "High"), ("urgent", "Urgent")], default="medium", max_length=10)),
                ("expires_at", models.DateTimeField(blank=True, db_index=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("recipient", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="notifications", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [models.Index(fields=["recipient", "is_read", "-created_at"], name="notif_recipient_unread_idx")],
            },
        ),
    ]
