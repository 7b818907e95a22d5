from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

MAX_MESSAGE_LENGTH = 2000


class Chat(models.Model):
    class Type(models.TextChoices):
        DIRECT = "direct", _("Direct")
        SUPPORT = "support", _("Support")
        GROUP = "group", _("Group")

    class Priority(models.TextChoices):
        LOW = "low", _("Low")
        MEDIUM = "medium", _("Medium")
        HIGH = "high", _("High")
        URGENT = "urgent", _("Urgent")

    class Status(models.TextChoices):
        OPEN = "open", _("Open")
        IN_PROGRESS = "in_progress", _("In Progress")
        RESOLVED = "resolved", _("Resolved")
        CLOSED = "closed", _("Closed")

    participants = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name="chats",
        blank=True,
    )
    # The customer a support conversation belongs to
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="support_chats",
    )
    chat_type = models.CharField(
        max_length=10,
        choices=Type.choices,
        default=Type.SUPPORT,
    )
    title = models.CharField(max_length=200, blank=True)
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="chats",
    )
    last_message_text = models.CharField(max_length=500, blank=True)
    last_message_at = models.DateTimeField(null=True, blank=True)
    last_message_sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    is_active = models.BooleanField(default=True)
    priority = models.CharField(
        max_length=10,
        choices=Priority.choices,
        default=Priority.MEDIUM,
    )
    status = models.CharField(
        max_length=15,
        choices=Status.choices,
        default=Status.OPEN,
        db_index=True,
    )
    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_chats",
    )
    tags = models.JSONField(default=list, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-updated_at", "-id"]

    def __str__(self):
        return self.title or f"Chat {self.pk}"


class Message(models.Model):
    class Type(models.TextChoices):
        TEXT = "text", _("Text")
        FILE = "file", _("File")
        IMAGE = "image", _("Image")
        SYSTEM = "system", _("System")

    FILE_TYPES = (Type.FILE, Type.IMAGE)

    chat = models.ForeignKey(Chat, on_delete=models.CASCADE, related_name="messages")
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="chat_messages",
    )
    message_type = models.CharField(
        max_length=10,
        choices=Type.choices,
        default=Type.TEXT,
    )
    text = models.TextField(max_length=MAX_MESSAGE_LENGTH, blank=True)
    file_url = models.CharField(max_length=1000, blank=True)
    file_name = models.CharField(max_length=255, blank=True)
    file_size = models.PositiveBigIntegerField(null=True, blank=True)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [models.Index(fields=["chat", "is_read"], name="chat_message_unread_idx")]

    def __str__(self):
        return f"Message {self.pk} in chat {self.chat_id}"

    @property
    def summary(self) -> str:
        """Short text used as the chat's last-message preview."""
        if self.text:
            return self.text[:500]
        if self.message_type in self.FILE_TYPES or self.file_url:
            return f"Sent a file: {self.file_name}" if self.file_name else "File attachment"
        return ""

    def mark_read(self) -> bool:
        if self.is_read:
            return False
        self.is_read = True
        self.read_at = timezone.now()
        self.save(update_fields=["is_read", "read_at"])
        return True
