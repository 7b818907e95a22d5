from __future__ import annotations

from django.db.models import Count
from django.db.models import F
from django.db.models import Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import mixins
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.exceptions import PermissionDenied
from rest_framework.parsers import FormParser
from rest_framework.parsers import JSONParser
from rest_framework.parsers import MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from tuma_cargo.audit.utils import log_action
from tuma_cargo.chat import services
from tuma_cargo.chat.models import Chat
from tuma_cargo.chat.models import Message
from tuma_cargo.orders.models import Order
from tuma_cargo.uploads.storage import store_file
from tuma_cargo.users.api.permissions import IsAdmin
from tuma_cargo.users.api.permissions import is_admin_user

from .serializers import IMAGE_EXTENSIONS
from .serializers import ChatAttachmentSerializer
from .serializers import ChatCreateSerializer
from .serializers import ChatSerializer
from .serializers import ChatStatusSerializer
from .serializers import MessageCreateSerializer
from .serializers import MessageSerializer

ADMIN_ACTIONS = {"set_status", "export", "destroy", "admin_all", "admin_sessions"}


def _unread_for(user):
    """Count of messages in the chat that ``user`` did not send and not read."""
    return Count(
        "messages",
        filter=Q(messages__is_read=False) & ~Q(messages__sender=user),
        distinct=True,
    )


@extend_schema_view(
    list=extend_schema(tags=["Chat"]),
    create=extend_schema(
        tags=["Chat"],
        request=ChatCreateSerializer,
        responses=ChatSerializer,
    ),
    retrieve=extend_schema(tags=["Chat"]),
    destroy=extend_schema(tags=["Chat"]),
)
class ChatViewSet(
    mixins.ListModelMixin,
    mixins.DestroyModelMixin,
    GenericViewSet,
):
    """Support conversations, chat rooms and their messages."""

    serializer_class = ChatSerializer
    queryset = Chat.objects.all()
    lookup_value_regex = r"\d+"
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get_permissions(self):
        if self.action in ADMIN_ACTIONS:
            return [IsAdmin()]
        return [IsAuthenticated()]

    def get_queryset(self):
        user = self.request.user
        qs = Chat.objects.select_related(
            "customer",
            "assigned_to",
            "order",
        ).prefetch_related("participants")
        if self.action == "list" or not is_admin_user(user):
            member_chats = Chat.participants.through.objects.filter(
                user_id=user.pk,
            ).values("chat_id")
            qs = qs.filter(Q(pk__in=member_chats) | Q(customer=user))
        return qs

    def _paginated(self, queryset, serializer_class):
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(
            serializer_class(page, many=True, context=self.get_serializer_context()).data,
        )

    def list(self, request, *args, **kwargs):
        qs = self.get_queryset().filter(is_active=True)
        qs = qs.annotate(unread_count=_unread_for(request.user))
        return self._paginated(qs.order_by("-updated_at", "-id"), ChatSerializer)

    def create(self, request, *args, **kwargs):
        serializer = ChatCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order_ref = (serializer.validated_data.get("order_id") or "").strip()
        title = serializer.validated_data.get("title", "")

        if not order_ref:
            chat, created = services.open_support_chat(request.user)
        else:
            lookup = {"pk": order_ref} if order_ref.isdigit() else {"order_id": order_ref}
            orders = Order.objects.select_related("user")
            if not is_admin_user(request.user):
                orders = orders.filter(user=request.user)
            order = orders.filter(**lookup).first()
            if order is None:
                msg = "Order not found"
                raise NotFound(msg)
            chat, created = services.get_or_create_order_chat(
                request.user,
                order,
                title=title,
            )

        return Response(
            ChatSerializer(chat, context=self.get_serializer_context()).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    @extend_schema(
        tags=["Chat"],
        parameters=[OpenApiParameter("page", int), OpenApiParameter("limit", int)],
    )
    def retrieve(self, request, *args, **kwargs):
        chat = self.get_object()
        services.mark_chat_read(chat, request.user)
        messages = chat.messages.select_related("sender").order_by("-created_at", "-id")
        page = self.paginate_queryset(messages)
        # Newest page first, oldest message first within the page
        data = MessageSerializer(list(reversed(page)), many=True).data
        response = self.get_paginated_response(data)
        response.data["chat"] = ChatSerializer(
            chat,
            context=self.get_serializer_context(),
        ).data
        return response

    def perform_destroy(self, instance):
        log_action(
            "chat_deleted",
            request=self.request,
            target=instance,
            message=f"title={instance.title}",
        )
        instance.delete()

    # Support conversation ------------------------------------------------

    @extend_schema(
        tags=["Chat"],
        request=MessageCreateSerializer,
        responses=MessageSerializer,
    )
    @action(detail=False, methods=["get", "post"], url_path="messages")
    def support_messages(self, request):
        if request.method == "GET":
            qs = services.support_messages_for(request.user).order_by("created_at", "id")
            return self._paginated(qs, MessageSerializer)

        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        message = services.send_message(
            request.user,
            chat_id=data.get("chat_id"),
            content=data["content"],
            message_type=data["message_type"],
            file_url=data["file_url"],
            file_name=data["file_name"],
            file_size=data.get("file_size"),
        )
        services.deliver_message(message)
        return Response(MessageSerializer(message).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Chat"], request=None)
    @action(detail=False, methods=["put"], url_path="messages/read-all")
    def read_all(self, request):
        updated = (
            services.support_messages_for(request.user)
            .filter(is_read=False)
            .exclude(sender=request.user)
            .values_list("pk", flat=True)
        )
        count = Message.objects.filter(pk__in=list(updated)).update(
            is_read=True,
            read_at=timezone.now(),
        )
        return Response({"updated_count": count})

    @extend_schema(tags=["Chat"], request=None, responses=MessageSerializer)
    @action(
        detail=False,
        methods=["put"],
        url_path=r"messages/(?P<message_id>\d+)/read",
    )
    def read_message(self, request, message_id=None):
        message = get_object_or_404(
            Message.objects.select_related("chat", "sender"),
            pk=message_id,
        )
        user = request.user
        if not services.can_access_chat(user.pk, user.role, message.chat):
            msg = "You do not have access to this chat"
            raise PermissionDenied(msg)
        if message.sender_id != user.pk:
            message.mark_read()
        return Response(MessageSerializer(message).data)

    # A single chat -------------------------------------------------------

    @extend_schema(
        tags=["Chat"],
        request=ChatAttachmentSerializer,
        responses=MessageSerializer,
    )
    @action(detail=True, methods=["post"], url_path="messages")
    def post_message(self, request, pk=None):
        chat = self.get_object()
        serializer = ChatAttachmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        upload = serializer.validated_data.get("file")

        file_kwargs = {}
        message_type = Message.Type.TEXT
        if upload is not None:
            stored = store_file(upload, "chat")
            extension = stored.original_name.rsplit(".", 1)[-1].lower()
            message_type = (
                Message.Type.IMAGE if extension in IMAGE_EXTENSIONS else Message.Type.FILE
            )
            file_kwargs = {
                "file_url": stored.url,
                "file_name": stored.original_name,
                "file_size": stored.size,
            }

        message = services.send_message(
            request.user,
            chat_id=chat.pk,
            content=serializer.validated_data.get("content", ""),
            message_type=message_type,
            **file_kwargs,
        )
        services.deliver_message(message)
        return Response(MessageSerializer(message).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Chat"], request=ChatStatusSerializer, responses=ChatSerializer)
    @action(detail=True, methods=["put"], url_path="status")
    def set_status(self, request, pk=None):
        chat = self.get_object()
        serializer = ChatStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        previous = chat.status
        chat.status = data["status"]
        update_fields = ["status", "updated_at"]
        if "priority" in data:
            chat.priority = data["priority"]
            update_fields.append("priority")
        if "assigned_to" in data:
            chat.assigned_to = data["assigned_to"]
            update_fields.append("assigned_to")
        chat.save(update_fields=update_fields)

        if previous != chat.status:
            label = Chat.Status(chat.status).label
            message = services.post_system_message(
                chat,
                request.user,
                f"Chat status changed to {label}",
            )
            services.deliver_message(message)
            chat.refresh_from_db()

        return Response(ChatSerializer(chat, context=self.get_serializer_context()).data)

    @extend_schema(tags=["Chat"])
    @action(detail=True, methods=["get"])
    def export(self, request, pk=None):
        chat = self.get_object()
        messages = chat.messages.select_related("sender").order_by("created_at", "id")
        return Response(
            {
                "chat": ChatSerializer(chat, context=self.get_serializer_context()).data,
                "messages": [
                    {
                        "id": m.pk,
                        "sender": m.sender.full_name or m.sender.email,
                        "sender_role": m.sender.role,
                        "type": m.message_type,
                        "text": m.text,
                        "file_url": m.file_url,
                        "file_name": m.file_name,
                        "is_read": m.is_read,
                        "created_at": m.created_at.isoformat(),
                    }
                    for m in messages
                ],
                "exported_at": timezone.now().isoformat(),
                "exported_by": request.user.pk,
            },
        )

    # Admin overviews -----------------------------------------------------

    @extend_schema(
        tags=["Chat"],
        parameters=[
            OpenApiParameter("status", str),
            OpenApiParameter("priority", str),
            OpenApiParameter("chat_type", str),
            OpenApiParameter("search", str),
        ],
    )
    @action(detail=False, methods=["get"], url_path="admin/all")
    def admin_all(self, request):
        qs = self.get_queryset()
        params = request.query_params
        for field in ("status", "priority", "chat_type"):
            value = params.get(field)
            if value:
                qs = qs.filter(**{field: value})
        search = (params.get("search") or "").strip()
        if search:
            qs = qs.filter(
                Q(title__icontains=search)
                | Q(customer__full_name__icontains=search)
                | Q(customer__email__icontains=search),
            )
        qs = qs.annotate(unread_count=_unread_for(request.user))
        counts = {
            row["status"]: row["count"]
            for row in Chat.objects.values("status").annotate(count=Count("id"))
        }
        response = self._paginated(qs.order_by("-updated_at", "-id"), ChatSerializer)
        response.data["stats"] = {
            "total": sum(counts.values()),
            **{value: counts.get(value, 0) for value in Chat.Status.values},
        }
        return response

    @extend_schema(tags=["Chat"])
    @action(detail=False, methods=["get"], url_path="admin/sessions")
    def admin_sessions(self, request):
        chats = (
            Chat.objects.filter(chat_type=Chat.Type.SUPPORT)
            .select_related("customer", "last_message_sender")
            .annotate(
                unread_count=Count(
                    "messages",
                    filter=Q(messages__is_read=False)
                    & Q(messages__sender=F("customer")),
                ),
                message_count=Count("messages"),
            )
            .order_by("-last_message_at", "-updated_at")
        )
        page = self.paginate_queryset(chats)
        rows = [
            {
                "chat_id": chat.pk,
                "title": chat.title,
                "status": chat.status,
                "priority": chat.priority,
                "customer": (
                    {
                        "id": chat.customer.pk,
                        "full_name": chat.customer.full_name,
                        "email": chat.customer.email,
                    }
                    if chat.customer
                    else None
                ),
                "last_message": chat.last_message_text,
                "last_message_at": chat.last_message_at,
                "unread_count": chat.unread_count,
                "message_count": chat.message_count,
            }
            for chat in page
        ]
        return self.get_paginated_response(rows)
