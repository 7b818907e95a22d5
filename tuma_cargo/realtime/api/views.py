from drf_spectacular.utils import extend_schema
from rest_framework.response import Response
from rest_framework.views import APIView

from tuma_cargo.realtime.presence import registry
from tuma_cargo.users.api.permissions import IsAdmin


@extend_schema(tags=["Chat"])
class ActiveUsersView(APIView):
    """Users connected to this process's Socket.IO server."""

    permission_classes = [IsAdmin]

    def get(self, request):
        users = registry.snapshot()
        return Response({"count": len(users), "users": users})
