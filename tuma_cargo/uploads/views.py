from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.parsers import FormParser
from rest_framework.parsers import MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from tuma_cargo.users.api.permissions import IsAdmin

from .serializers import DocumentUploadSerializer
from .serializers import ImageUploadSerializer
from .serializers import MultipleImageUploadSerializer
from .serializers import VideoUploadSerializer
from .storage import UnsafePathError
from .storage import delete_upload
from .storage import store_file
from .storage import store_image_as_webp


class _UploadView(APIView):
    parser_classes = [MultiPartParser, FormParser]
    permission_classes = [IsAdmin]


@extend_schema(tags=["Uploads"], request=ImageUploadSerializer)
class ImageUploadView(_UploadView):
    def post(self, request):
        serializer = ImageUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        stored = store_image_as_webp(
            data["image"],
            width=data["width"],
            height=data["height"],
            quality=data["quality"],
        )
        return Response(
            {"detail": "Image uploaded successfully", "file": stored.as_dict()},
            status=status.HTTP_201_CREATED,
        )


@extend_schema(tags=["Uploads"], request=MultipleImageUploadSerializer)
class MultipleImageUploadView(_UploadView):
    def post(self, request):
        serializer = MultipleImageUploadSerializer(
            data={"images": request.FILES.getlist("images")},
        )
        serializer.is_valid(raise_exception=True)
        files = [
            store_image_as_webp(f).as_dict()
            for f in serializer.validated_data["images"]
        ]
        return Response(
            {
                "detail": f"{len(files)} images uploaded successfully",
                "files": files,
            },
            status=status.HTTP_201_CREATED,
        )


@extend_schema(tags=["Uploads"], request=VideoUploadSerializer)
class VideoUploadView(_UploadView):
    def post(self, request):
        serializer = VideoUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        stored = store_file(serializer.validated_data["video"], "videos")
        return Response(
            {"detail": "Video uploaded successfully", "file": stored.as_dict()},
            status=status.HTTP_201_CREATED,
        )


@extend_schema(tags=["Uploads"], request=DocumentUploadSerializer)
class DocumentUploadView(_UploadView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = DocumentUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        stored = store_file(serializer.validated_data["document"], "documents")
        return Response(
            {"detail": "Document uploaded successfully", "file": stored.as_dict()},
            status=status.HTTP_201_CREATED,
        )


@extend_schema(tags=["Uploads"], request=None)
class UploadDeleteView(APIView):
    permission_classes = [IsAdmin]

    def delete(self, request, filename: str):
        try:
            deleted = delete_upload(filename)
        except UnsafePathError:
            return Response(
                {"detail": "Invalid filename"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        if not deleted:
            return Response(
                {"detail": "File not found"},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response({"detail": "File deleted successfully"})
