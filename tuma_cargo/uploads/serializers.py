from django.conf import settings
from rest_framework import serializers

from .storage import ALLOWED_DOC_EXTS
from .storage import ALLOWED_VIDEO_EXTS
from .storage import DEFAULT_IMAGE_HEIGHT
from .storage import DEFAULT_IMAGE_QUALITY
from .storage import DEFAULT_IMAGE_WIDTH
from .storage import validate_image
from .storage import validate_upload

MAX_MULTIPLE_IMAGES = 10


class ImageUploadSerializer(serializers.Serializer):
    image = serializers.FileField()
    width = serializers.IntegerField(
        required=False,
        min_value=16,
        max_value=4000,
        default=DEFAULT_IMAGE_WIDTH,
    )
    height = serializers.IntegerField(
        required=False,
        min_value=16,
        max_value=4000,
        default=DEFAULT_IMAGE_HEIGHT,
    )
    quality = serializers.IntegerField(
        required=False,
        min_value=1,
        max_value=100,
        default=DEFAULT_IMAGE_QUALITY,
    )

    def validate_image(self, value):
        validate_image(value, max_mb=settings.UPLOAD_MAX_IMAGE_MB)
        return value


class MultipleImageUploadSerializer(serializers.Serializer):
    images = serializers.ListField(
        child=serializers.FileField(),
        allow_empty=False,
        max_length=MAX_MULTIPLE_IMAGES,
    )

    def validate_images(self, value):
        for f in value:
            validate_image(f, max_mb=settings.UPLOAD_MAX_IMAGE_MB)
        return value


class VideoUploadSerializer(serializers.Serializer):
    video = serializers.FileField()

    def validate_video(self, value):
        return validate_upload(
            value,
            allowed_exts=ALLOWED_VIDEO_EXTS,
            max_mb=settings.UPLOAD_MAX_VIDEO_MB,
        )


class DocumentUploadSerializer(serializers.Serializer):
    document = serializers.FileField()

    def validate_document(self, value):
        return validate_upload(
            value,
            allowed_exts=ALLOWED_DOC_EXTS,
            max_mb=settings.UPLOAD_MAX_DOCUMENT_MB,
        )
