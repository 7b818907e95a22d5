import io
from http import HTTPStatus

import pytest
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import SimpleUploadedFile
from PIL import Image

BASE_URL = "/api/v1/upload/"


def _png(name="photo.png", size=(1200, 900)):
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(200, 30, 30)).save(buffer, format="PNG")
    return SimpleUploadedFile(name, buffer.getvalue(), content_type="image/png")


@pytest.mark.django_db
class TestImageUpload:
    def test_image_is_resized_to_webp(self, admin_api_client):
        res = admin_api_client.post(
            f"{BASE_URL}image/",
            {"image": _png()},
            format="multipart",
        )
        assert res.status_code == HTTPStatus.CREATED
        stored = res.data["file"]
        assert stored["name"].startswith("uploads/images/")
        assert stored["name"].endswith(".webp")
        assert (stored["width"], stored["height"]) == (800, 600)
        assert stored["original_name"] == "photo.png"
        assert default_storage.exists(stored["name"])

    def test_custom_dimensions(self, admin_api_client):
        res = admin_api_client.post(
            f"{BASE_URL}image/",
            {"image": _png(), "width": 200, "height": 200},
            format="multipart",
        )
        assert (res.data["file"]["width"], res.data["file"]["height"]) == (200, 150)

    def test_fake_image_is_rejected(self, admin_api_client):
        fake = SimpleUploadedFile("photo.png", b"not an image", content_type="image/png")
        res = admin_api_client.post(f"{BASE_URL}image/", {"image": fake}, format="multipart")
        assert res.status_code == HTTPStatus.BAD_REQUEST
        assert res.data["image"] == ["Invalid image file"]

    def test_wrong_extension(self, admin_api_client):
        res = admin_api_client.post(
            f"{BASE_URL}image/",
            {"image": _png(name="photo.bmp")},
            format="multipart",
        )
        assert res.status_code == HTTPStatus.BAD_REQUEST
        assert "Unsupported file type '.bmp'" in res.data["image"][0]

    def test_customer_cannot_upload_images(self, user_client):
        res = user_client.post(f"{BASE_URL}image/", {"image": _png()}, format="multipart")
        assert res.status_code == HTTPStatus.FORBIDDEN

    def test_multiple(self, admin_api_client):
        res = admin_api_client.post(
            f"{BASE_URL}multiple/",
            {"images": [_png("a.png"), _png("b.png")]},
            format="multipart",
        )
        assert res.status_code == HTTPStatus.CREATED
        assert res.data["detail"] == "2 images uploaded successfully"
        assert [f["original_name"] for f in res.data["files"]] == ["a.png", "b.png"]


@pytest.mark.django_db
class TestFileUploads:
    def test_video(self, admin_api_client):
        video = SimpleUploadedFile("clip.mp4", b"\x00\x00\x00\x18ftyp", content_type="video/mp4")
        res = admin_api_client.post(f"{BASE_URL}video/", {"video": video}, format="multipart")
        assert res.status_code == HTTPStatus.CREATED
        assert res.data["file"]["name"].startswith("uploads/videos/")

    def test_customer_uploads_document(self, user_client):
        doc = SimpleUploadedFile("invoice.pdf", b"%PDF-1.4", content_type="application/pdf")
        res = user_client.post(f"{BASE_URL}document/", {"document": doc}, format="multipart")
        assert res.status_code == HTTPStatus.CREATED
        assert res.data["file"]["original_name"] == "invoice.pdf"
        assert res.data["file"]["size"] == len(b"%PDF-1.4")

    def test_document_type_is_checked(self, user_client):
        doc = SimpleUploadedFile("run.sh", b"echo hi", content_type="text/x-sh")
        res = user_client.post(f"{BASE_URL}document/", {"document": doc}, format="multipart")
        assert res.status_code == HTTPStatus.BAD_REQUEST

    def test_anonymous_cannot_upload(self, api_client):
        doc = SimpleUploadedFile("invoice.pdf", b"%PDF-1.4")
        res = api_client.post(f"{BASE_URL}document/", {"document": doc}, format="multipart")
        assert res.status_code == HTTPStatus.UNAUTHORIZED


@pytest.mark.django_db
class TestDeleteUpload:
    def test_delete_existing(self, admin_api_client):
        uploaded = admin_api_client.post(
            f"{BASE_URL}image/",
            {"image": _png()},
            format="multipart",
        ).data["file"]
        res = admin_api_client.delete(f"{BASE_URL}{uploaded['name']}")
        assert res.status_code == HTTPStatus.OK
        assert not default_storage.exists(uploaded["name"])

    def test_delete_missing(self, admin_api_client):
        res = admin_api_client.delete(f"{BASE_URL}images/missing.webp")
        assert res.status_code == HTTPStatus.NOT_FOUND
