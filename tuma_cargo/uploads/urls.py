from django.urls import path

from .views import DocumentUploadView
from .views import ImageUploadView
from .views import MultipleImageUploadView
from .views import UploadDeleteView
from .views import VideoUploadView

app_name = "upload"
urlpatterns = [
    path("image/", ImageUploadView.as_view(), name="image"),
    path("video/", VideoUploadView.as_view(), name="video"),
    path("document/", DocumentUploadView.as_view(), name="document"),
    path("multiple/", MultipleImageUploadView.as_view(), name="multiple"),
    path("<path:filename>", UploadDeleteView.as_view(), name="delete"),
]
