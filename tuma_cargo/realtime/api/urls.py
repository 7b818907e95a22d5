from django.urls import path

from .views import ActiveUsersView

app_name = "socket"
urlpatterns = [
    path("active-users/", ActiveUsersView.as_view(), name="active-users"),
]
