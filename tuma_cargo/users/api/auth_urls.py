from django.urls import path

from .auth_views import ForgotPasswordView
from .auth_views import LoginView
from .auth_views import LogoutView
from .auth_views import MeView
from .auth_views import RefreshView
from .auth_views import RegisterView
from .auth_views import ResetPasswordView

app_name = "auth"

urlpatterns = [
    path("register/", RegisterView.as_view(), name="register"),
    path("login/", LoginView.as_view(), name="login"),
    path("refresh/", RefreshView.as_view(), name="refresh"),
    path("logout/", LogoutView.as_view(), name="logout"),
    path("me/", MeView.as_view(), name="me"),
    path("forgot-password/", ForgotPasswordView.as_view(), name="forgot-password"),
    path("reset-password/", ResetPasswordView.as_view(), name="reset-password"),
]
