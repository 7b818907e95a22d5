from django.contrib.auth.signals import user_logged_in
from django.dispatch import receiver

from .utils import log_action


@receiver(user_logged_in)
def record_login(sender, request, user, **kwargs):
    agent = request.META.get("HTTP_USER_AGENT", "-") if request is not None else "-"
    log_action("login", actor=user, target=user, request=request, message=f"ua={agent}")
