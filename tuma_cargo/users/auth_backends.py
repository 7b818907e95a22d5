from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend


def find_user_by_identifier(identifier: str | None):
    """Look a customer up by email (case-insensitive) first, then by phone."""
    identifier = (identifier or "").strip()
    if not identifier:
        return None
    users = get_user_model().objects
    lookup = {"email__iexact": identifier} if "@" in identifier else {"phone": identifier}
    return users.filter(**lookup).first()


class EmailOrPhoneBackend(ModelBackend):
    """Accept an email address or a phone number in the login field."""

    def authenticate(self, request, username=None, password=None, **kwargs):
        user = find_user_by_identifier(
            username or kwargs.get("email") or kwargs.get("phone"),
        )
        if user is None or password is None:
            # Run the hasher anyway so unknown accounts take as long as known ones
            get_user_model()().set_password(password)
            return None
        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None
