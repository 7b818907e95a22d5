import re

from django.core.exceptions import ValidationError
from django.utils.translation import gettext as _

FULL_NAME_RE = re.compile(r"^[^\W\d_]+(?: [^\W\d_]+)*$")
PASSWORD_MAX_LENGTH = 128


def validate_full_name(value: str) -> str:
    value = " ".join((value or "").split())
    if not 2 <= len(value) <= 100:  # noqa: PLR2004
        raise ValidationError(_("Full name must be between 2 and 100 characters"))
    if not FULL_NAME_RE.match(value):
        raise ValidationError(_("Full name can only contain letters and spaces"))
    return value


class PasswordComplexityValidator:
    """Require a lowercase letter, an uppercase letter and a digit."""

    def validate(self, password, user=None):
        if len(password) > PASSWORD_MAX_LENGTH:
            raise ValidationError(
                _("Password must be at most %(max)d characters long"),
                code="password_too_long",
                params={"max": PASSWORD_MAX_LENGTH},
            )
        if not (
            re.search(r"[a-z]", password)
            and re.search(r"[A-Z]", password)
            and re.search(r"\d", password)
        ):
            raise ValidationError(
                _(
                    "Password must contain at least one lowercase letter, "
                    "one uppercase letter, and one number",
                ),
                code="password_too_simple",
            )

    def get_help_text(self):
        return _(
            "Your password must contain at least one lowercase letter, "
            "one uppercase letter, and one number.",
        )
