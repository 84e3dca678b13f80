"""Password validation service.

Validates password strength according to configurable rules:
- Length between 12 and 128 characters
- Uppercase letter requirement
- Lowercase letter requirement
- Digit requirement
- Special character requirement
- Must not contain (or be contained in) the email local part
- Must not appear in known data breaches (when a breach checker is set)
"""

import re
from dataclasses import dataclass

from copilot_auth.core.logging import get_logger
from copilot_auth.infrastructure.auth.password_hasher import MAX_PASSWORD_LENGTH
from copilot_auth.infrastructure.services.breach_checker import BreachChecker

logger = get_logger(__name__)


@dataclass(frozen=True)
class PasswordValidationError:
    """Represents a password validation error.

    Attributes:
        field: The field name (always 'password').
        message: Human-readable error message.
        code: Machine-readable error code.
    """

    field: str
    message: str
    code: str


class PasswordValidator:
    """Validates password strength.

    Breach lookups are best effort: a failing lookup is logged and the
    password is judged on the remaining rules only.
    """

    SPECIAL_CHARS = r"!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>\/?`~"

    def __init__(
        self,
        min_length: int = 12,
        max_length: int = MAX_PASSWORD_LENGTH,
        breach_checker: BreachChecker | None = None,
    ) -> None:
        """Initialize the password validator.

        Args:
            min_length: Minimum password length (default 12).
            max_length: Maximum password length (default 128).
            breach_checker: Optional breached-password lookup.
        """
        self.min_length = min_length
        self.max_length = max_length
        self.breach_checker = breach_checker

    def check_rules(self, password: str, email: str | None = None) -> list[PasswordValidationError]:
        """Apply the local (offline) rules.

        Args:
            password: The password to validate.
            email: The account email, for the similarity rule.

        Returns:
            List of validation errors. Empty list if password passes.
        """
        errors: list[PasswordValidationError] = []

        def fail(code: str, message: str) -> None:
            errors.append(PasswordValidationError(field="password", message=message, code=code))

        if len(password) < self.min_length:
            fail("password_too_short", f"Password must be at least {self.min_length} characters")
        if len(password) > self.max_length:
            fail("password_too_long", f"Password must be at most {self.max_length} characters")
        if not re.search(r"[A-Z]", password):
            fail("password_no_uppercase", "Password must contain at least one uppercase letter")
        if not re.search(r"[a-z]", password):
            fail("password_no_lowercase", "Password must contain at least one lowercase letter")
        if not re.search(r"\d", password):
            fail("password_no_digit", "Password must contain at least one digit")
        if not re.search(f"[{self.SPECIAL_CHARS}]", password):
            fail("password_no_special", "Password must contain at least one special character")

        if email:
            local_part = email.split("@", 1)[0].lower()
            lowered = password.lower()
            # Short local parts would match too many passwords to be meaningful
            if len(local_part) >= 3 and (local_part in lowered or lowered in local_part):
                fail("password_similar_to_email", "Password must not be similar to your email")

        return errors

    async def validate(self, password: str, email: str | None = None) -> list[PasswordValidationError]:
        """Validate a password against the full policy.

        Args:
            password: The password to validate.
            email: The account email, for the similarity rule.

        Returns:
            List of validation errors. Empty list if password is valid.
        """
        errors = self.check_rules(password, email)

        if self.breach_checker is not None and len(password) <= self.max_length:
            try:
                count = await self.breach_checker.breach_count(password)
            except Exception as e:
                logger.warning("Breached password lookup failed", error=str(e))
            else:
                if count > 0:
                    errors.append(
                        PasswordValidationError(
                            field="password",
                            message="This password has appeared in a data breach. Please choose another",
                            code="password_breached",
                        )
                    )

        return errors
