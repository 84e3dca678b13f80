"""Built-in templates for authentication emails.

Each entry holds a subject, an HTML body and a plain text body.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class EmailTemplate:
    subject: str
    html_body: str
    text_body: str


EMAIL_VERIFICATION = EmailTemplate(
    subject="Verify your email for {{ app_name }}",
    html_body="""\
<p>Welcome to {{ app_name }}!</p>
<p>Please confirm your email address by clicking the link below:</p>
<p><a href="{{ verification_url }}">Verify email address</a></p>
<p>This link expires in {{ expires_in_hours }} hours.</p>
<p>If you did not create an account, you can ignore this email.</p>
""",
    text_body="""\
Welcome to {{ app_name }}!

Please confirm your email address by opening the link below:

{{ verification_url }}

This link expires in {{ expires_in_hours }} hours.

If you did not create an account, you can ignore this email.
""",
)

PASSWORD_RESET = EmailTemplate(
    subject="Reset your {{ app_name }} password",
    html_body="""\
<p>We received a request to reset your password.</p>
<p><a href="{{ reset_url }}">Choose a new password</a></p>
<p>This link expires in {{ expires_in_minutes }} minutes and can be used once.</p>
<p>If you did not request a reset, you can ignore this email.</p>
""",
    text_body="""\
We received a request to reset your password.

Choose a new password here:

{{ reset_url }}

This link expires in {{ expires_in_minutes }} minutes and can be used once.

If you did not request a reset, you can ignore this email.
""",
)

PASSWORD_CHANGED = EmailTemplate(
    subject="Your {{ app_name }} password was changed",
    html_body="""\
<p>The password for {{ email }} was just changed and all sessions were signed out.</p>
<p>If this was not you, reset your password immediately and contact support.</p>
""",
    text_body="""\
The password for {{ email }} was just changed and all sessions were signed out.

If this was not you, reset your password immediately and contact support.
""",
)
