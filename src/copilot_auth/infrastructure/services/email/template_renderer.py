"""Sandboxed Jinja2 rendering for the built-in email templates."""

from jinja2 import StrictUndefined, TemplateError
from jinja2.sandbox import SandboxedEnvironment

from copilot_auth.core.logging import get_logger
from copilot_auth.infrastructure.services.email.templates import EmailTemplate

logger = get_logger(__name__)


def _environment(autoescape: bool) -> SandboxedEnvironment:
    return SandboxedEnvironment(
        autoescape=autoescape,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
    )


class TemplateRenderer:
    """Renders an :class:`EmailTemplate` into subject, HTML and text.

    Variables are HTML-escaped in the HTML body only. A missing variable is
    an error rather than an empty string.
    """

    def __init__(self) -> None:
        self._html = _environment(autoescape=True)
        self._text = _environment(autoescape=False)

    def render(self, template: EmailTemplate, variables: dict[str, str]) -> tuple[str, str, str]:
        """Render all three parts of a template.

        Args:
            template: The template to render.
            variables: Values substituted into every part.

        Returns:
            ``(subject, html_body, text_body)``.

        Raises:
            jinja2.TemplateError: If a part fails to compile or references
                an undefined variable.
        """
        try:
            subject = self._text.from_string(template.subject).render(**variables)
            html_body = self._html.from_string(template.html_body).render(**variables)
            text_body = self._text.from_string(template.text_body).render(**variables)
        except TemplateError as e:
            logger.error("Email template rendering failed", subject=template.subject, error=str(e))
            raise
        return subject.strip(), html_body, text_body
