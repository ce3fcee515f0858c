"""Email templates: template key -> subject/HTML body (Jinja, autoescaped)."""

from __future__ import annotations

from typing import Any

from jinja2 import Environment, StrictUndefined, Template

_LAYOUT_HEAD = (
    '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">'
    '<h1 style="color: #1f2937; font-size: 28px; text-align: center;">{{ app_name }}</h1>'
)
_LAYOUT_FOOT = (
    '<hr style="margin: 30px 0; border: none; border-top: 1px solid #e5e7eb;">'
    '<p style="color: #374151; font-size: 14px; text-align: center;">'
    "Best regards,<br><strong>The {{ app_name }} Team</strong></p>"
    '<p style="color: #9ca3af; font-size: 12px; text-align: center;">'
    "This is an automated message. Please do not reply to this email.</p></div>"
)

# In-repo template definitions: key -> (subject_template, body_template)
_DEFAULT_TEMPLATES: dict[str, tuple[str, str]] = {
    "password_reset": (
        "Password Reset Request - {{ app_name }}",
        _LAYOUT_HEAD
        + "<h2>Password Reset Request</h2>"
        "<p>Hello {{ user_name or 'there' }},</p>"
        "<p>We received a request to reset your password for your {{ app_name }} account. "
        "If you made this request, use the link below to choose a new password:</p>"
        '<p style="text-align: center;"><a href="{{ reset_link }}">Reset Your Password</a></p>'
        "<p>If the button doesn't work, copy and paste this link into your browser:</p>"
        '<p style="word-break: break-all; font-family: monospace;">{{ reset_link }}</p>'
        "<p><strong>This link will expire in {{ ttl_text }} and can only be used once.</strong></p>"
        "<p>If you didn't request a password reset, you can safely ignore this email. "
        "Your password will remain unchanged.</p>"
        + _LAYOUT_FOOT,
    ),
    "invitation": (
        "You're invited to join {{ app_name }}",
        _LAYOUT_HEAD
        + "<h2>You're invited!</h2>"
        "<p>Hello {{ user_name or 'there' }},</p>"
        "<p>You have been invited to join {{ app_name }} as <strong>{{ role }}</strong>. "
        "Use the link below to create your account:</p>"
        '<p style="text-align: center;"><a href="{{ signup_link }}">Accept Invitation</a></p>'
        '<p style="word-break: break-all; font-family: monospace;">{{ signup_link }}</p>'
        "<p>This invitation will expire in {{ ttl_text }}.</p>"
        + _LAYOUT_FOOT,
    ),
}


class EmailTemplateRenderer:
    """IEmailTemplateRenderer backed by Jinja string templates.

    Bodies HTML-escape every variable (subjects are plain text); a missing context variable raises instead
    of rendering an empty string.
    """

    def __init__(
        self,
        templates: dict[str, tuple[str, str]] | None = None,
    ) -> None:
        """Initialize with optional template dict; falls back to _DEFAULT_TEMPLATES."""
        self._templates = templates or _DEFAULT_TEMPLATES
        self._env = Environment(autoescape=True, undefined=StrictUndefined)
        self._subject_env = Environment(autoescape=False, undefined=StrictUndefined)
        self._compiled: dict[str, tuple[Template, Template]] = {}
        for key, (sub_str, body_str) in self._templates.items():
            self._compiled[key] = (
                self._subject_env.from_string(sub_str),
                self._env.from_string(body_str),
            )

    @property
    def keys(self) -> list[str]:
        return sorted(self._compiled)

    def render(self, template_key: str, context: dict[str, Any]) -> tuple[str, str]:
        """Render subject and body for the template key. Raises KeyError if key unknown."""
        if template_key not in self._compiled:
            raise KeyError(f"Unknown email template: {template_key}")
        subject_tpl, body_tpl = self._compiled[template_key]
        return subject_tpl.render(**context), body_tpl.render(**context)
