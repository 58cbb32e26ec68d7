"""Шаблоны писем о мутациях задач."""

from typing import NamedTuple

from src.core.enums import NotificationAction


class EmailTemplate(NamedTuple):
    subject: str
    body: str


TEMPLATES: dict[NotificationAction, EmailTemplate] = {
    NotificationAction.CREATE: EmailTemplate(
        subject="New Task Created",
        body="Hello {email},\n\nA new task '{title}' has been created.",
    ),
    NotificationAction.UPDATE: EmailTemplate(
        subject="Task Updated",
        body="Hello {email},\n\nThe task '{title}' has been updated.",
    ),
    NotificationAction.DELETE: EmailTemplate(
        subject="Task Deleted",
        body="Hello {email},\n\nThe task '{title}' has been deleted.",
    ),
}


def render(action: NotificationAction, email: str, title: str) -> tuple[str, str]:
    """Собрать (subject, body) для действия."""
    template = TEMPLATES[action]
    return template.subject, template.body.format(email=email, title=title)


def build_provider_payload(to_email: str, from_email: str, subject: str, body: str) -> dict:
    """Тело запроса к transactional email провайдеру (SendGrid v3 mail/send)."""
    return {
        "personalizations": [
            {
                "to": [{"email": to_email}],
                "subject": subject,
            }
        ],
        "from": {"email": from_email},
        "content": [{"type": "text/plain", "value": body}],
    }
