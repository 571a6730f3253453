"""Transactional email (welcome, subscription and usage alerts)."""

from .email import EmailRequest, EmailSender, render
from .templates import EmailContent, EmailType

__all__ = ["EmailContent", "EmailRequest", "EmailSender", "EmailType", "render"]
