"""Chat service: the inbound submit-message contract."""

from src.chat.service import ChatService, SubmitResult

__all__ = ["ChatService", "SubmitResult"]
