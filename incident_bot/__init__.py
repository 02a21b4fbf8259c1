"""Incident channels whose state lives in the chat log."""
