"""
Slack Data Models
"""

from pydantic import BaseModel, ConfigDict
from typing import Optional


class SlackChannel(BaseModel):
    """Channel facts from conversations.info / conversations.list."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    name: str = ""
    is_private: bool = False
    created: Optional[int] = None  # Unix seconds

    def has_prefix(self, prefix: str) -> bool:
        """Check whether the channel name marks an incident channel."""
        return bool(self.name) and self.name.startswith(prefix)
