"""
Slack API Client

Responsibilities:
- conversations.info / conversations.list: Channel facts (name, visibility, creation)
- pins.list / pins.add: The pinned summary message
- conversations.history: Single messages by ts and full channel history
- chat.postMessage / chat.update: Posting and overwriting messages

Returns platform-shaped dicts; interpretation happens in the parsers.
"""

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError
from incident_bot.config import get_settings
from typing import List, Optional, Dict, Any
import asyncio
import logging

logger = logging.getLogger(__name__)


class SlackClient:
    """Async wrapper around the Slack WebClient."""

    def __init__(self, client: Optional[WebClient] = None):
        settings = get_settings()
        self.client = client or WebClient(token=settings.slack_bot_token)
        self.settings = settings

    async def _call(self, method: str, **kwargs) -> Dict[str, Any]:
        try:
            result = await asyncio.to_thread(getattr(self.client, method), **kwargs)
            return result.data if hasattr(result, "data") else result
        except SlackApiError as e:
            logger.error(f"Slack API error in {method}: {e.response['error']}")
            raise
        except Exception as e:
            logger.error(f"Error calling {method}: {e}")
            raise

    async def get_channel_info(self, channel_id: str) -> Dict[str, Any]:
        """Fetch channel facts (name, is_private, created)."""
        result = await self._call("conversations_info", channel=channel_id)
        return result.get("channel") or {}

    async def list_channels(self, limit: int = 1000) -> List[Dict[str, Any]]:
        """List public and private channels visible to the bot."""
        result = await self._call(
            "conversations_list",
            types="public_channel,private_channel",
            limit=limit,
        )
        return result.get("channels") or []

    async def list_pins(self, channel_id: str) -> List[Dict[str, Any]]:
        """
        List pinned items in listing order.

        Pin records only carry a reference to the message; use get_history_at
        to load the full message with its blocks.
        """
        result = await self._call("pins_list", channel=channel_id)
        items = result.get("items") or []
        logger.debug(f"Found {len(items)} pinned items in {channel_id}")
        return items

    async def get_history_at(
        self, channel_id: str, ts: str
    ) -> Optional[Dict[str, Any]]:
        """Fetch the single message whose ts is exactly ts."""
        result = await self._call(
            "conversations_history",
            channel=channel_id,
            latest=str(ts),
            limit=1,
            inclusive=True,
        )
        messages = result.get("messages") or []
        return messages[0] if messages else None

    async def get_history(
        self, channel_id: str, limit: int = 1000
    ) -> List[Dict[str, Any]]:
        """Fetch one page of channel history (most recent first)."""
        logger.info(f"Fetching history from channel {channel_id}, limit={limit}")
        result = await self._call(
            "conversations_history", channel=channel_id, limit=limit
        )
        messages = result.get("messages") or []
        logger.info(f"Successfully fetched {len(messages)} messages")
        return messages

    async def post_message(
        self,
        channel_id: str,
        text: str,
        blocks: Optional[List[Dict[str, Any]]] = None,
        thread_ts: Optional[str] = None,
        reply_broadcast: bool = False,
    ) -> Dict[str, Any]:
        """Post a message; returns the API response (with the new ts)."""
        kwargs: Dict[str, Any] = {"channel": channel_id, "text": text}
        if blocks is not None:
            kwargs["blocks"] = blocks
        if thread_ts:
            kwargs["thread_ts"] = thread_ts
            kwargs["reply_broadcast"] = reply_broadcast
        return await self._call("chat_postMessage", **kwargs)

    async def update_message(
        self,
        channel_id: str,
        ts: str,
        text: str,
        blocks: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """Overwrite an existing message in place."""
        kwargs: Dict[str, Any] = {"channel": channel_id, "ts": ts, "text": text}
        if blocks is not None:
            kwargs["blocks"] = blocks
        return await self._call("chat_update", **kwargs)

    async def add_pin(self, channel_id: str, ts: str) -> Dict[str, Any]:
        """Pin a message to the channel."""
        return await self._call("pins_add", channel=channel_id, timestamp=ts)
