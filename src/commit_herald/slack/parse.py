from typing import Dict, Any, Optional

def parse_event(event: Dict[str, Any], channel_id: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Parse a Slack message event.
    Returns a simplified event dict if it may carry a command, else None.
    """
    # 1. Filter by Channel
    if event.get("channel") != channel_id:
        return None

    # 2. Ignore Bots (including our own replies)
    if event.get("subtype") == "bot_message" or event.get("bot_id"):
        return None

    # 3. Ignore edits/deletions
    if event.get("subtype") in ["message_changed", "message_deleted"]:
        return None

    text = (event.get("text") or "").strip()
    if not text.startswith("!"):
        return None

    return {
        "channel": event["channel"],
        "ts": event.get("ts"),
        "user": event.get("user"),
        "text": text
    }
