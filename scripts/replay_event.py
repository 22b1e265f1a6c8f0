"""Send a signed app_mention event to a locally running Events API listener.

Usage:
    python scripts/replay_event.py "<@UBOT> what's the weather?"
"""
import asyncio
import json
import sys
import time
import os
import httpx
from dotenv import load_dotenv

from slack_agent.slack.verify import compute_signature

load_dotenv()

URL = f"http://localhost:{os.getenv('PORT', '3000')}/slack/events"

async def send_event(text: str, channel: str, twice: bool):
    secret = os.getenv("SLACK_SIGNING_SECRET", "")
    timestamp = str(int(time.time()))
    payload = {
        "type": "event_callback",
        "event": {
            "type": "app_mention",
            "channel": channel,
            "user": "U12345",
            "text": text,
            "ts": f"{timestamp}.000100",
            "event_ts": f"{timestamp}.000100"
        }
    }

    body = json.dumps(payload).encode('utf-8')
    headers = {
        "X-Slack-Request-Timestamp": timestamp,
        "X-Slack-Signature": compute_signature(secret, timestamp, body),
        "Content-Type": "application/json",
    }

    async with httpx.AsyncClient() as client:
        # Sending twice simulates Slack's at-least-once redelivery
        for _ in range(2 if twice else 1):
            print(f"Sending event to {URL}...")
            resp = await client.post(URL, content=body, headers=headers)
            print(f"Status: {resp.status_code}")
            print(f"Response: {resp.text}")

if __name__ == "__main__":
    text = sys.argv[1] if len(sys.argv) > 1 else input("Message text (include <@BOT_ID>): ")
    channel = os.getenv("REPLAY_CHANNEL_ID", "C12345")
    asyncio.run(send_event(text, channel, twice="--twice" in sys.argv))
