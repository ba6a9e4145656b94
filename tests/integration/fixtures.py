"""Mock responses for Mastodon API integration tests."""

from __future__ import annotations

BASE_URL = "https://example.social"

APP_RESPONSE = {
    "id": "563419",
    "name": "integration test",
    "website": None,
    "redirect_uri": "urn:ietf:wg:oauth:2.0:oob",
    "client_id": "TWhM-tNSuncnqN7DBJmoyeLnk6K3iJJ71KKXxgL1hPM",
    "client_secret": "ZEaFUFmF0umgBX1qKJDjaU99Q31lDkOU8NutzTOoliw",
}

TOKEN_RESPONSE = {
    "access_token": "ZA-Yj3aBD8U8Cm7lKUp-lm9O9BmDgdhHzDeqsY8tlL0",
    "token_type": "Bearer",
    "scope": "read write follow",
    "created_at": 1573979017,
}

STATUS_RESPONSE = {
    "id": "103254962155278888",
    "created_at": "2019-12-05T08:56:15.000Z",
    "in_reply_to_id": None,
    "sensitive": False,
    "spoiler_text": "",
    "visibility": "public",
    "content": "<p>Hello from integration test!</p>",
    "media_attachments": [],
    "account": {"id": "1", "username": "tester", "acct": "tester"},
}

HOME_TIMELINE_RESPONSE = [
    STATUS_RESPONSE,
    {
        "id": "103254962155278887",
        "created_at": "2019-12-05T08:55:00.000Z",
        "visibility": "unlisted",
        "content": "<p>Earlier status</p>",
        "account": {"id": "2", "username": "friend", "acct": "friend@other.social"},
    },
]

MEDIA_RESPONSE = {
    "id": "22348641",
    "type": "image",
    "url": "https://files.example.social/media_attachments/files/022/348/641/original/cebc6d51e1e4fd93.png",
    "preview_url": "https://files.example.social/media_attachments/files/022/348/641/small/cebc6d51e1e4fd93.png",
    "description": "test upload",
}

THROTTLED_RESPONSE = {"error": "Throttled"}

NOT_FOUND_RESPONSE = {"error": "Record not found"}
