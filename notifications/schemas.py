"""Push notification schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field


class PushPayload(BaseModel):
    token: str = Field(min_length=1)
    title: str
    body: str
    data: dict[str, str] = Field(default_factory=dict)

    def to_fcm_message(self) -> dict:
        return {
            "message": {
                "token": self.token,
                "notification": {"title": self.title, "body": self.body},
                "data": self.data,
                "android": {
                    "priority": "high",
                    "notification": {
                        "channel_id": "bin_collections",
                        "sound": "default",
                        "click_action": "FLUTTER_NOTIFICATION_CLICK",
                    },
                },
                "apns": {"payload": {"aps": {"sound": "default", "badge": 1}}},
            }
        }
