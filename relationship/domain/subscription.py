from dataclasses import dataclass


@dataclass(frozen=True)
class Subscription:
    subscriber_id: str
    channel_id: str
