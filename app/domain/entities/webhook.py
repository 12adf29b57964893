"""Domain entity representing an outgoing webhook registration."""

from dataclasses import dataclass, field


@dataclass
class Webhook:
    """HTTP endpoint that receives selected notification actions."""

    webhook_id: str
    name: str
    webhook_url: str
    actions: list[str] = field(default_factory=list)
    contractor_id: str | None = None
    user_id: str | None = None

    def subscribes_to(self, action: str) -> bool:
        return action in self.actions


__all__ = ["Webhook"]
