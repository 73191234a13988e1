from dataclasses import dataclass, field
from typing import List


@dataclass
class ReceiptPayload:
    """Payload for a point-of-sale receipt."""

    amount: float
    date: str
    items: List[str] = field(default_factory=list)
