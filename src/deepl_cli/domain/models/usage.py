"""Usage model - account usage and limits"""

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional


@dataclass
class Usage:
    """Usage counters; limits the account does not have are None"""

    character_count: Optional[int] = None
    character_limit: Optional[int] = None
    document_count: Optional[int] = None
    document_limit: Optional[int] = None
    team_document_count: Optional[int] = None
    team_document_limit: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Usage":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @property
    def character_limit_reached(self) -> bool:
        if self.character_count is None or not self.character_limit:
            return False
        return self.character_count >= self.character_limit
