"""Translation model - result of a text translation"""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class Translation:
    """One translated text"""

    detected_source_language: str
    text: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Translation":
        return cls(
            detected_source_language=data.get("detected_source_language", ""),
            text=data.get("text", ""),
        )
