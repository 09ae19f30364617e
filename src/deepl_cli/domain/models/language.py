"""Language models"""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class Language:
    """Supported source or target language"""

    code: str
    name: str
    supports_formality: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Language":
        return cls(
            code=data["language"],
            name=data.get("name", ""),
            supports_formality=bool(data.get("supports_formality", False)),
        )

    def describe(self) -> str:
        if self.supports_formality:
            return f"{self.code}: {self.name} (supports formality)"
        return f"{self.code}: {self.name}"


@dataclass
class LanguagePair:
    """Source/target pair supported by glossaries"""

    source_lang: str
    target_lang: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LanguagePair":
        return cls(source_lang=data["source_lang"], target_lang=data["target_lang"])
