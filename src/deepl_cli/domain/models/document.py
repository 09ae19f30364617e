"""Document models - handle and status of a document translation"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class DocumentInfo:
    """Handle returned by a document upload"""

    document_id: str
    document_key: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DocumentInfo":
        return cls(document_id=data["document_id"], document_key=data["document_key"])

    @classmethod
    def parse(cls, value: str) -> "DocumentInfo":
        """Parse an ``ID:KEY`` string

        Raises:
            ValueError: If the value is not a single ID:KEY pair
        """
        parts = value.split(":")
        if len(parts) != 2 or not all(parts):
            raise ValueError(f"invalid document handle: {value}")
        return cls(document_id=parts[0], document_key=parts[1])


@dataclass
class DocumentStatus:
    """Progress of a document translation"""

    document_id: str
    status: str
    seconds_remaining: Optional[int] = None
    billed_characters: Optional[int] = None
    error_message: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DocumentStatus":
        return cls(
            document_id=data.get("document_id", ""),
            status=data.get("status", ""),
            seconds_remaining=data.get("seconds_remaining"),
            billed_characters=data.get("billed_characters"),
            error_message=data.get("error_message") or data.get("message"),
        )

    @property
    def is_done(self) -> bool:
        return self.status == "done"

    @property
    def is_error(self) -> bool:
        return self.status == "error"

    @property
    def is_pending(self) -> bool:
        """Check if the document is still queued or translating"""
        return self.status in ("queued", "translating")
