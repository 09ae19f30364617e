"""Glossary models"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List


@dataclass
class GlossaryEntry:
    """Source/target term pair"""

    source: str
    target: str

    @classmethod
    def parse(cls, value: str) -> "GlossaryEntry":
        """Parse a ``SOURCE=TARGET`` string

        Raises:
            ValueError: If the value does not hold exactly one '='
        """
        parts = value.split("=")
        if len(parts) != 2:
            raise ValueError(f"invalid glossary entry: {value}")
        return cls(source=parts[0], target=parts[1])


@dataclass
class GlossaryInfo:
    """Glossary metadata"""

    glossary_id: str
    name: str
    ready: bool
    source_lang: str
    target_lang: str
    creation_time: str
    entry_count: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GlossaryInfo":
        return cls(
            glossary_id=data["glossary_id"],
            name=data.get("name", ""),
            ready=bool(data.get("ready", False)),
            source_lang=data.get("source_lang", ""),
            target_lang=data.get("target_lang", ""),
            creation_time=data.get("creation_time", ""),
            entry_count=int(data.get("entry_count", 0)),
        )


def encode_entries(entries: Iterable[GlossaryEntry]) -> str:
    """Encode entries as TSV, one pair per line"""
    return "\n".join(f"{e.source}\t{e.target}" for e in entries)


def decode_entries(text: str) -> List[GlossaryEntry]:
    """Decode TSV entries, skipping blank lines

    Raises:
        ValueError: If a line does not hold exactly two columns
    """
    entries = []
    for line in text.splitlines():
        if not line.strip():
            continue
        columns = line.split("\t")
        if len(columns) != 2:
            raise ValueError(f"malformed glossary entry line: {line!r}")
        entries.append(GlossaryEntry(source=columns[0], target=columns[1]))
    return entries
