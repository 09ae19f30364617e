"""Translation options model."""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict


class TranslateOptions(BaseModel):
    """Optional parameters for text and document translation.

    Unset fields are omitted from the request so the API applies its own
    defaults.

    Attributes:
        source_lang: Language of the input, detected by the API if omitted
        split_sentences: "0" (no splitting), "1" (punctuation and newlines)
            or "nonewlines" (punctuation only)
        preserve_formatting: Respect the original formatting
        formality: Formal or informal register for supporting target languages
        glossary_id: Glossary to use, requires ``source_lang``
        tag_handling: "xml" or "html"
        outline_detection: Automatic detection of the XML structure
        non_splitting_tags: XML tags which never split sentences
        splitting_tags: XML tags which always split sentences
        ignore_tags: XML tags marking text not to be translated
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    source_lang: Optional[str] = None
    split_sentences: Optional[Literal["0", "1", "nonewlines"]] = None
    preserve_formatting: Optional[bool] = None
    formality: Optional[Literal["default", "more", "less", "prefer_more", "prefer_less"]] = None
    glossary_id: Optional[str] = None
    tag_handling: Optional[Literal["html", "xml"]] = None
    outline_detection: Optional[bool] = None
    non_splitting_tags: Optional[List[str]] = None
    splitting_tags: Optional[List[str]] = None
    ignore_tags: Optional[List[str]] = None

    def to_form_fields(self) -> Dict[str, str]:
        """Render the set options as form field values"""
        fields: Dict[str, str] = {}
        for name, value in self.model_dump(exclude_none=True).items():
            if isinstance(value, bool):
                fields[name] = "1" if value else "0"
            elif isinstance(value, list):
                fields[name] = ",".join(value)
            else:
                fields[name] = value
        return fields

    def document_fields(self) -> Dict[str, str]:
        """Subset of options accepted by the document endpoint"""
        fields = self.to_form_fields()
        return {k: v for k, v in fields.items() if k in ("source_lang", "formality", "glossary_id")}
