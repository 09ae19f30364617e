"""DeepL API client"""

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Union
from urllib.parse import quote, urlencode

import requests

from deepl_cli.domain.config.client import ClientConfig
from deepl_cli.domain.config.retry import RetryConfig
from deepl_cli.domain.errors import FatalHTTPError
from deepl_cli.domain.models.document import DocumentInfo, DocumentStatus
from deepl_cli.domain.models.endpoint import EndpointDescriptor
from deepl_cli.domain.models.glossary import (
    GlossaryEntry,
    GlossaryInfo,
    decode_entries,
    encode_entries,
)
from deepl_cli.domain.models.language import Language, LanguagePair
from deepl_cli.domain.models.options import TranslateOptions
from deepl_cli.domain.models.translation import Translation
from deepl_cli.domain.models.usage import Usage
from deepl_cli.infrastructure.classifier import http_error_message
from deepl_cli.infrastructure.deepl.multipart import MultipartFileUpload
from deepl_cli.infrastructure.http_client import RequestDispatcher
from deepl_cli.infrastructure.streaming import DEFAULT_CHUNK_SIZE

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
TSV_CONTENT_TYPE = "text/tab-separated-values"


def _json_body(data: Dict[str, Any]) -> bytes:
    return json.dumps(data).encode("utf-8")


def _expect_status(response: requests.Response, expected: int) -> None:
    """Close the response and raise if the 2xx status is not the expected one"""
    if response.status_code != expected:
        response.close()
        raise FatalHTTPError(response.status_code, http_error_message(response.status_code))


def _iter_content(response: requests.Response, chunk_size: int) -> Iterator[bytes]:
    with response:
        for chunk in response.iter_content(chunk_size=chunk_size):
            if chunk:
                yield chunk


class DeepLClient:
    """Client for DeepL API operations

    Every call goes through the ``RequestDispatcher``; this class only maps
    arguments to endpoint descriptors and decodes responses.
    """

    def __init__(
        self,
        dispatcher: RequestDispatcher,
        *,
        cancel_event: Optional[threading.Event] = None,
        upload_chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        """Initialize DeepL client

        Args:
            dispatcher: Request dispatcher used for every call
            cancel_event: Signal aborting retry waits of every call
            upload_chunk_size: Bytes read from uploaded files per chunk
        """
        self.dispatcher = dispatcher
        self.cancel_event = cancel_event
        self.upload_chunk_size = upload_chunk_size

    @classmethod
    def from_config(
        cls,
        client_config: ClientConfig,
        retry_config: Optional[RetryConfig] = None,
        *,
        cancel_event: Optional[threading.Event] = None,
        upload_chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> "DeepLClient":
        """Create a client from configuration models

        Raises:
            ValueError: If no auth key is configured
        """
        dispatcher = RequestDispatcher(
            client_config.auth_key or "",
            client_config.server_url,
            timeout=client_config.timeout,
            retry_config=retry_config,
        )
        logger.info(f"DeepL client initialized for {dispatcher.server_url}")
        return cls(dispatcher, cancel_event=cancel_event, upload_chunk_size=upload_chunk_size)

    def _call(self, endpoint: EndpointDescriptor) -> requests.Response:
        return self.dispatcher.dispatch(endpoint, cancel_event=self.cancel_event)

    def _call_json(self, endpoint: EndpointDescriptor, expected_status: int = 200) -> Any:
        response = self._call(endpoint)
        _expect_status(response, expected_status)
        with response:
            return response.json()

    # Text translation

    def translate_text(
        self,
        texts: Union[str, Sequence[str]],
        target_lang: str,
        options: Optional[TranslateOptions] = None,
    ) -> List[Translation]:
        """Translate one or more texts

        The total request body must not exceed 128 KiB.

        Args:
            texts: Text or texts to translate
            target_lang: Target language code
            options: Optional translation options

        Returns:
            One Translation per input text, in order
        """
        if isinstance(texts, str):
            texts = [texts]
        if not texts:
            raise ValueError("at least one text is required")
        if not target_lang:
            raise ValueError("target_lang is required")

        pairs = [("text", text) for text in texts]
        pairs.append(("target_lang", target_lang))
        if options is not None:
            pairs.extend(options.to_form_fields().items())

        endpoint = EndpointDescriptor.build(
            "POST",
            "translate",
            headers={"Content-Type": FORM_CONTENT_TYPE},
            body=urlencode(pairs).encode("utf-8"),
        )
        data = self._call_json(endpoint)
        translations = [Translation.from_dict(t) for t in data.get("translations", [])]
        logger.debug(f"Translated {len(texts)} text(s) into {target_lang}")
        return translations

    # Documents

    def translate_document_upload(
        self,
        path: Union[str, Path],
        target_lang: str,
        options: Optional[TranslateOptions] = None,
    ) -> DocumentInfo:
        """Upload a document for translation

        The file is streamed; it is never read into memory as a whole.

        Raises:
            FileNotFoundError: If the file does not exist
            DocumentProductionError: If the file cannot be read while uploading
        """
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {path}")

        fields = [("filename", path.name), ("target_lang", target_lang)]
        if options is not None:
            fields.extend(options.document_fields().items())

        upload = MultipartFileUpload(path, fields, chunk_size=self.upload_chunk_size)
        endpoint = EndpointDescriptor.build(
            "POST",
            "document",
            headers={"Content-Type": upload.content_type},
            body=upload.open_body,
        )
        logger.info(f"Uploading document {path} for translation into {target_lang}")
        return DocumentInfo.from_dict(self._call_json(endpoint))

    def translate_document_status(self, document_id: str, document_key: str) -> DocumentStatus:
        """Get the translation status of an uploaded document"""
        endpoint = EndpointDescriptor.build(
            "POST",
            f"document/{quote(document_id, safe='')}",
            headers={"Content-Type": JSON_CONTENT_TYPE},
            body=_json_body({"document_key": document_key}),
        )
        return DocumentStatus.from_dict(self._call_json(endpoint))

    def translate_document_download(
        self,
        document_id: str,
        document_key: str,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> Iterator[bytes]:
        """Download a translated document

        The request is sent immediately; the returned iterator streams the
        content and closes the response when exhausted or closed.
        """
        endpoint = EndpointDescriptor.build(
            "POST",
            f"document/{quote(document_id, safe='')}/result",
            headers={"Content-Type": JSON_CONTENT_TYPE},
            body=_json_body({"document_key": document_key}),
        )
        response = self._call(endpoint)
        _expect_status(response, 200)
        return _iter_content(response, chunk_size)

    # Glossaries

    def create_glossary(
        self,
        name: str,
        source_lang: str,
        target_lang: str,
        entries: Iterable[GlossaryEntry],
    ) -> GlossaryInfo:
        """Create a glossary from source/target entries"""
        entries = list(entries)
        if not entries:
            raise ValueError("a glossary needs at least one entry")

        endpoint = EndpointDescriptor.build(
            "POST",
            "glossaries",
            headers={"Content-Type": JSON_CONTENT_TYPE},
            body=_json_body(
                {
                    "name": name,
                    "source_lang": source_lang,
                    "target_lang": target_lang,
                    "entries": encode_entries(entries),
                    "entries_format": "tsv",
                }
            ),
        )
        glossary = GlossaryInfo.from_dict(self._call_json(endpoint, expected_status=201))
        logger.info(f"Created glossary {glossary.glossary_id} with {len(entries)} entries")
        return glossary

    def list_glossaries(self) -> List[GlossaryInfo]:
        endpoint = EndpointDescriptor.build("GET", "glossaries")
        data = self._call_json(endpoint)
        return [GlossaryInfo.from_dict(g) for g in data.get("glossaries", [])]

    def get_glossary(self, glossary_id: str) -> GlossaryInfo:
        endpoint = EndpointDescriptor.build("GET", f"glossaries/{quote(glossary_id, safe='')}")
        return GlossaryInfo.from_dict(self._call_json(endpoint))

    def delete_glossary(self, glossary_id: str) -> None:
        endpoint = EndpointDescriptor.build("DELETE", f"glossaries/{quote(glossary_id, safe='')}")
        response = self._call(endpoint)
        _expect_status(response, 204)
        response.close()
        logger.info(f"Deleted glossary {glossary_id}")

    def get_glossary_entries(self, glossary_id: str) -> List[GlossaryEntry]:
        endpoint = EndpointDescriptor.build(
            "GET",
            f"glossaries/{quote(glossary_id, safe='')}/entries",
            headers={"Accept": TSV_CONTENT_TYPE},
        )
        response = self._call(endpoint)
        _expect_status(response, 200)
        with response:
            response.encoding = response.encoding or "utf-8"
            return decode_entries(response.text)

    # Languages & usage

    def get_languages(self, lang_type: Optional[str] = None) -> List[Language]:
        """List supported languages

        Args:
            lang_type: "source" or "target"; the API defaults to source

        Raises:
            ValueError: If lang_type is not source or target
        """
        path = "languages"
        if lang_type:
            if lang_type not in ("source", "target"):
                raise ValueError(f"Invalid languages `type` value: {lang_type}")
            path = f"languages?{urlencode({'type': lang_type})}"

        endpoint = EndpointDescriptor.build("GET", path)
        return [Language.from_dict(item) for item in self._call_json(endpoint)]

    def get_glossary_language_pairs(self) -> List[LanguagePair]:
        endpoint = EndpointDescriptor.build("GET", "glossary-language-pairs")
        data = self._call_json(endpoint)
        return [LanguagePair.from_dict(p) for p in data.get("supported_languages", [])]

    def get_usage(self) -> Usage:
        endpoint = EndpointDescriptor.build("GET", "usage")
        return Usage.from_dict(self._call_json(endpoint))
