"""Document translation workflow: upload, wait, download"""

import logging
import threading
from pathlib import Path
from typing import Callable, Optional, Union

from deepl_cli.domain.errors import DocumentTranslationError, RetryCancelledError
from deepl_cli.domain.models.document import DocumentInfo, DocumentStatus
from deepl_cli.domain.models.options import TranslateOptions
from deepl_cli.infrastructure.deepl.client import DeepLClient

logger = logging.getLogger(__name__)


class DocumentTranslationService:
    """Runs a document through the upload/status/download endpoints"""

    def __init__(
        self,
        client: DeepLClient,
        poll_interval: float = 5.0,
        max_poll_interval: float = 60.0,
        cancel_event: Optional[threading.Event] = None,
        wait: Optional[Callable[[float], bool]] = None,
    ):
        """Initialize document translation service

        Args:
            client: DeepL API client
            poll_interval: Seconds between status checks without a server estimate
            max_poll_interval: Upper bound on a single wait
            cancel_event: Signal aborting the wait between status checks
            wait: Optional wait function returning True if cancelled
        """
        self.client = client
        self.poll_interval = poll_interval
        self.max_poll_interval = max_poll_interval
        self.cancel_event = cancel_event or threading.Event()
        self._wait = wait or self.cancel_event.wait

    def translate_document(
        self,
        input_path: Union[str, Path],
        output_path: Union[str, Path],
        target_lang: str,
        options: Optional[TranslateOptions] = None,
    ) -> DocumentStatus:
        """Translate a document and write the result to ``output_path``

        Returns:
            Final document status

        Raises:
            DocumentTranslationError: If the server reports a failed translation
            RetryCancelledError: If cancelled while waiting for the translation
        """
        info = self.client.translate_document_upload(input_path, target_lang, options)
        logger.info(f"Document uploaded as {info.document_id}")

        status = self.wait_until_done(info)
        self.download(info, output_path)
        return status

    def wait_until_done(self, info: DocumentInfo) -> DocumentStatus:
        """Poll the document status until it is done or failed"""
        while True:
            status = self.client.translate_document_status(info.document_id, info.document_key)
            if status.is_done:
                logger.info(
                    f"Document {info.document_id} translated "
                    f"({status.billed_characters or 0} characters billed)"
                )
                return status
            if status.is_error:
                raise DocumentTranslationError(info.document_id, status.error_message)
            if not status.is_pending:
                logger.warning(f"Unexpected status for document {info.document_id}: {status.status!r}")

            delay = self._next_delay(status)
            logger.debug(f"Document {info.document_id} is {status.status}, checking again in {delay:.1f}s")
            if self._wait(delay) or self.cancel_event.is_set():
                raise RetryCancelledError(f"waiting for document {info.document_id} cancelled")

    def _next_delay(self, status: DocumentStatus) -> float:
        delay = self.poll_interval
        if status.seconds_remaining:
            delay = float(status.seconds_remaining)
        return max(0.0, min(delay, self.max_poll_interval))

    def download(self, info: DocumentInfo, output_path: Union[str, Path]) -> int:
        """Download the translated document

        The content goes to a hidden ".part" file next to ``output_path``, which
        is renamed over ``output_path`` only once the download completed. A
        failed download leaves an existing file untouched.

        Returns:
            Number of bytes written
        """
        output_path = Path(output_path)
        chunks = self.client.translate_document_download(info.document_id, info.document_key)
        partial_path = output_path.with_name(f".{output_path.name}.part")
        written = 0
        try:
            with open(partial_path, "wb") as f:
                for chunk in chunks:
                    f.write(chunk)
                    written += len(chunk)
            partial_path.replace(output_path)
        except BaseException:
            partial_path.unlink(missing_ok=True)
            raise
        finally:
            close = getattr(chunks, "close", None)
            if callable(close):
                close()
        logger.info(f"Wrote {written} bytes to {output_path}")
        return written
