"""Streamed multipart/form-data bodies for document uploads.

Part headers are rendered with urllib3's ``RequestField`` and laid out the
same way as ``urllib3.filepost.encode_multipart_formdata``; only the file is
read in chunks instead of being held in memory.
"""

from __future__ import annotations

import mimetypes
import os
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from urllib3.fields import RequestField
from urllib3.filepost import choose_boundary

from deepl_cli.domain.errors import DocumentProductionError
from deepl_cli.infrastructure.streaming import (
    DEFAULT_CHUNK_SIZE,
    PipeWriter,
    StreamingBody,
)


class MultipartFileUpload:
    """Form fields followed by one file part, produced incrementally"""

    def __init__(
        self,
        path: Union[str, Path],
        fields: Sequence[Tuple[str, str]],
        *,
        file_field: str = "file",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        boundary: Optional[str] = None,
    ):
        self.path = Path(path)
        self.fields: List[Tuple[str, str]] = list(fields)
        self.file_field = file_field
        self.chunk_size = chunk_size
        self.boundary = boundary or choose_boundary()

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"

    def open_body(self) -> StreamingBody:
        """New body for one attempt; the file is opened by the producer"""
        return StreamingBody(
            self.write_to,
            chunk_size=self.chunk_size,
            name=f"multipart-{self.path.name}",
        )

    def write_to(self, writer: PipeWriter) -> None:
        """Write the whole form into ``writer``

        Raises:
            DocumentProductionError: If the file cannot be read or a part cannot be encoded
        """
        try:
            source = open(self.path, "rb")
        except OSError as e:
            raise DocumentProductionError(f"error opening file: {e}") from e

        with source:
            for name, value in self.fields:
                try:
                    data = value.encode("utf-8")
                except (AttributeError, UnicodeError) as e:
                    raise DocumentProductionError(f"error writing form field {name!r}: {e}") from e
                self._write_part_header(writer, RequestField(name=name, data=data))
                writer.write(data)
                writer.write(b"\r\n")

            filename = os.path.basename(self.path)
            content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
            part = RequestField(name=self.file_field, data=b"", filename=filename)
            self._write_part_header(writer, part, content_type=content_type)
            try:
                for chunk in iter(lambda: source.read(self.chunk_size), b""):
                    writer.write(chunk)
            except OSError as e:
                raise DocumentProductionError(f"error writing form file: {e}") from e
            writer.write(b"\r\n")

        writer.write(f"--{self.boundary}--\r\n".encode("latin-1"))

    def _write_part_header(
        self, writer: PipeWriter, field: RequestField, content_type: Optional[str] = None
    ) -> None:
        field.make_multipart(content_type=content_type)
        writer.write(f"--{self.boundary}\r\n".encode("latin-1"))
        writer.write(field.render_headers().encode("utf-8"))
