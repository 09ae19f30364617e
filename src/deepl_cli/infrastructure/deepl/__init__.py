"""DeepL API bindings"""

from deepl_cli.infrastructure.deepl.client import DeepLClient
from deepl_cli.infrastructure.deepl.multipart import MultipartFileUpload

__all__ = ["DeepLClient", "MultipartFileUpload"]
