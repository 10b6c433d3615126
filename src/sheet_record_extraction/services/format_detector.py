"""Workbook format detection.

This module checks the file extension of an uploaded workbook and detects
its container family (OOXML for ``.xlsx``, OLE2 for ``.xls``) from magic
bytes (file content signatures).
"""

from pathlib import Path

import magic

from sheet_record_extraction.models import ContainerFormat, FormatInfo
from sheet_record_extraction.utils.exceptions import UnsupportedFormatError
from sheet_record_extraction.utils.logging import get_logger

logger = get_logger(__name__)

__all__ = [
    "FormatDetector",
    "UnsupportedFormatError",
    "SUPPORTED_EXTENSIONS",
    "MIME_TO_CONTAINER",
]

SUPPORTED_EXTENSIONS: frozenset[str] = frozenset({".xls", ".xlsx"})

# MIME types reported by libmagic for workbook containers. ZIP-based
# types pass through: every .xlsx is a ZIP archive underneath.
MIME_TO_CONTAINER: dict[str, ContainerFormat] = {
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": (
        ContainerFormat.OOXML
    ),
    "application/zip": ContainerFormat.OOXML,
    "application/x-zip-compressed": ContainerFormat.OOXML,
    "application/vnd.ms-excel": ContainerFormat.OLE2,
    "application/vnd.ms-office": ContainerFormat.OLE2,
    "application/x-ole-storage": ContainerFormat.OLE2,
    "application/cdfv2": ContainerFormat.OLE2,
}

# Leading bytes of each container, used when libmagic only reports a
# generic binary type.
CONTAINER_SIGNATURES: dict[bytes, ContainerFormat] = {
    b"PK\x03\x04": ContainerFormat.OOXML,
    b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1": ContainerFormat.OLE2,
}


class FormatDetector:
    """Detects the container family of a workbook.

    The extension gate runs first (``.xls``/``.xlsx``, case-insensitive);
    the container is then chosen from the content, so an ``.xls`` file that
    really holds OOXML is still opened correctly.
    """

    def __init__(self) -> None:
        self._magic = magic.Magic(mime=True)

    def detect(self, content: bytes, filename: str | None = None) -> FormatInfo:
        """Detect the workbook container of ``content``.

        Args:
            content: Workbook bytes.
            filename: Original filename; when given, its extension must be
                ``.xls`` or ``.xlsx``.

        Returns:
            FormatInfo with the container family.

        Raises:
            UnsupportedFormatError: If the extension or the content is not a
                supported workbook.
        """
        extension = Path(filename).suffix.lower() if filename else ""
        if filename is not None and extension not in SUPPORTED_EXTENSIONS:
            raise UnsupportedFormatError(
                f"Unexpected file format: {filename}", filename=filename
            )

        detected_mime = self._detect_mime_from_content(content)
        container = MIME_TO_CONTAINER.get(detected_mime or "")
        if container is None:
            container = self._detect_from_signature(content)
        if container is None:
            raise UnsupportedFormatError(
                f"Unexpected file format: {detected_mime or 'unknown content'}",
                filename=filename,
                detected_mime=detected_mime,
            )

        expected = ".xlsx" if container is ContainerFormat.OOXML else ".xls"
        if extension and extension != expected:
            logger.warning(
                "File extension does not match detected container",
                extension=extension,
                container=container.value,
            )

        return FormatInfo(
            container=container,
            mime_type=detected_mime,
            extension=extension or expected,
        )

    def _detect_mime_from_content(self, content: bytes) -> str | None:
        if not content:
            return None

        try:
            detected = self._magic.from_buffer(content)
        except magic.MagicException as e:
            logger.warning(
                "Magic detection failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            return None
        return detected.lower() if detected else None

    @staticmethod
    def _detect_from_signature(content: bytes) -> ContainerFormat | None:
        for signature, container in CONTAINER_SIGNATURES.items():
            if content.startswith(signature):
                return container
        return None

    @staticmethod
    def get_supported_extensions() -> list[str]:
        return sorted(SUPPORTED_EXTENSIONS)
