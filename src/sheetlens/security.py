"""Pre-flight upload gate for spreadsheet files.

Rejects files before any bytes are decoded: the name must carry an accepted
extension, and the file must be non-empty and within the size limit.  This
is the caller-side gatekeeping step; the decoder itself never looks at the
file name.
"""

from __future__ import annotations

import logging
import os

from sheetlens.config import SheetLensConfig
from sheetlens.errors import ErrorCode, IngestError, UnsupportedExtensionError

logger = logging.getLogger("sheetlens")

_LARGE_FILE_THRESHOLD_MB = 10


class UploadScanner:
    """Run pre-flight checks on an uploaded file's name and size.

    Returns a list of errors/warnings.  Fatal errors (``E_*`` codes) mean
    the file should not be processed further.
    """

    def __init__(self, config: SheetLensConfig | None = None) -> None:
        self.config = config or SheetLensConfig()

    def is_accepted(self, file_name: str) -> bool:
        """Return True if *file_name* ends with an accepted extension."""
        _root, ext = os.path.splitext(file_name)
        accepted = {e.lower() for e in self.config.accepted_extensions}
        return ext.lower() in accepted

    def check_extension(self, file_name: str) -> None:
        """Raise :class:`UnsupportedExtensionError` for a rejected name."""
        if not self.is_accepted(file_name):
            raise UnsupportedExtensionError(
                f"Please select a valid Excel or CSV file "
                f"({', '.join(self.config.accepted_extensions)}): {file_name}"
            )

    def scan(self, file_name: str, file_size: int) -> list[IngestError]:
        """Run all pre-flight checks.

        Returns:
            List of errors/warnings.  Fatal errors have codes starting
            with ``E_``.
        """
        errors: list[IngestError] = []

        # --- 1. Extension check ---
        try:
            self.check_extension(file_name)
        except UnsupportedExtensionError as exc:
            logger.warning("sheetlens | file=%s | code=%s", file_name, exc.code.value)
            errors.append(exc.error)
            return errors

        # --- 2. Empty file ---
        if file_size == 0:
            errors.append(
                IngestError(
                    code=ErrorCode.E_DECODE_EMPTY,
                    message=f"File is empty (0 bytes): {file_name}",
                    stage="gate",
                )
            )
            return errors

        # --- 3. File size limit ---
        max_bytes = self.config.max_file_size_mb * 1024 * 1024
        if file_size > max_bytes:
            errors.append(
                IngestError(
                    code=ErrorCode.E_FILE_TOO_LARGE,
                    message=(
                        f"File size {file_size} bytes exceeds limit of "
                        f"{max_bytes} bytes ({self.config.max_file_size_mb} MB)"
                    ),
                    stage="gate",
                )
            )
            return errors

        # --- 4. Large file warning ---
        large_threshold = _LARGE_FILE_THRESHOLD_MB * 1024 * 1024
        if file_size > large_threshold:
            errors.append(
                IngestError(
                    code=ErrorCode.W_LARGE_FILE,
                    message=(
                        f"File is {file_size / (1024 * 1024):.1f} MB "
                        f"(> {_LARGE_FILE_THRESHOLD_MB} MB)"
                    ),
                    stage="gate",
                    recoverable=True,
                )
            )

        return errors
