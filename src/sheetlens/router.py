"""SheetRouter -- orchestrator and public API for the sheetlens pipeline.

Routes one uploaded file through the full pipeline:

1. Gate the file name and size via :class:`UploadScanner`.
2. Read the bytes (the only step that may block).
3. Decode via :class:`TabularDecoder` into a :class:`Workbook`.
4. Profile every sheet via :class:`ColumnProfiler` (stats, column types,
   chart recommendations).
5. Record an upload-history entry when a user id and a
   :class:`HistoryService` are available.
6. Return a fully-assembled :class:`UploadResult`.

Gate, read and decode failures stop the pipeline and yield a result with
``success=False`` and no workbook.  History failures are reported as
warnings and never fail the upload.
"""

from __future__ import annotations

import asyncio
import logging
import mimetypes
import os
import time

from sheetlens.config import SheetLensConfig
from sheetlens.dates import DateParser
from sheetlens.decoder import TabularDecoder
from sheetlens.errors import (
    DecodeError,
    ErrorCode,
    IngestError,
    ReadError,
)
from sheetlens.history import HistoryService
from sheetlens.models import FileHistoryRecord, SheetAnalysis, UploadResult, Workbook
from sheetlens.profiler import ColumnProfiler
from sheetlens.security import UploadScanner

logger = logging.getLogger("sheetlens")


class SheetRouter:
    """Drives an upload from raw file to per-sheet analyses.

    Parameters
    ----------
    history_service:
        Optional service used to record upload history.  When *None*, no
        history is written.
    config:
        Pipeline configuration.  Uses defaults when *None*.
    date_parser:
        Optional date-parsing strategy handed to the profiler.
    """

    def __init__(
        self,
        history_service: HistoryService | None = None,
        config: SheetLensConfig | None = None,
        date_parser: DateParser | None = None,
    ) -> None:
        self._config = config or SheetLensConfig()
        self._history = history_service
        self._scanner = UploadScanner(self._config)
        self._decoder = TabularDecoder(self._config)
        self._profiler = ColumnProfiler(self._config, date_parser=date_parser)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def can_handle(self, file_name: str) -> bool:
        """Return True if *file_name* passes the extension gate."""
        return self._scanner.is_accepted(file_name)

    def process(self, file_path: str, user_id: str | None = None) -> UploadResult:
        """Process a spreadsheet file from disk.

        The extension is checked before anything is read, so a rejected
        name never touches the filesystem.  The on-disk size is gated next,
        so an oversized or empty file is never loaded into memory.
        """
        start = time.monotonic()
        file_name = os.path.basename(file_path)

        if not self.can_handle(file_name):
            gate_errors = self._scanner.scan(file_name, 0)
            return self._fail(file_name, gate_errors, start)

        try:
            gate_errors = self._scanner.scan(file_name, self._file_size(file_path))
            if any(e.is_fatal for e in gate_errors):
                return self._fail(file_name, gate_errors, start)
            data = self._read_bytes(file_path)
        except ReadError as exc:
            logger.error(
                "sheetlens | file=%s | code=%s | detail=%s",
                file_name,
                exc.code.value,
                exc,
            )
            return self._fail(file_name, [exc.error], start)

        return self.process_bytes(data, file_name, user_id=user_id)

    def process_bytes(
        self,
        data: bytes,
        file_name: str,
        user_id: str | None = None,
        content_type: str | None = None,
    ) -> UploadResult:
        """Process an upload already held in memory."""
        start = time.monotonic()

        # --- Gate ---
        gate_errors = self._scanner.scan(file_name, len(data))
        fatal = [e for e in gate_errors if e.is_fatal]
        if fatal:
            return self._fail(file_name, gate_errors, start)
        warnings = [e for e in gate_errors if not e.is_fatal]

        # --- Decode ---
        try:
            workbook, decode_warnings = self._decoder.decode_with_warnings(data, file_name)
        except DecodeError as exc:
            logger.error(
                "sheetlens | file=%s | code=%s | detail=%s",
                file_name,
                exc.code.value,
                exc,
            )
            return self._fail(file_name, warnings + [exc.error], start)
        warnings.extend(decode_warnings)

        # --- Profile ---
        analyses = {
            name: self._profiler.profile(name, workbook.rows(name))
            for name in workbook.sheet_names
        }

        # --- History ---
        history = None
        if user_id and self._history is not None:
            history = self._record_history(
                user_id, file_name, len(data), content_type, workbook, warnings
            )

        elapsed = time.monotonic() - start
        logger.info(
            "sheetlens | file=%s | sheets=%d | active=%s | warnings=%d | time=%.3fs",
            file_name,
            len(workbook.sheet_names),
            workbook.first_sheet,
            len(warnings),
            elapsed,
        )
        return UploadResult(
            success=True,
            message=f"Processed {file_name}: {len(workbook.sheet_names)} sheet(s).",
            file_name=file_name,
            workbook=workbook,
            analyses=analyses,
            active_sheet=workbook.first_sheet,
            history=history,
            warnings=[w.code.value for w in warnings],
            error_details=warnings,
            processing_time_seconds=elapsed,
        )

    async def aprocess(self, file_path: str, user_id: str | None = None) -> UploadResult:
        """Async wrapper around :meth:`process`.

        Offloads the synchronous ``process()`` call to a thread via
        ``asyncio.to_thread()``.
        """
        return await asyncio.to_thread(self.process, file_path, user_id)

    def analyze(self, workbook: Workbook, sheet_name: str | None = None) -> SheetAnalysis:
        """Re-derive the analysis for *sheet_name* (default: the first sheet).

        Raises
        ------
        ValueError
            If the sheet is not part of *workbook*.
        """
        target = sheet_name or workbook.first_sheet
        if target is None or target not in workbook.sheets:
            raise ValueError(f"Sheet '{target}' not found in workbook")
        return self._profiler.profile(target, workbook.rows(target))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _file_size(file_path: str) -> int:
        try:
            return os.path.getsize(file_path)
        except OSError as exc:
            raise ReadError(f"Failed to read the file: {exc}") from exc

    @staticmethod
    def _read_bytes(file_path: str) -> bytes:
        try:
            with open(file_path, "rb") as fh:
                return fh.read()
        except OSError as exc:
            raise ReadError(f"Failed to read the file: {exc}") from exc

    def _record_history(
        self,
        user_id: str,
        file_name: str,
        file_size: int,
        content_type: str | None,
        workbook: Workbook,
        warnings: list[IngestError],
    ) -> FileHistoryRecord | None:
        assert self._history is not None
        result = self._history.save_file_upload_history(
            user_id,
            {
                "name": file_name,
                "size": file_size,
                "type": content_type or mimetypes.guess_type(file_name)[0],
                "sheets": workbook.sheet_names,
            },
        )
        if result.success:
            return result.record

        logger.warning("Failed to save file history: %s", result.message)
        warnings.append(
            IngestError(
                code=ErrorCode.W_HISTORY_NOT_SAVED,
                message=f"Upload history not saved: {result.message}",
                stage="history",
                recoverable=True,
            )
        )
        return None

    @staticmethod
    def _fail(
        file_name: str, details: list[IngestError], start: float
    ) -> UploadResult:
        fatal = [e for e in details if e.is_fatal]
        message = fatal[0].message if fatal else "Upload rejected."
        return UploadResult(
            success=False,
            message=message,
            file_name=file_name,
            errors=[e.code.value for e in fatal],
            warnings=[e.code.value for e in details if not e.is_fatal],
            error_details=details,
            processing_time_seconds=time.monotonic() - start,
        )


def create_default_router(**overrides: object) -> SheetRouter:
    """Factory that builds a router with in-memory history stores.

    Recognized keyword arguments:

    - ``history_service``: HistoryService (default: in-memory stores)
    - ``config``: SheetLensConfig (default: SheetLensConfig())

    Any other keyword arguments are passed to SheetLensConfig.
    """
    from sheetlens.backends import InMemoryHistoryStore, InMemoryUserStore

    router_keys = {"history_service", "config"}
    router_kwargs = {k: v for k, v in overrides.items() if k in router_keys}
    config_kwargs = {k: v for k, v in overrides.items() if k not in router_keys}

    config = router_kwargs.get("config")
    if config is None:
        config = SheetLensConfig(**config_kwargs)

    history_service = router_kwargs.get("history_service")
    if history_service is None:
        history_service = HistoryService(InMemoryUserStore(), InMemoryHistoryStore())

    return SheetRouter(history_service=history_service, config=config)  # type: ignore[arg-type]
