"""
Conversion session state.

A ConversionSession is owned by whoever coordinates the upload, configure,
convert and download steps. It holds the selected file, the chosen output
format, the attempt history (newest first) and the downloads that have not
been released yet. Nothing here survives the process.
"""

import logging
from enum import IntEnum
from typing import Dict, List, Optional, Union

import httpx

from .config import ConversionQuality, OutputFormat
from .models import AttemptStatus, ConversionAttempt, DownloadHandle, UploadedFile
from .utils.conversion_core import check_output_format, dispatch
from .utils.error_handling import (
    ConversionFailedError,
    FileTooLargeError,
    NoFileSelectedError,
    NotFoundError,
    ReformatError,
)
from .utils.mime_detector import MimeTypeDetector, get_mime_detector

logger = logging.getLogger(__name__)


class ConversionStep(IntEnum):
    UPLOAD = 0
    CONFIGURE = 1
    CONVERT = 2
    DOWNLOAD = 3


class ConversionSession:
    """Selection, history and downloads for one client."""

    def __init__(self, session_id: str = "default", detector: Optional[MimeTypeDetector] = None):
        self.session_id = session_id
        self.detector = detector or get_mime_detector()
        self.selected_file: Optional[UploadedFile] = None
        self.file_type: Optional[str] = None
        self.output_format: Optional[OutputFormat] = None
        self.quality = ConversionQuality.BALANCED
        self.current_step = ConversionStep.UPLOAD
        self.attempts: List[ConversionAttempt] = []
        self.downloads: Dict[str, DownloadHandle] = {}

    # -- Upload step

    def select_file(self, upload: UploadedFile) -> str:
        """
        Accept a file for conversion.

        Any previous selection is cleared first. On failure the session is
        left with no file selected and the error is re-raised.

        Returns:
            The canonical type of the accepted file
        """
        self.clear_selection()
        canonical_type = self.detector.resolve(upload)
        self.selected_file = upload
        self.file_type = canonical_type
        self.current_step = ConversionStep.CONFIGURE
        logger.info(f"[{self.session_id}] Selected {upload.name} as {canonical_type}")
        return canonical_type

    def check_size(self, upload: UploadedFile) -> None:
        """Apply the size ceiling alone, before the upload's bytes are read."""
        try:
            self.detector.check_size(upload)
        except FileTooLargeError:
            self.clear_selection()
            raise

    def clear_selection(self) -> None:
        self.selected_file = None
        self.file_type = None
        self.output_format = None
        self.current_step = ConversionStep.UPLOAD

    # -- Configure step

    def choose_output(
        self,
        output_format: Union[OutputFormat, str],
        quality: Union[ConversionQuality, str, None] = None
    ) -> OutputFormat:
        if self.selected_file is None or self.file_type is None:
            raise NoFileSelectedError("Please select a file and output format")
        self.output_format = check_output_format(self.file_type, output_format)
        if quality is not None:
            self.quality = ConversionQuality(quality)
        return self.output_format

    # -- Convert step

    def start_attempt(self) -> ConversionAttempt:
        if self.selected_file is None or self.file_type is None or self.output_format is None:
            raise NoFileSelectedError("Please select a file and output format")
        attempt = ConversionAttempt(
            original_name=self.selected_file.name,
            original_type=self.file_type,
            output_format=self.output_format,
            quality=self.quality,
            size_label=self.selected_file.size_label
        )
        attempt.status = AttemptStatus.CONVERTING
        self.attempts.insert(0, attempt)
        self.current_step = ConversionStep.CONVERT
        return attempt

    def get_attempt(self, attempt_id: str) -> ConversionAttempt:
        for attempt in self.attempts:
            if attempt.id == attempt_id:
                return attempt
        raise NotFoundError(f"Conversion {attempt_id} not found")

    def update_progress(self, attempt_id: str, progress: int) -> None:
        attempt = self.get_attempt(attempt_id)
        if attempt.finished:
            return
        attempt.progress = max(0, min(100, int(progress)))

    def complete_attempt(self, attempt_id: str, handle: DownloadHandle) -> ConversionAttempt:
        attempt = self.get_attempt(attempt_id)
        attempt.status = AttemptStatus.COMPLETED
        attempt.progress = 100
        self.downloads[attempt_id] = handle
        self.current_step = ConversionStep.DOWNLOAD
        return attempt

    def fail_attempt(self, attempt_id: str, error: Union[ReformatError, str]) -> ConversionAttempt:
        attempt = self.get_attempt(attempt_id)
        attempt.status = AttemptStatus.FAILED
        attempt.progress = 0
        attempt.error = error.message if isinstance(error, ReformatError) else str(error)
        self.current_step = ConversionStep.DOWNLOAD
        return attempt

    async def convert(
        self,
        client: httpx.AsyncClient,
        endpoint: Optional[str] = None,
        **dispatch_options
    ) -> ConversionAttempt:
        """
        Dispatch the selected file and record the outcome.

        Raises:
            NoFileSelectedError: If no file or output format has been chosen
            ConversionFailedError: After marking the attempt failed
        """
        attempt = self.start_attempt()
        upload = self.selected_file
        try:
            handle = await dispatch(
                upload,
                self.file_type,
                self.output_format,
                self.quality,
                client=client,
                endpoint=endpoint,
                progress_callback=lambda percent: self.update_progress(attempt.id, percent),
                **dispatch_options
            )
        except ConversionFailedError as e:
            self.fail_attempt(attempt.id, e)
            logger.warning(f"[{self.session_id}] Conversion {attempt.id} failed: {e.message}")
            raise
        self.complete_attempt(attempt.id, handle)
        logger.info(f"[{self.session_id}] File converted to {attempt.output_format.value.upper()} successfully")
        return attempt

    # -- Download step

    def get_download(self, attempt_id: str) -> DownloadHandle:
        handle = self.downloads.get(attempt_id)
        if handle is None or handle.released:
            raise NotFoundError(f"No download available for conversion {attempt_id}")
        return handle

    def release_download(self, attempt_id: str) -> None:
        handle = self.downloads.pop(attempt_id, None)
        if handle is None:
            raise NotFoundError(f"No download available for conversion {attempt_id}")
        handle.release()

    def reset(self) -> None:
        """Start over with a new file; history and downloads are kept."""
        self.clear_selection()

    def to_dict(self) -> Dict[str, object]:
        return {
            "session_id": self.session_id,
            "step": self.current_step.name.lower(),
            "selected_file": self.selected_file.name if self.selected_file else None,
            "file_type": self.file_type,
            "output_format": self.output_format.value if self.output_format else None,
            "quality": self.quality.value,
        }


class SessionRegistry:
    """In-memory sessions keyed by session id."""

    def __init__(self, detector: Optional[MimeTypeDetector] = None):
        self.detector = detector
        self._sessions: Dict[str, ConversionSession] = {}

    def get(self, session_id: str) -> ConversionSession:
        session = self._sessions.get(session_id)
        if session is None:
            session = ConversionSession(session_id, detector=self.detector)
            self._sessions[session_id] = session
        return session

    def __len__(self) -> int:
        return len(self._sessions)
