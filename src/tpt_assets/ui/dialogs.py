"""Native file dialogs exposed to backend callers.

Dialogs must run on the Qt GUI thread. When a caller on another thread asks
for one, the request travels to the GUI thread through a queued signal that
carries a :class:`concurrent.futures.Future`; the caller blocks on that future
until the user answers. Once issued a request cannot be cancelled.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import Future
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from PySide6.QtCore import QObject, Qt, QThread, Signal, Slot
from PySide6.QtWidgets import QFileDialog, QWidget

from ..errors import DialogCancelledError, ValidationError
from ..utils.paths import optional_path

__all__ = ["FileDialogs", "FileFilter", "SaveFileOptions"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FileFilter:
    """Named group of file extensions offered by a save dialog."""

    name: str
    extensions: tuple[str, ...]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> FileFilter | None:
        """Return a filter for ``{name, extensions}``, or ``None`` if incomplete."""

        name = data.get("name")
        extensions = data.get("extensions")
        if not isinstance(name, str) or not isinstance(extensions, Sequence):
            return None
        if isinstance(extensions, str):
            return None
        cleaned = tuple(
            ext.strip().lstrip(".") for ext in extensions if isinstance(ext, str) and ext.strip()
        )
        return cls(name=name, extensions=cleaned)

    def to_qt(self) -> str:
        patterns = " ".join(f"*.{ext}" for ext in self.extensions) or "*"
        return f"{self.name} ({patterns})"


@dataclass(frozen=True, slots=True)
class SaveFileOptions:
    """Options recognised by :meth:`FileDialogs.pick_save_file`."""

    title: str | None = None
    default_file_name: str | None = None
    filters: tuple[FileFilter, ...] = ()

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any] | None) -> SaveFileOptions:
        """Parse ``{title, defaultFileName, filters}``, ignoring malformed entries."""

        if options is None:
            return cls()
        if not isinstance(options, Mapping):
            raise ValidationError("Dialog options must be an object")

        title = options.get("title")
        file_name = options.get("defaultFileName")
        raw_filters = options.get("filters")

        filters: list[FileFilter] = []
        if isinstance(raw_filters, Sequence) and not isinstance(raw_filters, str):
            for entry in raw_filters:
                if isinstance(entry, Mapping):
                    parsed = FileFilter.from_mapping(entry)
                    if parsed is not None:
                        filters.append(parsed)

        return cls(
            title=title if isinstance(title, str) else None,
            default_file_name=file_name if isinstance(file_name, str) else None,
            filters=tuple(filters),
        )

    def name_filter(self) -> str:
        """Return the filters in ``QFileDialog`` syntax."""

        return ";;".join(item.to_qt() for item in self.filters)


class FileDialogs(QObject):
    """Show folder and save-file dialogs on behalf of any thread."""

    _requested = Signal(object)

    def __init__(self, parent_widget: QWidget | None = None) -> None:
        super().__init__()
        self._parent_widget = parent_widget
        self._requested.connect(self._run_request, Qt.ConnectionType.QueuedConnection)

    def pick_folder(self) -> Path | None:
        """Return the folder chosen by the user, or ``None`` when cancelled."""

        chosen = self._call(self._show_folder_dialog)
        return optional_path(chosen)

    def pick_save_file(
        self,
        options: SaveFileOptions | Mapping[str, Any] | None = None,
    ) -> Path:
        """Return the save location chosen by the user.

        Unlike :meth:`pick_folder`, cancelling raises
        :class:`~tpt_assets.errors.DialogCancelledError`.
        """

        if not isinstance(options, SaveFileOptions):
            options = SaveFileOptions.from_mapping(options)
        chosen = self._call(lambda: self._show_save_dialog(options))
        path = optional_path(chosen)
        if path is None:
            raise DialogCancelledError("User cancelled")
        return path

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _call(self, show: Callable[[], str]) -> str:
        if QThread.currentThread() == self.thread():
            return show()

        future: Future[str] = Future()
        self._requested.emit((show, future))
        return future.result()

    @Slot(object)
    def _run_request(self, request: tuple[Callable[[], str], Future[str]]) -> None:
        show, future = request
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(show())
        except Exception as exc:
            logger.exception("File dialog failed")
            future.set_exception(exc)

    def _show_folder_dialog(self) -> str:
        return QFileDialog.getExistingDirectory(self._parent_widget, "Select folder")

    def _show_save_dialog(self, options: SaveFileOptions) -> str:
        chosen, _selected_filter = QFileDialog.getSaveFileName(
            self._parent_widget,
            options.title or "Save file",
            options.default_file_name or "",
            options.name_filter(),
        )
        return chosen
