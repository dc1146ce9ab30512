"""Named command dispatch between the desktop shell and the backend.

The shell issues commands by name with a JSON-shaped argument object and
receives a JSON-shaped response::

    {"ok": True, "data": ...}
    {"ok": False, "error": "Asset not found: 42"}

Failures never escape :meth:`CommandRouter.invoke`; they are logged and
reported as the error message. Nothing is retried.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Any

from . import files, generation
from .errors import BackendError, ValidationError
from .storage.repository import AssetRepository
from .storage.settings import SettingsStore

if TYPE_CHECKING:
    from .ui.dialogs import FileDialogs

__all__ = ["CommandHandler", "CommandRouter", "Response"]

logger = logging.getLogger(__name__)

Response = dict[str, Any]
CommandHandler = Callable[[Mapping[str, Any]], Any]


def _require(args: Mapping[str, Any], key: str) -> Any:
    if key not in args:
        raise ValidationError(f"Missing argument: {key}")
    return args[key]


def _require_text(args: Mapping[str, Any], key: str) -> str:
    value = _require(args, key)
    if not isinstance(value, str):
        raise ValidationError(f"Argument {key} must be a string")
    return value


def _coerce_bytes(value: Any) -> bytes:
    if isinstance(value, bytes | bytearray):
        return bytes(value)
    if isinstance(value, list):
        try:
            return bytes(value)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"File data must be a list of bytes: {exc}") from exc
    raise ValidationError("File data must be a list of bytes")


class CommandRouter:
    """Map command names to backend operations."""

    def __init__(
        self,
        *,
        assets: AssetRepository,
        settings: SettingsStore,
        dialogs: FileDialogs | None = None,
        max_workers: int = 4,
    ) -> None:
        self._assets = assets
        self._settings = settings
        self._dialogs = dialogs
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="tpt-command",
        )
        self._handlers: dict[str, CommandHandler] = {
            "db_get_assets": self._db_get_assets,
            "db_save_asset": self._db_save_asset,
            "db_delete_asset": self._db_delete_asset,
            "db_get_setting": self._db_get_setting,
            "db_save_setting": self._db_save_setting,
            "fs_save_file": self._fs_save_file,
            "fs_read_file": self._fs_read_file,
            "fs_ensure_dir": self._fs_ensure_dir,
            "dialog_open_directory": self._dialog_open_directory,
            "dialog_save_file": self._dialog_save_file,
            "generate_asset": self._generate_asset,
            "generate_batch": self._generate_batch,
        }

    @property
    def command_names(self) -> list[str]:
        return sorted(self._handlers)

    def register(self, name: str, handler: CommandHandler) -> None:
        """Add or replace the handler for *name*."""

        self._handlers[name] = handler

    def invoke(self, name: str, args: Mapping[str, Any] | None = None) -> Response:
        """Run command *name* on the calling thread and return its response."""

        handler = self._handlers.get(name)
        if handler is None:
            return {"ok": False, "error": f"Unknown command: {name}"}
        if args is None:
            args = {}
        if not isinstance(args, Mapping):
            return {"ok": False, "error": "Command arguments must be an object"}

        try:
            data = handler(args)
        except (BackendError, OSError, ValueError) as exc:
            logger.warning("Command %s failed: %s", name, exc)
            return {"ok": False, "error": str(exc)}
        except Exception as exc:
            logger.exception("Unexpected failure in command %s", name)
            return {"ok": False, "error": f"{type(exc).__name__}: {exc}"}
        return {"ok": True, "data": data}

    def submit(self, name: str, args: Mapping[str, Any] | None = None) -> Future[Response]:
        """Run command *name* on the worker pool."""

        return self._executor.submit(self.invoke, name, args)

    def shutdown(self, *, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    # ------------------------------------------------------------------
    # Store commands
    # ------------------------------------------------------------------
    def _db_get_assets(self, args: Mapping[str, Any]) -> list[dict[str, Any]]:
        records = self._assets.list_assets(args.get("filters"))
        return [record.to_dict() for record in records]

    def _db_save_asset(self, args: Mapping[str, Any]) -> str:
        return self._assets.save_asset(_require(args, "asset"))

    def _db_delete_asset(self, args: Mapping[str, Any]) -> str:
        self._assets.delete_asset(_require_text(args, "asset_id"))
        return "Asset deleted successfully"

    def _db_get_setting(self, args: Mapping[str, Any]) -> str | None:
        return self._settings.get(_require_text(args, "key"))

    def _db_save_setting(self, args: Mapping[str, Any]) -> str:
        self._settings.set(_require_text(args, "key"), _require_text(args, "value"))
        return "Setting saved successfully"

    # ------------------------------------------------------------------
    # File commands
    # ------------------------------------------------------------------
    def _fs_save_file(self, args: Mapping[str, Any]) -> str:
        path = _require_text(args, "path")
        files.save_file(path, _coerce_bytes(_require(args, "data")))
        return f"File saved successfully to: {path}"

    def _fs_read_file(self, args: Mapping[str, Any]) -> list[int]:
        return list(files.read_file(_require_text(args, "path")))

    def _fs_ensure_dir(self, args: Mapping[str, Any]) -> str:
        path = _require_text(args, "path")
        files.ensure_directory(path)
        return f"Directory ensured: {path}"

    # ------------------------------------------------------------------
    # Dialog commands
    # ------------------------------------------------------------------
    def _require_dialogs(self) -> FileDialogs:
        if self._dialogs is None:
            raise BackendError("File dialogs are unavailable")
        return self._dialogs

    def _dialog_open_directory(self, args: Mapping[str, Any]) -> list[str]:
        chosen = self._require_dialogs().pick_folder()
        return [] if chosen is None else [str(chosen)]

    def _dialog_save_file(self, args: Mapping[str, Any]) -> str:
        chosen = self._require_dialogs().pick_save_file(args.get("options"))
        return str(chosen)

    # ------------------------------------------------------------------
    # Generation commands
    # ------------------------------------------------------------------
    def _generate_asset(self, args: Mapping[str, Any]) -> dict[str, Any]:
        result = generation.generate_asset(
            _require_text(args, "asset_type"),
            args.get("config"),
        )
        return result.to_dict()

    def _generate_batch(self, args: Mapping[str, Any]) -> list[dict[str, Any]]:
        requests = _require(args, "assets")
        if not isinstance(requests, list):
            raise ValidationError("Argument assets must be a list")
        return [result.to_dict() for result in generation.generate_batch(requests)]
