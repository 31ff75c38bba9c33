"""Directory-backed persistence for captured interface and command fragments.

Every document is one UTF-8 JSON file at ``<root>/<key>.json``. The ``raw``
field carries program text and is stored base64-encoded so that quotes,
braces and newlines never need JSON string escaping.
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
from pathlib import Path, PurePosixPath
from typing import Iterator, Mapping

from metagen.exceptions import StoreError
from metagen.runtime.json_io import dump_json_pretty, load_json_object_path

logger = logging.getLogger(__name__)

RAW_FIELD = "raw"
INTERFACE_KEY = "interface"
COMMANDS_DIR = "commands"
_SUFFIX = ".json"


def command_key(snake_name: str) -> str:
    return f"{COMMANDS_DIR}/{snake_name}"


def encode_raw(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def decode_raw(value: object) -> str:
    if not isinstance(value, str):
        raise ValueError(f"`{RAW_FIELD}` must be a string, got {type(value).__name__}")
    try:
        data = base64.b64decode(value.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise ValueError(f"`{RAW_FIELD}` is not valid base64: {exc}") from exc
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ValueError(f"`{RAW_FIELD}` is not UTF-8 text: {exc}") from exc


class FragmentStore:
    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def path_for(self, key: str) -> Path:
        pure = PurePosixPath(key)
        parts = pure.parts
        if not parts or pure.is_absolute() or ".." in parts:
            raise StoreError(f"invalid store key {key!r}")
        return self.root.joinpath(*parts[:-1], parts[-1] + _SUFFIX)

    def exists(self, key: str) -> bool:
        return self.path_for(key).is_file()

    def put(self, key: str, document: Mapping[str, object]) -> Path:
        path = self.path_for(key)
        payload = dict(document)
        if RAW_FIELD in payload:
            raw = payload[RAW_FIELD]
            if not isinstance(raw, str):
                raise StoreError(f"`{RAW_FIELD}` must be text", path=path)
            payload[RAW_FIELD] = encode_raw(raw)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(dump_json_pretty(payload), encoding="utf-8")
        except OSError as exc:
            raise StoreError(f"failed to write {path}: {exc}", path=path) from exc
        logger.debug("wrote %s", path)
        return path

    def get(self, key: str) -> dict[str, object]:
        return self.read(self.path_for(key))

    def read(self, path: Path) -> dict[str, object]:
        try:
            document = load_json_object_path(path)
        except FileNotFoundError as exc:
            raise StoreError(f"no document at {path}", path=path) from exc
        except (OSError, UnicodeError) as exc:
            raise StoreError(f"failed to read {path}: {exc}", path=path) from exc
        except ValueError as exc:
            raise StoreError(f"malformed JSON in {path}: {exc}", path=path) from exc
        if RAW_FIELD in document:
            try:
                document[RAW_FIELD] = decode_raw(document[RAW_FIELD])
            except ValueError as exc:
                raise StoreError(f"{path}: {exc}", path=path) from exc
        return document

    def iter_paths(self, directory: str) -> Iterator[Path]:
        """Yield every file below ``directory``.

        Order is whatever ``os.walk`` reports; it is not sorted.
        """
        base = self.root / directory if directory else self.root
        for dirpath, _dirnames, filenames in os.walk(base):
            for filename in filenames:
                yield Path(dirpath) / filename

    def iter_documents(self, directory: str) -> Iterator[tuple[Path, dict[str, object]]]:
        for path in self.iter_paths(directory):
            yield path, self.read(path)

    def list(self, directory: str) -> list[dict[str, object]]:
        return [document for _path, document in self.iter_documents(directory)]
