import json
import logging
import os
import shutil
import tempfile
from typing import Any, Dict, Optional, Tuple

from cryptography.fernet import Fernet, InvalidToken

from sticker_habits.errors import PersistenceError

logger = logging.getLogger(__name__)

def generate_key() -> str:
    return Fernet.generate_key().decode("utf-8")

def atomic_write_bytes(path: str, data: bytes):
    directory = os.path.dirname(path) or "."
    fd, tmp_path = tempfile.mkstemp(prefix=os.path.basename(path) + ".", dir=directory)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)  # atomic on Windows + Linux
    finally:
        if os.path.exists(tmp_path):
            try:
                os.remove(tmp_path)
            except OSError as e:
                logger.warning("Could not remove temp file %s: %r", tmp_path, e)

def rotate_backups(path: str, keep: int = 2):
    if keep <= 0:
        return
    for i in range(keep - 1, 0, -1):
        src = f"{path}.bak{i}"
        dst = f"{path}.bak{i+1}"
        if os.path.exists(src):
            os.replace(src, dst)
    if os.path.exists(path):
        shutil.copy2(path, f"{path}.bak1")


class EncryptedJsonStorage:
    """
    One Fernet-encrypted JSON snapshot under a fixed file name.

    Every save is a full overwrite; the previous ``backups`` files are kept as
    ``<path>.bak1`` (newest) .. ``<path>.bakN`` and used when the main file
    cannot be read.
    """

    def __init__(self, path: str, key: str, backups: int = 2):
        self.path = path
        self.backups = backups
        try:
            self._fernet = Fernet(key.encode("utf-8") if isinstance(key, str) else key)
        except (ValueError, TypeError) as e:
            raise PersistenceError(f"Invalid storage key: {e}") from e

    def candidates(self) -> list:
        return [self.path] + [f"{self.path}.bak{i}" for i in range(1, self.backups + 1)]

    def save(self, data: Dict[str, Any]) -> None:
        try:
            encrypted = self._fernet.encrypt(json.dumps(data, indent=2).encode("utf-8"))
            rotate_backups(self.path, keep=self.backups)
            atomic_write_bytes(self.path, encrypted)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Could not save {self.path}: {e}") from e
        logger.debug("Saved snapshot to %s", self.path)

    def load(self, default: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        data, _ = self._load_or_recover()
        if data is None:
            return dict(default or {})
        return data

    def _load_or_recover(self) -> Tuple[Optional[Dict[str, Any]], Optional[bytes]]:
        """
        Try: path, path.bak1 .. path.bakN. Return (data_dict, raw_bytes_used) or
        (None, None) when no file exists at all.
        """
        found_any = False
        for p in self.candidates():
            if not os.path.isfile(p):
                continue
            found_any = True
            try:
                with open(p, "rb") as f:
                    raw = f.read()
                data = json.loads(self._fernet.decrypt(raw).decode("utf-8"))
            except (InvalidToken, json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
                logger.warning("Could not read %s: %r", p, e)
                continue

            # If we loaded from backup, restore to main.
            if p != self.path:
                logger.warning("Restored %s from backup %s", self.path, p)
                try:
                    atomic_write_bytes(self.path, raw)
                except OSError as e:
                    raise PersistenceError(f"Could not restore {self.path} from {p}: {e}") from e
            return data, raw

        if found_any:
            raise PersistenceError(f"No readable snapshot in {self.path} or its backups.")
        return None, None
