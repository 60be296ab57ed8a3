"""基于 .env 文件的 Provider 凭据存储。

文件格式为每行一个 KEY=VALUE，三个凭据键以大写规范形式写入
（CHATGPT / CLAUDE / GEMINI），读取与清除时键名不区分大小写。
文件中的其他行（注释、无关变量）在任何操作下都原样保留。

每次读取都直接访问文件，不做缓存；写入在同一文件锁内完成
“读取-修改-写回”，并通过临时文件 + os.replace 原子替换。
"""

import os
import threading
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from chat_core.config.env_utils import parse_env_line, read_env_file, read_env_lines, write_env_lines
from chat_core.config.settings import settings
from chat_core.domain.exceptions import ConfigError
from chat_core.domain.models import Tokens
from chat_core.infrastructure.logging.logger import logger


TOKEN_KEYS = {"chatgpt": "CHATGPT", "claude": "CLAUDE", "gemini": "GEMINI"}

SAVED_MESSAGE = "Tokens added/updated successfully."
CLEARED_MESSAGE = "Tokens cleared successfully."
NOTHING_TO_CLEAR_MESSAGE = "No .env file, nothing to clear."

_file_locks: Dict[Path, threading.Lock] = {}
_file_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    with _file_locks_guard:
        lock = _file_locks.get(path)
        if lock is None:
            lock = _file_locks[path] = threading.Lock()
        return lock


def _line_key(line: str) -> Optional[str]:
    parsed = parse_env_line(line)
    return parsed[0].upper() if parsed else None


class EnvTokenStore:
    """读写 .env 中三个 Provider 的 API Key。"""

    def __init__(self, env_path: str | Path | None = None):
        self._path = Path(env_path or settings.env_file_path).resolve()
        self._lock = _lock_for(self._path)

    @property
    def path(self) -> Path:
        return self._path

    def get_tokens(self) -> Tokens:
        """读取当前凭据，缺失的键返回空字符串。"""
        try:
            pairs = read_env_file(self._path)
        except OSError as e:
            raise ConfigError(f"Failed to read {self._path.name}: {e}", code="CONFIG_READ_ERROR")
        return Tokens(**{field: pairs.get(key, "") for field, key in TOKEN_KEYS.items()})

    def save_tokens(self, tokens: Union[Tokens, Mapping[str, Any], None]) -> str:
        """合并非空凭据到文件；空值不会覆盖已有值。"""

        if not isinstance(tokens, Tokens):
            tokens = Tokens.from_mapping(tokens)
        updates = {
            key: getattr(tokens, field).strip()
            for field, key in TOKEN_KEYS.items()
            if getattr(tokens, field).strip()
        }
        with self._lock:
            try:
                lines = read_env_lines(self._path)
                merged: List[str] = []
                written = set()
                for line in lines:
                    key = _line_key(line)
                    if key in updates:
                        # 同一个键出现多次时只保留第一处
                        if key not in written:
                            merged.append(f"{key}={updates[key]}")
                            written.add(key)
                        continue
                    merged.append(line)
                for key, value in updates.items():
                    if key not in written:
                        merged.append(f"{key}={value}")
                write_env_lines(self._path, merged)
            except OSError as e:
                raise ConfigError(f"Failed to write {self._path.name}: {e}", code="CONFIG_WRITE_ERROR")
        logger.info("Tokens saved", extra={"extra": {"keys": sorted(updates)}})
        return SAVED_MESSAGE

    def clear_tokens(self) -> str:
        """删除三个凭据键（其余行保留），并从当前进程环境变量中移除。"""

        with self._lock:
            if not self._path.exists():
                self._clear_environ()
                return NOTHING_TO_CLEAR_MESSAGE
            try:
                kept = [line for line in read_env_lines(self._path) if _line_key(line) not in TOKEN_KEYS.values()]
                write_env_lines(self._path, kept)
            except OSError as e:
                raise ConfigError(f"Failed to write {self._path.name}: {e}", code="CONFIG_WRITE_ERROR")
        self._clear_environ()
        logger.info("Tokens cleared")
        return CLEARED_MESSAGE

    @staticmethod
    def _clear_environ() -> None:
        for key in TOKEN_KEYS.values():
            os.environ.pop(key, None)
