"""上次使用的生成参数的本地持久化。读写失败只记录日志，不影响批量生成。"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Mapping, Optional

from maze_batch.core.config import DEFAULT_CATALOG, EXITS_VERTICAL

LOGGER = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path.home() / ".maze_batch" / "settings.json"

DEFAULT_SHAPE = "square"


@dataclass(slots=True)
class LastUsedSettings:
    """上次使用的形状、尺寸、算法与出口配置。"""

    shape: str = DEFAULT_SHAPE
    size: dict = field(default_factory=dict)
    algorithm: str = DEFAULT_CATALOG.shapes[DEFAULT_SHAPE].default_algorithm
    exit_config: str = EXITS_VERTICAL

    def merge(
        self,
        *,
        shape: Optional[str] = None,
        size: Optional[Mapping[str, int]] = None,
        algorithm: Optional[str] = None,
        exit_config: Optional[str] = None,
    ) -> "LastUsedSettings":
        """用显式给出的值覆盖已保存的值。切换形状时丢弃旧形状的尺寸。"""

        merged = replace(self, size=dict(self.size))
        if shape is not None and shape != self.shape:
            merged.shape = shape
            merged.size = {}
        if size:
            merged.size.update(size)
        if algorithm is not None:
            merged.algorithm = algorithm
        if exit_config is not None:
            merged.exit_config = exit_config
        return merged

    def to_dict(self) -> dict:
        data = asdict(self)
        data["exitConfig"] = data.pop("exit_config")
        return data

    @classmethod
    def from_dict(cls, data: Mapping) -> "LastUsedSettings":
        defaults = cls()
        size = data.get("size")
        return cls(
            shape=str(data.get("shape") or defaults.shape),
            size={str(k): int(v) for k, v in size.items()} if isinstance(size, dict) else {},
            algorithm=str(data.get("algorithm") or defaults.algorithm),
            exit_config=str(data.get("exitConfig") or defaults.exit_config),
        )


class SettingsStore:
    """JSON 文件形式的键值存储。"""

    def __init__(self, path: Path = DEFAULT_SETTINGS_PATH) -> None:
        self.path = path

    def load(self) -> LastUsedSettings:
        if not self.path.exists():
            return LastUsedSettings()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError("settings root must be an object")
            return LastUsedSettings.from_dict(data)
        except (OSError, ValueError, TypeError) as exc:
            LOGGER.warning("读取已保存的设置失败：%s", exc)
            return LastUsedSettings()

    def save(self, settings: LastUsedSettings) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(settings.to_dict(), indent=2), encoding="utf-8")
        except (OSError, TypeError) as exc:
            LOGGER.warning("保存设置失败：%s", exc)
            return False
        return True

    def clear(self) -> bool:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            LOGGER.warning("清除设置失败：%s", exc)
            return False
        return True
