"""
配置存储抽象层

- File 模式：单个 JSON 文件，完整快照 + 原子替换写入
- Memory 模式：保存序列化后的文档，用于测试/无状态部署

加载失败（文件缺失、JSON 损坏、字段校验失败）一律回退到默认配置；
保存失败只记录错误并返回 False，不向调用方抛出。
"""

import contextlib
import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from handpicked.core.logging import LogContext, get_logger
from handpicked.models.collection import HandpickedCollectionConfig

logger = get_logger(__name__)

CONFIG_FILENAME = "handpicked-collections.json"


# =============================================================================
# 存储接口
# =============================================================================


class ConfigStore(ABC):
    """配置存储抽象基类"""

    @abstractmethod
    def load(self) -> HandpickedCollectionConfig:
        """加载配置，失败时返回默认配置"""
        ...

    @abstractmethod
    def save(self, config: HandpickedCollectionConfig) -> bool:
        """保存完整配置快照，返回是否写入成功"""
        ...

    @property
    @abstractmethod
    def store_type(self) -> str:
        """存储类型"""
        ...


# =============================================================================
# 文件存储
# =============================================================================


class FileConfigStore(ConfigStore):
    """
    JSON 文件配置存储

    特点：
    - 每次保存写出完整快照（indent=2，便于人工查看）
    - 先写同目录临时文件再 replace，读方不会看到半个文件
    - 单进程单写者，不提供跨进程锁
    """

    def __init__(self, data_dir: str | Path, filename: str = CONFIG_FILENAME):
        self.data_dir = Path(data_dir)
        self.config_file = self.data_dir / filename

    def load(self) -> HandpickedCollectionConfig:
        if not self.config_file.exists():
            logger.info(f"No configuration at {self.config_file}, using defaults")
            return HandpickedCollectionConfig()

        try:
            with LogContext.operation("config_store.load"):
                with open(self.config_file, encoding="utf-8") as f:
                    data = json.load(f)
                config = HandpickedCollectionConfig.from_document(data)
        except (OSError, ValueError) as e:
            logger.warning(f"Error loading handpicked collection configuration: {e}")
            return HandpickedCollectionConfig()

        logger.info(f"Loaded configuration from {self.config_file} ({len(config.items)} items)")
        return config

    def save(self, config: HandpickedCollectionConfig) -> bool:
        temp_path: Path | None = None
        try:
            with LogContext.operation("config_store.save"):
                self.data_dir.mkdir(parents=True, exist_ok=True)
                content = json.dumps(config.to_document(), indent=2, ensure_ascii=False)

                with tempfile.NamedTemporaryFile(
                    mode="w",
                    encoding="utf-8",
                    dir=self.data_dir,
                    prefix=".handpicked_",
                    suffix=".tmp",
                    delete=False,
                ) as tmp_file:
                    temp_path = Path(tmp_file.name)
                    tmp_file.write(content)
                    tmp_file.flush()
                    os.fsync(tmp_file.fileno())

                temp_path.replace(self.config_file)
                temp_path = None
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error saving handpicked collection configuration: {e}")
            if temp_path is not None:
                with contextlib.suppress(OSError):
                    temp_path.unlink()
            return False

        logger.info("Handpicked plugin configuration saved")
        return True

    @property
    def store_type(self) -> str:
        return "file"


# =============================================================================
# 内存存储
# =============================================================================


class MemoryConfigStore(ConfigStore):
    """
    内存配置存储

    保存序列化后的文档而不是对象引用，load 总是得到独立副本；
    进程重启后清空。
    """

    def __init__(self, initial: HandpickedCollectionConfig | None = None):
        self._document: dict | None = initial.to_document() if initial else None
        self.save_count = 0

    def load(self) -> HandpickedCollectionConfig:
        if self._document is None:
            return HandpickedCollectionConfig()
        try:
            return HandpickedCollectionConfig.from_document(self._document)
        except ValueError as e:
            logger.warning(f"Error loading in-memory configuration: {e}")
            return HandpickedCollectionConfig()

    def save(self, config: HandpickedCollectionConfig) -> bool:
        self._document = config.to_document()
        self.save_count += 1
        return True

    @property
    def store_type(self) -> str:
        return "memory"


# =============================================================================
# 工厂函数
# =============================================================================


def create_config_store(store_type: str = "file", data_dir: str | Path = "data") -> ConfigStore:
    """
    创建配置存储

    Args:
        store_type: "file" 或 "memory"
        data_dir: 文件模式下的数据目录

    Returns:
        ConfigStore 实例

    Raises:
        ValueError: 未知的存储类型
    """
    if store_type == "file":
        logger.info(f"ConfigStore: file ({Path(data_dir) / CONFIG_FILENAME})")
        return FileConfigStore(data_dir)
    if store_type == "memory":
        logger.info("ConfigStore: memory")
        return MemoryConfigStore()
    raise ValueError(f"Unknown store type: {store_type}")
