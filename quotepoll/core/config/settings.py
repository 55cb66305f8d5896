"""配置管理模块 - 处理轮询会话的配置"""

import os
import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger

from quotepoll.core.exceptions import ConfigError

# 默认白名单股票
DEFAULT_ALLOW_LIST: tuple[str, ...] = (
    "2330",
    "2317",
    "2454",
    "2731",
    "2885",
    "2891",
    "0052",
    "0056",
    "1215",
    "00713",
    "2646",
    "2308",
    "2412",
    "00646",
    "3008",
    "00919",
    "00937B",
    "00679B",
)


@dataclass
class PollerConfig:
    """轮询配置"""

    retry_interval: float = 3.0  # 重试间隔(秒)
    deadline: float = 30.0  # 每批最大轮询时间(秒)
    batch_size: int = 30  # 每批股票数量


@dataclass
class SourceConfig:
    """行情源配置"""

    base_url: str = "https://mis.twse.com.tw/stock/api/getStockInfo.jsp"
    timeout: float = 10.0
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    )


@dataclass
class StoreConfig:
    """序列存储配置"""

    data_dir: str = str(Path("public") / "data")
    filename: str = "realtime.json"


@dataclass
class UniverseConfig:
    """股票清单配置"""

    stock_list: str = "stock_list.json"
    allow_list: list[str] = field(default_factory=lambda: list(DEFAULT_ALLOW_LIST))


@dataclass
class LoggingConfig:
    """日志配置"""

    level: str = "INFO"
    file: str | None = None


@dataclass
class QuotePollConfig:
    """quotepoll主配置"""

    poller: PollerConfig = field(default_factory=PollerConfig)
    source: SourceConfig = field(default_factory=SourceConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    universe: UniverseConfig = field(default_factory=UniverseConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "QuotePollConfig":
        """从字典创建配置"""
        try:
            return cls(
                poller=PollerConfig(**config_dict.get("poller", {})),
                source=SourceConfig(**config_dict.get("source", {})),
                store=StoreConfig(**config_dict.get("store", {})),
                universe=UniverseConfig(**config_dict.get("universe", {})),
                logging=LoggingConfig(**config_dict.get("logging", {})),
            )
        except TypeError as exc:
            raise ConfigError(f"Unknown configuration key: {exc}") from exc

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        return {
            "poller": asdict(self.poller),
            "source": asdict(self.source),
            "store": asdict(self.store),
            "universe": asdict(self.universe),
            "logging": asdict(self.logging),
        }

    def validate(self) -> "QuotePollConfig":
        """校验配置取值，返回自身以便链式调用"""
        if self.poller.retry_interval < 0:
            raise ConfigError("retry_interval must be non-negative", "poller.retry_interval")
        if self.poller.deadline <= 0:
            raise ConfigError("deadline must be positive", "poller.deadline")
        if self.poller.batch_size <= 0:
            raise ConfigError("batch_size must be positive", "poller.batch_size")
        if self.source.timeout <= 0:
            raise ConfigError("timeout must be positive", "source.timeout")
        if not self.source.base_url:
            raise ConfigError("base_url cannot be empty", "source.base_url")
        return self


class ConfigManager:
    """配置管理器"""

    def __init__(self, config_path: Path | None = None):
        """初始化配置管理器

        Args:
            config_path: 配置文件路径，如果为None则使用当前目录下的 quotepoll.toml
        """
        self.config_path = config_path or Path("quotepoll.toml")
        self.config = self._load_config()

    def _load_config(self) -> QuotePollConfig:
        """加载配置"""
        if not self.config_path.exists():
            return QuotePollConfig()

        try:
            with open(self.config_path, "rb") as f:
                config_dict = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            # 如果配置文件有问题，使用默认配置
            logger.warning(f"Failed to load config from {self.config_path}: {e}")
            return QuotePollConfig()
        return QuotePollConfig.from_dict(config_dict)

    def get_config(self) -> QuotePollConfig:
        """获取当前配置"""
        return self.config

    def update_config(self, **updates: Any) -> None:
        """更新配置"""
        config_dict = self.config.to_dict()

        def deep_update(d: dict[str, Any], u: dict[str, Any]) -> dict[str, Any]:
            """深度更新字典"""
            for k, v in u.items():
                if isinstance(v, dict):
                    d[k] = deep_update(d.get(k, {}), v)
                else:
                    d[k] = v
            return d

        deep_update(config_dict, updates)
        self.config = QuotePollConfig.from_dict(config_dict)


def _env_float(name: str) -> float | None:
    value = os.getenv(name)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {value!r}", name) from exc


def load_config_from_env() -> dict[str, Any]:
    """从环境变量加载配置"""
    config: dict[str, Any] = {}

    # 轮询配置
    poller_config: dict[str, Any] = {}
    retry_interval = _env_float("QUOTEPOLL_RETRY_INTERVAL")
    if retry_interval is not None:
        poller_config["retry_interval"] = retry_interval
    deadline = _env_float("QUOTEPOLL_DEADLINE")
    if deadline is not None:
        poller_config["deadline"] = deadline
    batch_size = _env_float("QUOTEPOLL_BATCH_SIZE")
    if batch_size is not None:
        poller_config["batch_size"] = int(batch_size)

    if poller_config:
        config["poller"] = poller_config

    # 行情源配置
    source_config: dict[str, Any] = {}
    timeout = _env_float("QUOTEPOLL_SOURCE_TIMEOUT")
    if timeout is not None:
        source_config["timeout"] = timeout
    base_url = os.getenv("QUOTEPOLL_SOURCE_URL")
    if base_url:
        source_config["base_url"] = base_url

    if source_config:
        config["source"] = source_config

    # 存储配置
    data_dir = os.getenv("QUOTEPOLL_DATA_DIR")
    if data_dir:
        config["store"] = {"data_dir": data_dir}

    # 股票清单配置
    universe_config: dict[str, Any] = {}
    stock_list = os.getenv("QUOTEPOLL_STOCK_LIST")
    if stock_list:
        universe_config["stock_list"] = stock_list
    allow_list = os.getenv("QUOTEPOLL_ALLOW_LIST")
    if allow_list:
        universe_config["allow_list"] = [code.strip() for code in allow_list.split(",") if code.strip()]

    if universe_config:
        config["universe"] = universe_config

    # 日志配置
    logging_config: dict[str, Any] = {}
    logging_level = os.getenv("QUOTEPOLL_LOGGING_LEVEL")
    if logging_level is not None:
        logging_config["level"] = logging_level
    logging_file = os.getenv("QUOTEPOLL_LOGGING_FILE")
    if logging_file is not None:
        logging_config["file"] = logging_file

    if logging_config:
        config["logging"] = logging_config

    return config


def load_config(config_path: Path | None = None) -> QuotePollConfig:
    """加载文件配置并叠加环境变量覆盖，返回校验后的配置"""
    manager = ConfigManager(config_path)
    overrides = load_config_from_env()
    if overrides:
        manager.update_config(**overrides)
    return manager.get_config().validate()
