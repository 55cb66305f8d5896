"""quotepoll核心异常类."""

from typing import Any

from quotepoll.core.exceptions.codes import ErrorCode


class QuotePollError(Exception):
    """quotepoll基础异常类."""

    def __init__(
        self,
        message: str,
        error_code: str = ErrorCode.GENERAL.value,
        details: dict[str, Any] | None = None,
    ):
        """初始化异常.

        Args:
            message: 错误消息
            error_code: 错误代码
            details: 额外详情
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ConfigError(QuotePollError):
    """配置异常."""

    def __init__(
        self,
        message: str,
        field_name: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if field_name:
            super_details["field"] = field_name
        super().__init__(message, ErrorCode.CONFIG.value, super_details)
        self.field_name = field_name


class QuoteSourceError(QuotePollError):
    """行情源请求失败（网络、超时或响应格式错误）."""

    def __init__(
        self,
        message: str,
        source_name: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        super_details["source"] = source_name
        if status_code is not None:
            super_details["status_code"] = status_code
        super().__init__(message, ErrorCode.SOURCE.value, super_details)
        self.source_name = source_name
        self.status_code = status_code


class UnparsableRecordError(QuotePollError):
    """行情记录无法推导出日期."""

    def __init__(
        self,
        message: str,
        symbol: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if symbol:
            super_details["symbol"] = symbol
        super().__init__(message, ErrorCode.UNPARSABLE.value, super_details)
        self.symbol = symbol


class StoreReadError(QuotePollError):
    """已保存的序列文件无法读取或已损坏."""

    def __init__(
        self,
        message: str,
        symbol: str,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        super_details["symbol"] = symbol
        if path:
            super_details["path"] = path
        super().__init__(message, ErrorCode.STORE_READ.value, super_details)
        self.symbol = symbol
        self.path = path


class UniverseLoadError(QuotePollError):
    """股票清单无法加载."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if path:
            super_details["path"] = path
        super().__init__(message, ErrorCode.UNIVERSE.value, super_details)
        self.path = path
