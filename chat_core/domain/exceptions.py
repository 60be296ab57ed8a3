"""统一业务异常模型。

所有跨模块抛出的业务级错误都应该继承自 BusinessError，
便于在命令层或 UI 层做统一捕获与用户提示。
"""

from typing import Optional


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "STORE_READ_ERROR"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 provider、chat_id 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class InvalidInputError(BusinessError):
    """参数校验失败，请求不会发往网络。"""

    def __init__(self, message: str, code: str = "INVALID_INPUT", **extra):
        super().__init__(code=code, message=message, http_status=400, **extra)


class ProviderError(BusinessError):
    """Provider 返回非 2xx 响应时抛出，携带状态码与响应体。"""

    def __init__(self, provider: str, status_code: int, body: str, message: Optional[str] = None):
        self.provider = provider
        self.status_code = status_code
        self.body = body
        super().__init__(
            code="PROVIDER_ERROR",
            message=message or f"{provider} API Error ({status_code}): {body}",
            http_status=status_code,
            provider=provider,
        )


class TransportError(BusinessError):
    """网络层错误，例如 DNS 失败、连接被拒、超时等。"""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(
            code="NETWORK_ERROR",
            message=f"{provider} API Request Failed: {message}",
            http_status=502,
            provider=provider,
        )


class PersistenceError(BusinessError):
    """会话存储读写失败（约束冲突、I/O 错误等）。"""

    def __init__(self, message: str, code: str = "STORE_ERROR", **extra):
        super().__init__(code=code, message=message, http_status=500, **extra)


class ConfigError(BusinessError):
    """凭据文件不可读/不可写。"""

    def __init__(self, message: str, code: str = "CONFIG_ERROR", **extra):
        super().__init__(code=code, message=message, http_status=500, **extra)
