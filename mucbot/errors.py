"""mucbot的异常类型。

只有配置错误会中止启动；其余错误都在最小范围内被捕获并记录日志。
"""


class MucbotError(Exception):
    """mucbot所有异常的基类。"""


class ConfigError(MucbotError):
    """缺少必需的启动参数（例如jid、password），在连接之前抛出。"""


class TransportError(MucbotError):
    """传输层没有可用的流时写入原始数据。"""
