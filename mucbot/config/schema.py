"""使用Pydantic的配置模式定义。

此模块定义了mucbot的配置结构：
- 账号：JID、密码、资源名
- 服务器：主机、端口、会议服务地址
- 会话：要加入的房间、保活间隔
- 插件和日志

根配置继承自pydantic-settings的BaseSettings，支持通过 ``MUCBOT_`` 前缀的
环境变量覆盖配置项；环境变量的优先级高于配置文件。
"""

from pydantic import ConfigDict, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from mucbot.errors import ConfigError
from mucbot.stanzas import jid_domain

REQUIRED_OPTIONS = ("jid", "password")


class BotConfig(BaseSettings):
    """
    mucbot的根配置类。

    ``join_rooms`` 为None时加入房间发现得到的所有房间；
    为列表时（包括空列表）只加入列表中的房间。
    """
    jid: str = ""  # 机器人账号的JID（必需）
    password: str = ""  # 账号密码（必需）
    host: str = ""  # 服务器主机，留空时使用JID的域名
    port: int = 5222  # 服务器端口
    resource: str = "bot"  # 资源名，完整JID为 jid/resource
    conference_host: str = "conf.hipchat.com"  # 房间目录服务地址
    join_rooms: list[str] | None = None  # 要加入的房间JID列表
    keepalive_interval_s: float = Field(default=60, gt=0)  # 保活间隔（秒）
    keepalive_enabled: bool = True  # 是否启用保活
    plugins: list[str] = Field(default_factory=list)  # 要加载的插件模块名
    log_level: str = "INFO"  # 日志级别

    @property
    def full_jid(self) -> str:
        """带资源名的完整JID。"""
        return f"{self.jid}/{self.resource}" if self.jid and self.resource else self.jid

    @property
    def server_host(self) -> str:
        """要连接的服务器主机，未配置时取JID的域名。"""
        if self.host:
            return self.host
        return jid_domain(self.jid)

    def validate_required(self) -> None:
        """
        检查必需的启动参数。

        Raises:
            ConfigError: 缺少某个必需的配置项
        """
        for key in REQUIRED_OPTIONS:
            if not getattr(self, key):
                raise ConfigError(f"Missing required option: {key}")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """环境变量优先于配置文件中的值（配置文件的值以初始化参数传入）。"""
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    model_config = ConfigDict(
        env_prefix="MUCBOT_",
        env_nested_delimiter="__"
    )
