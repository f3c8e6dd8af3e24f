"""mucbot工具函数模块。"""

from mucbot.utils.helpers import mask_secret, truncate_string

__all__ = ["mask_secret", "truncate_string"]
