"""Environment-backed configuration"""

from tb_core_lib.config.settings import Settings, get_settings, reset_settings

__all__ = ["Settings", "get_settings", "reset_settings"]
