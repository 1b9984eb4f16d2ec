"""Service clients"""

from tb_core_lib.clients.base import BaseServiceClient
from tb_core_lib.clients.override_log_client import OverrideLogClient

__all__ = ["BaseServiceClient", "OverrideLogClient"]
