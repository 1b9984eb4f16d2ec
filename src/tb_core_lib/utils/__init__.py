"""Utility Functions"""

from tb_core_lib.utils.resilience import create_custom_retry

__all__ = [
    "create_custom_retry",
]
