"""Request authentication context"""

from tb_core_lib.auth.request_context import RequestContext, get_request_context

__all__ = ["RequestContext", "get_request_context"]
