from __future__ import annotations

from contextvars import ContextVar

request_id_ctx_var: ContextVar[str] = ContextVar("request_id", default="-")
locale_ctx_var: ContextVar[str] = ContextVar("locale", default="-")
run_id_ctx_var: ContextVar[str] = ContextVar("run_id", default="-")
