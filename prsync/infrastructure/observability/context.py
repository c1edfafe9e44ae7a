from contextvars import ContextVar, Token

# Identifies one CLI invocation so interleaved log lines can be grouped.
_run_id_ctx: ContextVar[str] = ContextVar("run_id", default="-")


def set_run_id(run_id: str) -> Token[str]:
    return _run_id_ctx.set(run_id)


def get_run_id() -> str:
    return _run_id_ctx.get()


def reset_run_id(token: Token[str]) -> None:
    _run_id_ctx.reset(token)
