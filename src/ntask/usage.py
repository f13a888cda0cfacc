"""Report CLI usage errors as JSON envelopes instead of click's plain text."""

from __future__ import annotations

import click


def is_usage_error(exc: BaseException) -> bool:
    """True for click's UsageError and for the same class in Typer's bundled click core."""
    if isinstance(exc, click.exceptions.UsageError):
        return True
    return any(cls.__name__ == "UsageError" for cls in type(exc).__mro__) and hasattr(exc, "format_message")


def patch_typer_errors() -> None:
    """Patch TyperGroup.invoke to emit JSON envelopes for CLI usage errors."""
    import typer.core

    _orig_invoke = typer.core.TyperGroup.invoke

    def _json_invoke(self, ctx):
        try:
            return _orig_invoke(self, ctx)
        except Exception as e:
            if not is_usage_error(e):
                raise
            from ntask.engine.dispatcher import error_envelope, exit_code_for, print_response

            parts = [ctx.info_name if ctx.parent else None, ctx.invoked_subcommand]
            command = ".".join(p for p in parts if p) or "unknown"
            env = error_envelope(command, "ERR_USAGE", str(e.format_message()))
            print_response(env)
            raise SystemExit(exit_code_for(env)) from e

    typer.core.TyperGroup.invoke = _json_invoke
