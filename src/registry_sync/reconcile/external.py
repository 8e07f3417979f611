"""Invocação de colaboradores externos com falha tipada e fatal."""

from __future__ import annotations

from typing import Any, Callable, Optional

from registry_sync.core.exceptions import ExternalCallError, SyncException


def call_external(collaborator: str, fn: Optional[Callable[..., Any]], *args: Any) -> Any:
    """
    Chama `fn(*args)` convertendo falhas em ExternalCallError.

    Exceções já tipadas (SyncException) propagam intactas.

    Raises:
        ExternalCallError: Se o colaborador não foi fornecido ou falhou.
    """
    if fn is None:
        raise ExternalCallError(
            message=f"{collaborator} is not configured",
            details={"collaborator": collaborator},
            hint="Forneça o colaborador em Collaborators antes de executar a run",
        )
    try:
        return fn(*args)
    except SyncException:
        raise
    except Exception as e:
        raise ExternalCallError(
            message=f"{collaborator} failed: {e}",
            details={
                "collaborator": collaborator,
                "exc_type": e.__class__.__name__,
                "exc_message": str(e),
            },
            hint="Verifique conectividade e credenciais do registry. Nenhum plano parcial é aplicado.",
        ) from e
