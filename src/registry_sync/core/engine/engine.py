from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Sequence

import hashlib
import json

from registry_sync.core.config.hashing import compute_config_hash
from registry_sync.core.errors import (
    EXTERNAL_CALL_FAILED,
    PROD_PATCH_NOT_ALLOWED,
    SyncErrorPayload,
    engine_configuration_error,
    engine_execution_error,
)
from registry_sync.core.exceptions import ExternalCallError, ProdPatchNotAllowed, SyncException
from registry_sync.core.pipeline.context import RunContext
from registry_sync.core.pipeline.step import Step
from registry_sync.core.pipeline.types import StepKind, StepResult, StepStatus

from .planner import plan_execution


_ENGINE_STEP_ID = "engine"

_CATALOGUE_TYPES = {
    ExternalCallError: EXTERNAL_CALL_FAILED,
    ProdPatchNotAllowed: PROD_PATCH_NOT_ALLOWED,
}


@dataclass(frozen=True)
class RunResult:
    """Resultado agregado de uma run de reconciliação."""

    steps: Dict[str, StepResult] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return all(r.status != StepStatus.FAILED for r in self.steps.values())

    def failed_steps(self) -> List[str]:
        return [sid for sid, r in self.steps.items() if r.status == StepStatus.FAILED]


class Engine:
    """Engine canônico do Registry Sync (planner + executor)."""

    def __init__(self, *, steps: Sequence[Step], ctx: RunContext):
        self.steps: List[Step] = list(steps)
        self.ctx: RunContext = ctx

    def _is_enabled(self, step_id: str) -> bool:
        steps_cfg = (self.ctx.config or {}).get("steps", {}) or {}
        step_cfg = steps_cfg.get(step_id, {}) or {}
        return bool(step_cfg.get("enabled", True))

    def _fail_fast(self) -> bool:
        engine_cfg = (self.ctx.config or {}).get("engine", {}) or {}
        return bool(engine_cfg.get("fail_fast", True))

    # ------------------------------------------------------------------
    # Guardrails: exceção -> SyncErrorPayload
    # ------------------------------------------------------------------

    def _exception_to_error(self, step_id: str, exc: Exception) -> SyncErrorPayload:
        """Converte exceções em SyncErrorPayload (serializável, acionável).

        Regras:
        - SyncException: já vem com message/details/hint/decision_required;
          o tipo vem do catálogo quando existir, senão do nome da classe.
        - Outras exceções: ENGINE_EXECUTION_ERROR sem expor stack trace.
        """
        if isinstance(exc, SyncException):
            return SyncErrorPayload(
                type=_CATALOGUE_TYPES.get(type(exc), exc.__class__.__name__),
                message=str(exc) or "Erro de execução",
                details=dict(exc.details or {}),
                hint=exc.hint,
                decision_required=bool(exc.decision_required),
            )

        return engine_execution_error(
            step=step_id,
            exc_type=exc.__class__.__name__,
            exc_message=str(exc) or None,
        )

    # ------------------------------------------------------------------
    # Rastreamento: helpers para enriquecer StepResult
    # ------------------------------------------------------------------
    def _ctx_warnings_for(self, step_id: str) -> List[str]:
        return list((self.ctx.warnings or {}).get(step_id, []) or [])

    def _payload_meta(self, payload: Any) -> Dict[str, Any]:
        """Metadados leves para rastreabilidade do payload (tamanho e sha256)."""
        try:
            raw = json.dumps(payload, ensure_ascii=False, sort_keys=True).encode("utf-8")
        except (TypeError, ValueError):
            raw = json.dumps(payload, ensure_ascii=False, sort_keys=True, default=str).encode("utf-8")

        return {
            "payload_bytes": int(len(raw)),
            "payload_sha256": hashlib.sha256(raw).hexdigest(),
        }

    def _enrich_step_result(self, *, step_id: str, step: Step, result: StepResult) -> StepResult:
        """Retorna uma NOVA instância StepResult com warnings do contexto e payload_meta."""
        desired_kind = result.kind or getattr(step, "kind", None) or StepKind.VALIDATE

        merged_w: List[str] = []
        seen = set()
        for msg in list(result.warnings or []) + self._ctx_warnings_for(step_id):
            if msg not in seen:
                merged_w.append(msg)
                seen.add(msg)

        payload = dict(result.payload or {})
        artifacts = dict(result.artifacts or {})
        artifacts.setdefault("payload_meta", self._payload_meta(payload))

        return replace(
            result,
            step_id=step_id,
            kind=desired_kind,
            warnings=merged_w,
            payload=payload,
            artifacts=artifacts,
        )

    def _mk_result(
        self,
        *,
        step_id: str,
        step: Step,
        status: StepStatus,
        summary: str,
        payload: Dict[str, Any] | None = None,
    ) -> StepResult:
        kind = getattr(step, "kind", None) or StepKind.VALIDATE
        r = StepResult(
            step_id=step_id,
            kind=kind,
            status=status,
            summary=summary,
            payload=dict(payload or {}),
        )
        return self._enrich_step_result(step_id=step_id, step=step, result=r)

    def run(self) -> RunResult:
        ordered = plan_execution(self.steps)

        self.ctx.log(
            step_id=_ENGINE_STEP_ID,
            level="info",
            message="run started",
            config_hash=compute_config_hash(self.ctx.config or {}),
            plan=[s.id for s in ordered],
        )

        results: Dict[str, StepResult] = {}
        for step in ordered:
            sid = step.id

            if not self._is_enabled(sid):
                results[sid] = self._mk_result(
                    step_id=sid,
                    step=step,
                    status=StepStatus.SKIPPED,
                    summary="skipped by config",
                )
                continue

            deps = list(getattr(step, "depends_on", []) or [])
            if any(results.get(d) and results[d].status != StepStatus.SUCCESS for d in deps):
                results[sid] = self._mk_result(
                    step_id=sid,
                    step=step,
                    status=StepStatus.SKIPPED,
                    summary="skipped due to failed or skipped dependency",
                )
                continue

            try:
                step_result = step.run(self.ctx)
                if not isinstance(step_result, StepResult):
                    raise TypeError("Step.run(ctx) must return StepResult")

                enriched = self._enrich_step_result(step_id=sid, step=step, result=step_result)
                results[sid] = enriched

            except Exception as e:
                error = self._exception_to_error(sid, e)

                if isinstance(e, TypeError) and "must return StepResult" in (str(e) or ""):
                    error = engine_configuration_error(
                        message="Step retornou tipo inválido",
                        details={"step_id": sid, "expected": "StepResult"},
                        hint="Ajuste o Step para retornar StepResult",
                    )

                self.ctx.log(
                    step_id=sid,
                    level="error",
                    message=error.message,
                    error_type=error.type,
                )
                results[sid] = self._mk_result(
                    step_id=sid,
                    step=step,
                    status=StepStatus.FAILED,
                    summary=error.message,
                    payload={"error": error.to_dict()},
                )

            if results[sid].status == StepStatus.FAILED and self._fail_fast():
                break

        self.ctx.log(
            step_id=_ENGINE_STEP_ID,
            level="info",
            message="run finished",
            statuses={sid: r.status.value for sid, r in results.items()},
        )
        return RunResult(steps=results)
