# tests/core/pipeline/test_registry_unique_step_id.py
"""
Testes do StepRegistry.

Os testes asseguram que:
- ids duplicados são rejeitados com DuplicateStepIdError
- ids únicos são aceitos e a ordem de registro é preservada
"""

import pytest

try:
    from registry_sync.core.pipeline.registry import StepRegistry, DuplicateStepIdError
except Exception as e:  # noqa: BLE001
    StepRegistry = None
    DuplicateStepIdError = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    """Garante que o StepRegistry e sua exceção de unicidade estejam disponíveis."""
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing StepRegistry. Implement:\n"
            "- src/registry_sync/core/pipeline/registry.py (StepRegistry, DuplicateStepIdError)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_registry_rejects_duplicate_step_id(DummyStep):
    """
    Verifica que o registry rejeita dois Steps com o mesmo `id`.

    Invariantes:
        - A exceção é específica (`DuplicateStepIdError`)
        - O primeiro registro permanece válido
    """
    _require_imports()
    reg = StepRegistry()
    reg.add(DummyStep(step_id="ds.validate_local"))
    with pytest.raises(DuplicateStepIdError):
        reg.add(DummyStep(step_id="ds.validate_local"))
    assert [s.id for s in reg.list()] == ["ds.validate_local"]


def test_registry_accepts_unique_ids(DummyStep):
    _require_imports()
    reg = StepRegistry()
    reg.add(DummyStep(step_id="ds.validate_local"))
    reg.add(DummyStep(step_id="dp.resolve"))
    assert [s.id for s in reg.list()] == ["ds.validate_local", "dp.resolve"]
    assert reg.get("dp.resolve").id == "dp.resolve"


def test_registry_rejects_empty_id(DummyStep):
    _require_imports()
    with pytest.raises(ValueError):
        StepRegistry().add(DummyStep(step_id=""))
