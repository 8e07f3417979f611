# tests/conftest.py
"""
Fixtures compartilhados para testes do Registry Sync.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações mínimas e determinísticas (YAML em string)
- contexto de execução controlado (RunContext)
- Steps dummy para testes estruturais de planner e engine
- construtores de documentos locais e de entradas da listagem remota

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Documentos são dicionários puros, como chegariam de um decoder YAML
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas

Invariantes:
    - Nenhuma fixture executa pipeline real
    - Nenhuma fixture realiza I/O ou chamadas de rede
    - Dados retornados são determinísticos e isolados

Limites explícitos:
    - Não substituir testes de integração
    - Não conter lógica de reconciliação
"""

import pytest
from datetime import datetime, timezone


# =====================================================
# Config Loader fixtures
# =====================================================

@pytest.fixture
def sync_config_defaults_yaml() -> str:
    """
    YAML de defaults de projeto semelhante ao uso real.

    Representa o conteúdo típico de `registry-sync.defaults.yaml`, sobre o
    qual overrides locais são aplicados via deep-merge.
    """
    return """
sync:
  target_env: DEV
  concurrency: 3
  validate_all: false
  alternatives_limit: 5
engine:
  fail_fast: true
steps:
  ds.validate_remote:
    enabled: true
"""


@pytest.fixture
def sync_config_local_yaml() -> str:
    """YAML de overrides locais: promove para PROD e desliga a validação remota."""
    return """
sync:
  target_env: PROD
  concurrency: 25
steps:
  ds.validate_remote:
    enabled: false
"""


# =====================================================
# Pipeline / Engine fixtures
# =====================================================

@pytest.fixture
def dummy_config() -> dict:
    """Configuração efetiva mínima (defaults embutidos)."""
    from registry_sync.core.config.settings import Settings

    return Settings.default_config()


@pytest.fixture
def dummy_ctx(dummy_config):
    """
    RunContext isolado, sem documentos e sem colaboradores.

    Decisões arquiteturais:
        - `run_id` e `created_at` fixos para facilitar asserções
        - Colaboradores default (listagens vazias, oracles ausentes)
    """
    from registry_sync.core.pipeline.context import RunContext

    return RunContext(
        run_id="test-run",
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        config=dummy_config,
    )


@pytest.fixture
def DummyStep():
    """
    Fixture factory que fornece uma implementação mínima e duck-typed de um Step.

    Retorna uma *classe* (não uma instância) que expõe `id`, `kind`,
    `depends_on` e um `run(ctx)` que registra um artefato e devolve SUCCESS.

    Usado por:
        - Testes de planner (ordenação, dependências)
        - Testes de engine (execução, status, transições)
        - Testes de registry e protocolo de Step
    """
    from registry_sync.core.pipeline.types import StepKind, StepResult, StepStatus

    class _DummyStep:
        def __init__(
            self,
            step_id: str = "ds.validate_local",
            kind: StepKind = StepKind.VALIDATE,
            depends_on=None,
        ):
            self.id = step_id
            self.kind = kind
            self.depends_on = depends_on or []

        def run(self, ctx):
            ctx.set_artifact(f"{self.id}.ok", True)
            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary="dummy ok",
                metrics={},
                warnings=[],
                artifacts={"ok": f"{self.id}.ok"},
                payload={"note": "dummy"},
            )

    return _DummyStep


# =====================================================
# Documentos locais e listagem remota
# =====================================================

@pytest.fixture
def make_ds_doc():
    """
    Construtor de documentos `data-structure` decodificados.

    Args do construtor:
        vendor, name, version: identidade do bloco `self`
        description: campo extra do payload (altera o hash)
        meta: bloco `meta` (default: event, visível, sem customData)
    """

    def _make(
        vendor: str = "com.acme",
        name: str = "login",
        version: str = "1-0-0",
        description: str = "login event",
        meta=None,
        format: str = "jsonschema",
    ) -> dict:
        return {
            "apiVersion": "v1",
            "resourceType": "data-structure",
            "meta": meta if meta is not None else {"hidden": False, "schemaType": "event", "customData": {}},
            "data": {
                "$schema": "http://iglucentral.com/schemas/com.snowplowanalytics.self-desc/schema/jsonschema/1-0-0#",
                "self": {"vendor": vendor, "name": name, "format": format, "version": version},
                "type": "object",
                "description": description,
                "properties": {"user": {"type": "string"}},
                "additionalProperties": False,
            },
        }

    return _make


@pytest.fixture
def make_listing_entry():
    """
    Construtor de ListingEntry da listagem remota.

    `deployments` é uma lista de tuplas (version, env, content_hash).
    """
    from registry_sync.core.model.remote import ListingEntry

    def _make(
        vendor: str = "com.acme",
        name: str = "login",
        deployments=(),
        meta=None,
        hash: str = "res-login",
        format: str = "jsonschema",
    ):
        return ListingEntry.from_dict(
            {
                "hash": hash,
                "vendor": vendor,
                "name": name,
                "format": format,
                "meta": meta if meta is not None else {"hidden": False, "schemaType": "event", "customData": {}},
                "deployments": [
                    {"version": v, "env": env, "contentHash": h} for v, env, h in deployments
                ],
            }
        )

    return _make


WEB_SA_ID = "7f3c1f52-2d55-4f36-9a0b-0c5b1b7d6c01"
MOBILE_SA_ID = "0b8e2b6a-61d4-4d8b-8f0e-3e7f1c3f2a02"
CHECKOUT_DP_ID = "c5a0c3a4-9f6f-4b8e-b1d5-5f4a2e7d1a03"
CHECKOUT_ES_ID = "e1d2c3b4-a5f6-4789-8abc-def012345604"


@pytest.fixture
def make_sa_doc():
    """
    Construtor de documentos `source-application` decodificados.

    `entities` é o bloco `data.entities` cru (default: ausente).
    """

    def _make(
        resource_name: str = WEB_SA_ID,
        name: str = "web",
        app_ids=("web",),
        entities=None,
    ) -> dict:
        data = {"name": name, "description": f"{name} app", "owner": "team@acme.com", "appIds": list(app_ids)}
        if entities is not None:
            data["entities"] = entities
        return {
            "apiVersion": "v1",
            "resourceType": "source-application",
            "resourceName": resource_name,
            "data": data,
        }

    return _make


@pytest.fixture
def make_dp_doc():
    """
    Construtor de documentos `data-product` decodificados.

    Args do construtor:
        refs: valores de `$ref` das source applications incluídas
        specs: event specifications cruas (default: uma spec sem regras)
    """

    def _make(
        resource_name: str = CHECKOUT_DP_ID,
        name: str = "checkout",
        refs=("../source-apps/web.yml",),
        specs=None,
    ) -> dict:
        if specs is None:
            specs = [{"resourceName": CHECKOUT_ES_ID, "name": "purchase"}]
        return {
            "apiVersion": "v1",
            "resourceType": "data-product",
            "resourceName": resource_name,
            "data": {
                "name": name,
                "domain": "sales",
                "owner": "team@acme.com",
                "description": f"{name} product",
                "sourceApplications": [{"$ref": r} for r in refs],
                "eventSpecifications": list(specs),
            },
        }

    return _make
