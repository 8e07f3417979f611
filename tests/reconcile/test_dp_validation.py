# tests/reconcile/test_dp_validation.py
"""
Testes da validação local de data products e source applications.

Os testes asseguram que:
- documentos bem formados passam na validação de forma
- erros de forma são agrupados por JSON pointer
- regras de propriedade precisam fechar o objeto
- checagens de source application (uuid, appIds, cardinalidades, regras)
- entidades de source application referenciam schemas publicados
- resultados do oracle de compatibilidade viram erros/avisos por caminho
"""

import pytest

try:
    from registry_sync.core.exceptions import ExternalCallError
    from registry_sync.core.model.data_product import DataProduct, SourceApp
    from registry_sync.core.model.remote import CompatResult, CompatSource
    from registry_sync.reconcile.deploy_checker import SchemaDeployChecker
    from registry_sync.reconcile.dp_validation import (
        check_event_spec_compat,
        validate_dp_shape,
        validate_sa_shape,
        validate_source_app,
    )
except Exception as e:  # noqa: BLE001
    ExternalCallError = None
    DataProduct = None
    SourceApp = None
    CompatResult = None
    CompatSource = None
    SchemaDeployChecker = None
    check_event_spec_compat = None
    validate_dp_shape = None
    validate_sa_shape = None
    validate_source_app = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing data product validation. Implement:\n"
            "- src/registry_sync/reconcile/dp_validation.py\n"
            f"Import error: {_IMPORT_ERR}"
        )


EVENT_URI = "iglu:com.acme/purchase/jsonschema/1-0-0"
USER_URI = "iglu:com.acme/user/jsonschema/1-0-0"

_CLOSED_RULES = {
    "type": "object",
    "additionalProperties": False,
    "properties": {"total": {"type": "number"}},
}


def _spec(event=None, tracked=None):
    spec = {"resourceName": "e1d2c3b4-a5f6-4789-8abc-def012345604", "name": "purchase"}
    if event is not None:
        spec["event"] = event
    if tracked is not None:
        spec["entities"] = {"tracked": tracked}
    return spec


# ---------------------------------------------------------------------------
# Forma
# ---------------------------------------------------------------------------

def test_well_formed_documents_pass_shape(make_dp_doc, make_sa_doc):
    _require_imports()

    dp_v, dp_ok = validate_dp_shape(make_dp_doc())
    sa_v, sa_ok = validate_sa_shape(make_sa_doc())

    assert dp_ok and sa_ok
    assert dp_v.error_count() == 0
    assert sa_v.error_count() == 0


def test_shape_errors_are_grouped_by_pointer(make_dp_doc):
    _require_imports()

    doc = make_dp_doc()
    doc["resourceName"] = "not-a-uuid"
    del doc["data"]["name"]

    v, ok = validate_dp_shape(doc)

    assert not ok
    assert sorted(v.errors_with_paths) == ["/data", "/resourceName"]
    assert any("'name' is a required property" in m for m in v.errors_with_paths["/data"])


def test_open_rules_are_rejected(make_dp_doc):
    """Regras sem `additionalProperties: false` não permitem checar compatibilidade."""
    _require_imports()

    open_rules = {"type": "object", "properties": {"total": {"type": "number"}}}
    doc = make_dp_doc(specs=[_spec(event={"source": EVENT_URI, "schema": open_rules})])

    v, ok = validate_dp_shape(doc)

    assert not ok
    assert "/data/eventSpecifications/0/event/schema" in v.errors_with_paths


def test_root_errors_use_root_pointer():
    _require_imports()

    v, ok = validate_sa_shape({"apiVersion": "v1"})

    assert not ok
    assert "/" in v.errors_with_paths


# ---------------------------------------------------------------------------
# Source applications
# ---------------------------------------------------------------------------

def test_source_app_minimum_checks(make_sa_doc):
    _require_imports()

    sa = SourceApp.from_dict(make_sa_doc(resource_name="web", name="", app_ids=("web", "")))

    v = validate_source_app(sa)

    assert v.errors == [
        "resourceName must be a valid uuid",
        "data.name required",
        "data.appIds[1] can't be empty",
    ]


def test_source_app_cardinalities(make_sa_doc):
    _require_imports()

    entities = {
        "tracked": [
            {"source": USER_URI, "minCardinality": -1},
            {"source": USER_URI, "minCardinality": 2, "maxCardinality": 1},
            {"source": USER_URI, "maxCardinality": 1},
            {"minCardinality": 0},
        ]
    }
    sa = SourceApp.from_dict(make_sa_doc(entities=entities))

    v = validate_source_app(sa)

    assert v.errors == [
        "data.entities.tracked[3].source required",
        "data.entities.tracked[0].minCardinality must be > 0",
        "data.entities.tracked[1].maxCardinality must be > minCardinality: 2",
        "data.entities.tracked[2].maxCardinality without minCardinality",
    ]


def test_source_app_entities_cannot_carry_rules(make_sa_doc):
    _require_imports()

    sa = SourceApp.from_dict(make_sa_doc(entities={"enriched": [{"source": USER_URI, "schema": _CLOSED_RULES}]}))

    v = validate_source_app(sa)

    assert v.errors == ["data.entities.enriched[0].schema property rules unsupported for source applications"]


def test_source_app_schemas_must_be_deployed(make_sa_doc, make_listing_entry):
    _require_imports()

    listing = [make_listing_entry(name="user", deployments=[("1-0-1", "DEV", "h"), ("2-0-0", "PROD", "h")])]
    checker = SchemaDeployChecker(listing=listing, fetch_deployments=lambda h: [])
    entities = {
        "tracked": [
            {"source": USER_URI},
            {"source": "iglu:com.acme/unknown/jsonschema/1-0-0"},
            {"source": "iglu:com.acme/user/1-0-0"},
            {"source": "iglu:com.snowplowanalytics.snowplow/page_view/jsonschema/1-0-0"},
        ]
    }
    sa = SourceApp.from_dict(make_sa_doc(entities=entities))

    v = validate_source_app(sa, deploy_checker=checker)

    assert v.errors == [
        f"data.entities.tracked[0].source could not find deployment of {USER_URI}, available versions (1-0-1, 2-0-0)",
        "data.entities.tracked[1].source could not find deployment of iglu:com.acme/unknown/jsonschema/1-0-0",
        "data.entities.tracked[2].source invalid iglu uri should follow the format "
        "iglu:vendor/name/format/version, eg: iglu:io.snowplow/login/jsonschema/1-0-0",
    ]


def test_deploy_check_is_skipped_when_shape_failed(make_sa_doc):
    _require_imports()

    class ExplodingChecker:
        def is_deployed(self, uri):
            raise AssertionError("should not be called")

    sa = SourceApp.from_dict(make_sa_doc(entities={"tracked": [{"source": USER_URI}]}))

    v = validate_source_app(sa, deploy_checker=ExplodingChecker(), shape_ok=False)

    assert v.errors == []


# ---------------------------------------------------------------------------
# Compatibilidade de event specifications
# ---------------------------------------------------------------------------

def test_compat_results_become_path_diagnostics(make_dp_doc):
    _require_imports()

    requests = []

    def checker(event, entities):
        requests.append((event, entities))
        return CompatResult(
            status="incompatible",
            sources=[
                CompatSource(source=EVENT_URI, status="incompatible", properties={"total": "incompatible"}),
                CompatSource(source=USER_URI, status="undecidable", properties={"id": "compatible"}),
            ],
        )

    spec = _spec(
        event={"source": EVENT_URI, "schema": _CLOSED_RULES},
        tracked=[{"source": USER_URI, "schema": _CLOSED_RULES}, {"source": USER_URI}],
    )
    dp = DataProduct.from_dict(make_dp_doc(specs=[spec]))

    v = check_event_spec_compat(checker, dp, concurrency=4)

    event, entities = requests[0]
    assert event == {"source": EVENT_URI, "schema": _CLOSED_RULES}
    assert entities == [{"source": USER_URI, "schema": _CLOSED_RULES}]

    base = "/data/eventSpecifications/0"
    assert v.errors_with_paths == {
        f"{base}/event/schema": [f"definition incompatible with source data structure ({EVENT_URI})"],
        f"{base}/event/schema/total": [
            f"definition incompatible with .total in source data structure ({EVENT_URI})"
        ],
    }
    assert v.warnings_with_paths == {
        f"{base}/entities/tracked/0/schema": [
            f"definition has unknown compatibility with source data structure ({USER_URI})"
        ],
    }


def test_entity_rules_without_event_only_warn(make_dp_doc):
    _require_imports()

    def checker(event, entities):
        raise AssertionError("should not be called")

    spec = _spec(tracked=[{"source": USER_URI, "schema": _CLOSED_RULES}])
    dp = DataProduct.from_dict(make_dp_doc(specs=[spec]))

    v = check_event_spec_compat(checker, dp)

    assert v.warnings_with_paths == {
        "/data/eventSpecifications/0": [
            "will not run compatibility checks on entities without an event defined"
        ]
    }
    assert v.error_count() == 0


def test_missing_compat_checker_is_fatal_when_needed(make_dp_doc):
    _require_imports()

    dp = DataProduct.from_dict(make_dp_doc(specs=[_spec(event={"source": EVENT_URI, "schema": _CLOSED_RULES})]))

    with pytest.raises(ExternalCallError):
        check_event_spec_compat(None, dp)

    assert check_event_spec_compat(None, DataProduct.from_dict(make_dp_doc())).error_count() == 0
