# tests/reconcile/test_data_products.py
"""
Testes do change set de data products.

Os testes asseguram que:
- recursos sem contrapartida remota viram criações
- recursos idênticos (a menos de ordem de ids e campos de governança)
  não geram ação
- diferenças de conteúdo viram atualizações
- event specs remotas removidas localmente viram deleções
- source applications de uma event spec descontam as exclusões
- o plano de purge lista remotos sem contrapartida local
"""

import pytest

try:
    from registry_sync.core.model.remote import RemoteSnapshot
    from registry_sync.reconcile.data_products import find_dp_changes, plan_purge, set_minus
    from registry_sync.reconcile.references import resolve_references
except Exception as e:  # noqa: BLE001
    RemoteSnapshot = None
    find_dp_changes = None
    plan_purge = None
    set_minus = None
    resolve_references = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing data product change set. Implement:\n"
            "- src/registry_sync/reconcile/data_products.py\n"
            f"Import error: {_IMPORT_ERR}"
        )


DP_FILE = "data-products/checkout.yml"
WEB_FILE = "source-apps/web.yml"
MOBILE_FILE = "source-apps/mobile.yml"

WEB_ID = "7f3c1f52-2d55-4f36-9a0b-0c5b1b7d6c01"
MOBILE_ID = "0b8e2b6a-61d4-4d8b-8f0e-3e7f1c3f2a02"
DP_ID = "c5a0c3a4-9f6f-4b8e-b1d5-5f4a2e7d1a03"
ES_ID = "e1d2c3b4-a5f6-4789-8abc-def012345604"
OLD_ES_ID = "99999999-a5f6-4789-8abc-def012345699"


def _graph(make_sa_doc, make_dp_doc, specs=None):
    docs = {
        DP_FILE: make_dp_doc(refs=("../source-apps/web.yml", "../source-apps/mobile.yml"), specs=specs),
        WEB_FILE: make_sa_doc(),
        MOBILE_FILE: make_sa_doc(resource_name=MOBILE_ID, name="mobile", app_ids=("ios",)),
    }
    return resolve_references(docs)


def _remote_sa(sa_id, name, app_ids, **extra):
    raw = {
        "id": sa_id,
        "name": name,
        "description": f"{name} app",
        "owner": "team@acme.com",
        "appIds": list(app_ids),
        "lockStatus": "locked",
        "managedFrom": "git",
    }
    raw.update(extra)
    return raw


def _in_sync_snapshot(**overrides):
    raw = {
        "sourceApplication": [
            _remote_sa(WEB_ID, "web", ["web"]),
            _remote_sa(MOBILE_ID, "mobile", ["ios"]),
        ],
        "dataProducts": [
            {
                "id": DP_ID,
                "name": "checkout",
                "status": "published",
                "sourceApplications": [WEB_ID, MOBILE_ID],
                "domain": "sales",
                "owner": "team@acme.com",
                "description": "checkout product",
                "eventSpecs": [{"id": ES_ID}],
            }
        ],
        "eventSpecs": [
            {
                "id": ES_ID,
                "name": "purchase",
                "sourceApplications": [WEB_ID, MOBILE_ID],
                "dataProductId": DP_ID,
                "status": "draft",
                "version": 3,
            }
        ],
    }
    raw.update(overrides)
    return RemoteSnapshot.from_dict(raw)


def test_set_minus_is_sorted_and_unique():
    _require_imports()

    assert set_minus(["c", "a", "b", "a"], ["b"]) == ["a", "c"]


def test_everything_is_created_on_empty_remote(make_sa_doc, make_dp_doc):
    _require_imports()

    cs = find_dp_changes(_graph(make_sa_doc, make_dp_doc), RemoteSnapshot())

    assert [sa.id for sa in cs.sa_create] == [MOBILE_ID, WEB_ID]
    assert [dp.id for dp in cs.dp_create] == [DP_ID]
    assert cs.dp_create[0].source_application_ids == sorted([WEB_ID, MOBILE_ID])
    assert [es.id for es in cs.es_create] == [ES_ID]
    assert cs.es_create[0].data_product_id == DP_ID
    assert cs.counts() == {"data_products": 1, "event_specs": 1, "source_apps": 2}
    assert cs.id_to_file[WEB_ID] == WEB_FILE
    assert cs.id_to_file[ES_ID] == DP_FILE


def test_in_sync_remote_produces_no_changes(make_sa_doc, make_dp_doc):
    """Ordem de ids e campos de governança remota não contam como diferença."""
    _require_imports()

    cs = find_dp_changes(_graph(make_sa_doc, make_dp_doc), _in_sync_snapshot())

    assert cs.is_empty()
    assert cs.summary() == []


def test_content_differences_become_updates(make_sa_doc, make_dp_doc):
    _require_imports()

    snapshot = _in_sync_snapshot(
        sourceApplication=[
            _remote_sa(WEB_ID, "web", ["web", "web-legacy"]),
            _remote_sa(MOBILE_ID, "mobile", ["ios"]),
        ]
    )

    cs = find_dp_changes(_graph(make_sa_doc, make_dp_doc), snapshot)

    assert [sa.id for sa in cs.sa_update] == [WEB_ID]
    assert cs.sa_create == [] and cs.dp_update == [] and cs.es_update == []
    assert cs.summary() == [
        {
            "operation": "update",
            "kind": "source_application",
            "id": WEB_ID,
            "name": "web",
            "file": WEB_FILE,
        }
    ]


def test_excluded_source_apps_change_event_spec(make_sa_doc, make_dp_doc):
    _require_imports()

    specs = [
        {
            "resourceName": ES_ID,
            "name": "purchase",
            "excludedSourceApplications": [{"$ref": "../source-apps/mobile.yml"}],
        }
    ]

    cs = find_dp_changes(_graph(make_sa_doc, make_dp_doc, specs=specs), _in_sync_snapshot())

    assert [es.id for es in cs.es_update] == [ES_ID]
    assert cs.es_update[0].source_application_ids == [WEB_ID]


def test_remote_event_spec_missing_locally_is_deleted(make_sa_doc, make_dp_doc):
    _require_imports()

    raw_dp = {
        "id": DP_ID,
        "name": "checkout",
        "sourceApplications": [MOBILE_ID, WEB_ID],
        "domain": "sales",
        "owner": "team@acme.com",
        "description": "checkout product",
        "eventSpecs": [{"id": ES_ID}, {"id": OLD_ES_ID}],
    }
    snapshot = _in_sync_snapshot(dataProducts=[raw_dp])

    cs = find_dp_changes(_graph(make_sa_doc, make_dp_doc), snapshot)

    assert [es.id for es in cs.es_delete] == [OLD_ES_ID]
    assert cs.es_delete[0].data_product_id == DP_ID
    assert cs.id_to_file[OLD_ES_ID] == "checkout"
    assert cs.counts()["event_specs"] == 1


def test_purge_lists_remote_only_resources(make_sa_doc, make_dp_doc):
    _require_imports()

    snapshot = _in_sync_snapshot(
        sourceApplication=[
            _remote_sa(WEB_ID, "web", ["web"]),
            _remote_sa("bbbbbbbb-0000-4000-8000-000000000002", "zeta", []),
            _remote_sa("aaaaaaaa-0000-4000-8000-000000000001", "alpha", []),
        ]
    )

    purge = plan_purge(_graph(make_sa_doc, make_dp_doc), snapshot)

    assert [sa.name for sa in purge.source_apps] == ["alpha", "zeta"]
    assert purge.data_products == []
    assert purge.summary() == "2 source apps and 0 data products"
    assert not purge.is_empty()
