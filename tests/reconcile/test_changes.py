# tests/reconcile/test_changes.py
"""
Testes do Change Classifier de data structures.

Os testes asseguram que:
- recurso sem identidade remota vai para to_create
- mesmo versão com hash diferente vai para to_update_patch (com ambos os hashes)
- versão diferente com hash diferente vai para to_update_new_version
  (com a versão remota como baseline)
- ausência de deployment no ambiente alvo é primeiro deploy (sem baseline)
- `meta` diferente é ortogonal às classificações de versão
- patches são recusados em PROD

Decisões arquiteturais:
    - Hashes remotos são calculados com a mesma função do classificador
    - Listagens são construídas via fixture, sem rede
"""

import pytest

try:
    from registry_sync.core.exceptions import ProdPatchNotAllowed
    from registry_sync.core.model.data_structure import DataStructure
    from registry_sync.core.model.remote import Environment
    from registry_sync.reconcile.changes import classify_changes, ensure_prod_promotable
except Exception as e:  # noqa: BLE001
    ProdPatchNotAllowed = None
    DataStructure = None
    Environment = None
    classify_changes = None
    ensure_prod_promotable = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing change classifier. Implement:\n"
            "- src/registry_sync/reconcile/changes.py (classify_changes)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def _bucket_sizes(changes):
    return (
        len(changes.to_create),
        len(changes.to_update_meta),
        len(changes.to_update_new_version),
        len(changes.to_update_patch),
    )


def test_unknown_identity_is_created(make_ds_doc):
    """Recurso local sem match numa listagem vazia → exatamente um to_create."""
    _require_imports()

    local = {"ds/login.yml": DataStructure.from_dict(make_ds_doc())}

    changes = classify_changes(local, [], Environment.DEV)

    assert _bucket_sizes(changes) == (1, 0, 0, 0)
    assert changes.to_create[0].file_name == "ds/login.yml"


def test_same_version_different_hash_is_patch(make_ds_doc, make_listing_entry):
    """
    Verifica a classificação de patch.

    Versão local 1-0-0, deployment remoto {1-0-0, H1} e hash local H2 ≠ H1
    → um to_update_patch carregando os dois hashes.
    """
    _require_imports()

    ds = DataStructure.from_dict(make_ds_doc(version="1-0-0"))
    remote_hash = DataStructure.from_dict(make_ds_doc(version="1-0-0", description="old")).content_hash()
    listing = [make_listing_entry(deployments=[("1-0-0", "DEV", remote_hash)])]

    changes = classify_changes({"login.yml": ds}, listing, Environment.DEV)

    assert _bucket_sizes(changes) == (0, 0, 0, 1)
    patch = changes.to_update_patch[0]
    assert patch.remote_version == "1-0-0"
    assert patch.local_content_hash == ds.content_hash()
    assert patch.remote_content_hash == remote_hash


def test_different_version_different_hash_is_new_version(make_ds_doc, make_listing_entry):
    _require_imports()

    ds = DataStructure.from_dict(make_ds_doc(version="1-0-1"))
    listing = [make_listing_entry(deployments=[("1-0-0", "DEV", "h1")])]

    changes = classify_changes({"login.yml": ds}, listing, Environment.DEV)

    assert _bucket_sizes(changes) == (0, 0, 1, 0)
    assert changes.to_update_new_version[0].remote_version == "1-0-0"
    assert not changes.to_update_new_version[0].is_first_deploy


def test_missing_target_env_deployment_is_first_deploy(make_ds_doc, make_listing_entry):
    """Promoção dev → prod: nenhum deployment PROD → nova versão sem baseline."""
    _require_imports()

    ds = DataStructure.from_dict(make_ds_doc())
    listing = [make_listing_entry(deployments=[("1-0-0", "DEV", ds.content_hash())])]

    changes = classify_changes({"login.yml": ds}, listing, Environment.PROD)

    assert _bucket_sizes(changes) == (0, 0, 1, 0)
    assert changes.to_update_new_version[0].is_first_deploy


def test_meta_change_is_orthogonal(make_ds_doc, make_listing_entry):
    """
    Mesmo payload (mesmo hash, mesma versão) com `meta` diferente
    → exatamente um to_update_meta e nenhum bucket de versão.
    """
    _require_imports()

    ds = DataStructure.from_dict(make_ds_doc(meta={"hidden": True, "schemaType": "event"}))
    listing = [make_listing_entry(deployments=[("1-0-0", "DEV", ds.content_hash())])]

    changes = classify_changes({"login.yml": ds}, listing, Environment.DEV)

    assert _bucket_sizes(changes) == (0, 1, 0, 0)


def test_meta_change_can_co_occur_with_version_change(make_ds_doc, make_listing_entry):
    _require_imports()

    ds = DataStructure.from_dict(make_ds_doc(version="1-0-1", meta={"hidden": True, "schemaType": "event"}))
    listing = [make_listing_entry(deployments=[("1-0-0", "DEV", "h1")])]

    changes = classify_changes({"login.yml": ds}, listing, Environment.DEV)

    assert _bucket_sizes(changes) == (0, 1, 1, 0)


def test_missing_and_empty_custom_data_are_equal(make_ds_doc, make_listing_entry):
    _require_imports()

    ds = DataStructure.from_dict(make_ds_doc(meta={"hidden": False, "schemaType": "event"}))
    listing = [make_listing_entry(deployments=[("1-0-0", "DEV", ds.content_hash())])]

    changes = classify_changes({"login.yml": ds}, listing, Environment.DEV)

    assert changes.is_empty()


def test_output_order_follows_file_names(make_ds_doc):
    _require_imports()

    local = {
        "b.yml": DataStructure.from_dict(make_ds_doc(name="b")),
        "a.yml": DataStructure.from_dict(make_ds_doc(name="a")),
    }

    changes = classify_changes(local, [], Environment.DEV)

    assert [c.file_name for c in changes.to_create] == ["a.yml", "b.yml"]


def test_prod_refuses_patches(make_ds_doc, make_listing_entry):
    """Em PROD, qualquer patch aborta com decisão requerida."""
    _require_imports()

    ds = DataStructure.from_dict(make_ds_doc())
    listing = [make_listing_entry(deployments=[("1-0-0", "PROD", "other")])]
    changes = classify_changes({"login.yml": ds}, listing, Environment.PROD)

    with pytest.raises(ProdPatchNotAllowed) as exc:
        ensure_prod_promotable(changes)

    assert exc.value.decision_required is True
    assert exc.value.details["files"] == ["login.yml"]
