# src/registry_sync/reconcile/references.py
"""
Reference Resolver.

Classifica os documentos locais pelo `resourceType` (data product, source
application ou ignorado) e resolve os `$ref` relativos dos data products
para arquivos de source application.

Regras:
    - `$ref` é resolvido relativo ao diretório do arquivo que o declara,
      com `.`/`..` normalizados
    - `$ref` sem source application correspondente → erro no arquivo do
      data product, listando os candidatos relativos a ele
    - `excludedSourceApplications` de uma event spec precisa apontar para
      uma source application incluída no data product pai
    - `image.$ref` de triggers é resolvido da mesma forma; o conteúdo das
      imagens fica a cargo do chamador

Invariantes:
    - Arquivos são processados em ordem; conjuntos resolvidos são ordenados
    - A saída não depende da ordem de iteração do input
    - Problemas de integridade referencial não são fatais: ficam no
      FileValidations do arquivo de origem

Limites explícitos:
    - Não faz I/O (documentos já decodificados)
    - Não detecta ciclos (source applications não referenciam nada)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from registry_sync.core.constants import (
    API_VERSION_V1,
    RESOURCE_TYPE_DATA_PRODUCT,
    RESOURCE_TYPE_SOURCE_APPLICATION,
)
from registry_sync.core.diagnostics import FileValidations, github_annotations, total_error_count
from registry_sync.core.errors import (
    SyncErrorPayload,
    excluded_source_app_not_in_parent,
    ref_not_found,
)
from registry_sync.core.model.data_product import DataProduct, SourceApp
from registry_sync.core.pipeline.collaborators import CompatChecker

from .deploy_checker import SchemaDeployChecker
from .dp_validation import (
    check_event_spec_compat,
    validate_dp_shape,
    validate_sa_shape,
    validate_source_app,
)


@dataclass(frozen=True)
class ResolvedDataProduct:
    file: str
    product: DataProduct
    source_app_files: List[str] = field(default_factory=list)
    excluded_by_spec: Dict[str, List[str]] = field(default_factory=dict)
    image_files: List[str] = field(default_factory=list)


@dataclass
class ReferenceGraph:
    data_products: Dict[str, ResolvedDataProduct] = field(default_factory=dict)
    source_apps: Dict[str, SourceApp] = field(default_factory=dict)
    validations: Dict[str, FileValidations] = field(default_factory=dict)
    problems: List[SyncErrorPayload] = field(default_factory=list)
    id_to_file: Dict[str, str] = field(default_factory=dict)

    def source_app_ids(self, dp_file: str) -> List[str]:
        """Ids (resourceName) das source applications resolvidas de um data product, ordenados."""
        resolved = self.data_products[dp_file]
        return sorted(self.source_apps[f].resource_name for f in resolved.source_app_files)

    def excluded_ids(self, dp_file: str, spec_name: str) -> List[str]:
        resolved = self.data_products[dp_file]
        files = resolved.excluded_by_spec.get(spec_name, [])
        return sorted(self.source_apps[f].resource_name for f in files if f in self.source_apps)

    def image_files(self) -> List[str]:
        """Imagens de triggers referenciadas pelos data products, resolvidas e sem repetição."""
        files: Set[str] = set()
        for resolved in self.data_products.values():
            files.update(resolved.image_files)
        return sorted(files)

    def error_count(self) -> int:
        return total_error_count(self.validations.values())

    def annotations(self, base_path: str = ".") -> List[str]:
        lines: List[str] = []
        for file in sorted(self.validations):
            lines.extend(github_annotations(os.path.relpath(file, base_path), self.validations[file]))
        return lines


def _dir_of(file: str) -> str:
    return os.path.dirname(file) or "."


def _resolve_path(referencing_file: str, ref: str) -> str:
    return os.path.normpath(os.path.join(_dir_of(referencing_file), ref))


def _relative_to(referencing_file: str, files: Iterable[str]) -> List[str]:
    start = _dir_of(referencing_file)
    return sorted(os.path.relpath(f, start) for f in files)


def _validate_data_product(
    file: str,
    doc: Mapping[str, Any],
    product: DataProduct,
    *,
    compat_checker: Optional[CompatChecker],
    changed: bool,
    validate_all: bool,
    concurrency: int,
) -> FileValidations:
    v, shape_ok = validate_dp_shape(doc)
    if not shape_ok:
        return v
    if validate_all or changed:
        v.merge(check_event_spec_compat(compat_checker, product, concurrency))
    else:
        v.debug.append(
            f"skipping compatibility check for {file}, since it was not changed, "
            "use --full to include it in validation"
        )
    return v


def _classify(
    documents: Mapping[str, Mapping[str, Any]],
    graph: ReferenceGraph,
    *,
    compat_checker: Optional[CompatChecker],
    deploy_checker: Optional[SchemaDeployChecker],
    changed_files: Set[str],
    validate_all: bool,
    concurrency: int,
    alternatives_limit: int,
) -> Dict[str, DataProduct]:
    products: Dict[str, DataProduct] = {}

    # data products são validados depois que todas as source applications foram lidas
    for file in sorted(documents):
        doc = documents[file]
        v = graph.validations.setdefault(file, FileValidations())

        api_version = doc.get("apiVersion")
        if api_version != API_VERSION_V1:
            v.errors.append(f"ignoring, unknown or missing apiVersion: {api_version}")
            continue

        if "resourceType" not in doc:
            v.errors.append("missing resourceType")
            continue

        resource_type = doc["resourceType"]
        if resource_type == RESOURCE_TYPE_SOURCE_APPLICATION:
            sa = SourceApp.from_dict(doc)
            graph.source_apps[file] = sa
            if sa.resource_name:
                graph.id_to_file[sa.resource_name] = file
            shape, shape_ok = validate_sa_shape(doc)
            v.merge(shape)
            v.merge(
                validate_source_app(
                    sa,
                    deploy_checker=deploy_checker,
                    shape_ok=shape_ok,
                    alternatives_limit=alternatives_limit,
                )
            )
        elif resource_type == RESOURCE_TYPE_DATA_PRODUCT:
            products[file] = DataProduct.from_dict(doc)
        else:
            v.debug.append(f"ignoring, unknown resourceType: {resource_type}")

    for file in sorted(products):
        product = products[file]
        if product.resource_name:
            graph.id_to_file[product.resource_name] = file
        for spec in product.data.event_specifications:
            if spec.resource_name:
                graph.id_to_file[spec.resource_name] = file
        graph.validations[file].merge(
            _validate_data_product(
                file,
                documents[file],
                product,
                compat_checker=compat_checker,
                changed=file in changed_files,
                validate_all=validate_all,
                concurrency=concurrency,
            )
        )

    return products


def _record(graph: ReferenceGraph, file: str, problem: SyncErrorPayload) -> None:
    graph.validations.setdefault(file, FileValidations()).errors.append(problem.message)
    graph.problems.append(problem)


def _resolve(graph: ReferenceGraph, file: str, product: DataProduct) -> ResolvedDataProduct:
    by_path = {os.path.normpath(f): f for f in graph.source_apps}

    included: Set[str] = set()
    for ref in product.data.source_applications:
        target = ref.get("$ref")
        if target is None:
            continue
        sa_file = by_path.get(_resolve_path(file, target))
        if sa_file is None:
            _record(
                graph,
                file,
                ref_not_found(file=file, ref=target, available=_relative_to(file, graph.source_apps)),
            )
            continue
        included.add(sa_file)

    excluded_by_spec: Dict[str, List[str]] = {}
    for spec in product.data.event_specifications:
        excluded: Set[str] = set()
        for ref in spec.excluded_source_applications:
            target = ref.get("$ref")
            if target is None:
                continue
            sa_file = by_path.get(_resolve_path(file, target))
            if sa_file is None or sa_file not in included:
                _record(
                    graph,
                    file,
                    excluded_source_app_not_in_parent(
                        file=file,
                        event_spec=spec.resource_name,
                        ref=target,
                        parent=_relative_to(file, included),
                    ),
                )
                continue
            excluded.add(sa_file)
        excluded_by_spec[spec.resource_name] = sorted(excluded)

    images = {
        _resolve_path(file, trigger.image_ref)
        for spec in product.data.event_specifications
        for trigger in spec.triggers
        if trigger.image_ref
    }

    return ResolvedDataProduct(
        file=file,
        product=product,
        source_app_files=sorted(included),
        excluded_by_spec=excluded_by_spec,
        image_files=sorted(images),
    )


def resolve_references(
    documents: Mapping[str, Mapping[str, Any]],
    *,
    compat_checker: Optional[CompatChecker] = None,
    deploy_checker: Optional[SchemaDeployChecker] = None,
    changed_files: Optional[Iterable[str]] = None,
    validate_all: bool = True,
    concurrency: int = 1,
    alternatives_limit: int = 5,
) -> ReferenceGraph:
    """
    Classifica, valida e resolve as referências dos documentos locais.

    Args:
        documents (Mapping[str, Mapping]): arquivo → documento decodificado.
        compat_checker (CompatChecker | None): oracle de compatibilidade de event specs.
        deploy_checker (SchemaDeployChecker | None): resolvedor de publicação de schemas;
            sem ele as entidades de source applications não são verificadas.
        changed_files (Iterable[str] | None): arquivos alterados; com `validate_all`
            falso, só eles passam pela checagem de compatibilidade.
        validate_all (bool): checa compatibilidade de todos os data products.
        concurrency (int): limite de chamadas simultâneas ao oracle.
        alternatives_limit (int): versões alternativas exibidas por diagnóstico.

    Returns:
        ReferenceGraph: data products resolvidos, source applications,
        validações por arquivo e problemas referenciais tipados.

    Raises:
        ExternalCallError: Se um oracle necessário falhar ou não estiver configurado.
    """
    graph = ReferenceGraph()
    products = _classify(
        documents,
        graph,
        compat_checker=compat_checker,
        deploy_checker=deploy_checker,
        changed_files=set(changed_files or ()),
        validate_all=validate_all,
        concurrency=concurrency,
        alternatives_limit=alternatives_limit,
    )
    for file in sorted(products):
        graph.data_products[file] = _resolve(graph, file, products[file])
    return graph
