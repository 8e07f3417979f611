# src/registry_sync/core/model/__init__.py
"""
Registros tipados de recursos locais e remotos.

Documentos chegam como árvores sem schema (JSON/YAML decodificado).
Os construtores `from_dict` deste pacote são tolerantes: ignoram chaves
desconhecidas e aplicam defaults a campos opcionais ausentes. Validação
estrutural é uma etapa separada (ver `registry_sync.reconcile`).

Quando campos extras precisam sobreviver intactos (o payload `data` de
uma data structure), o registro mantém a árvore original ao lado da
visão tipada.
"""

from .data_structure import (
    DataStructure,
    DataStructureData,
    DataStructureId,
    DataStructureMeta,
    DataStructureSelf,
)
from .data_product import (
    DataProduct,
    DataProductData,
    EntitiesDef,
    EventSpec,
    SchemaRef,
    SourceApp,
    SourceAppData,
    Trigger,
)
from .remote import (
    CompatResult,
    CompatSource,
    Deployment,
    Environment,
    ListingEntry,
    MigrationCheck,
    MigrationNote,
    RemoteDataProduct,
    RemoteEntities,
    RemoteEntity,
    RemoteEventSpec,
    RemoteSnapshot,
    RemoteSourceApplication,
    ValidationAnswer,
)

__all__ = [
    "CompatResult",
    "CompatSource",
    "DataProduct",
    "DataProductData",
    "DataStructure",
    "DataStructureData",
    "DataStructureId",
    "DataStructureMeta",
    "DataStructureSelf",
    "Deployment",
    "EntitiesDef",
    "Environment",
    "EventSpec",
    "ListingEntry",
    "MigrationCheck",
    "MigrationNote",
    "RemoteDataProduct",
    "RemoteEntities",
    "RemoteEntity",
    "RemoteEventSpec",
    "RemoteSnapshot",
    "RemoteSourceApplication",
    "SchemaRef",
    "SourceApp",
    "SourceAppData",
    "Trigger",
    "ValidationAnswer",
]
