"""
tablesync

Derives SQL Server table schemas from entity descriptors, creates them,
keeps them in sync and inserts records.
"""

__version__ = "0.1.0"

from .bootstrap import BootstrapReport, create_tables
from .context import SchemaContext
from .exceptions import (
    CircularDependencyError,
    ConfigurationError,
    DatabaseConnectionError,
    EntityDefinitionError,
    MissingDependencyError,
    StatementExecutionFailure,
    TableSyncError,
    UnsupportedFieldType,
)
from .gateway import DatabaseGateway, DryRunGateway, SqlAlchemyGateway, open_gateway
from .inspector import LiveSchemaInspector, LiveTableSchema
from .models import (
    EntityBuilder,
    EntityDescriptor,
    FieldDescriptor,
    ForeignKeyRef,
    SemanticType,
)
from .records import add_record
from .registry import EntityRegistry, load_entities
from .sql_types import column_type, map_sql_type
from .synchronizer import SchemaSynchronizer, SyncReport, TableSyncReport, sync_tables

__all__ = [
    "__version__",
    "SemanticType",
    "FieldDescriptor",
    "ForeignKeyRef",
    "EntityDescriptor",
    "EntityBuilder",
    "EntityRegistry",
    "load_entities",
    "map_sql_type",
    "column_type",
    "DatabaseGateway",
    "SqlAlchemyGateway",
    "DryRunGateway",
    "open_gateway",
    "LiveSchemaInspector",
    "LiveTableSchema",
    "SchemaSynchronizer",
    "SyncReport",
    "TableSyncReport",
    "sync_tables",
    "BootstrapReport",
    "create_tables",
    "add_record",
    "SchemaContext",
    "TableSyncError",
    "UnsupportedFieldType",
    "StatementExecutionFailure",
    "EntityDefinitionError",
    "ConfigurationError",
    "CircularDependencyError",
    "MissingDependencyError",
    "DatabaseConnectionError",
]
