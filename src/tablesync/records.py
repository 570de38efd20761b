"""Single-record inserts for entities."""

import logging
from collections.abc import Mapping
from typing import Any

from . import ddl
from .exceptions import EntityDefinitionError
from .gateway import DatabaseGateway
from .models import EntityDescriptor

logger = logging.getLogger(__name__)


def record_values(entity: EntityDescriptor, record: Any) -> dict[str, Any]:
    """Bind parameters for an INSERT of ``record``

    ``record`` is a mapping or any object exposing the field names as
    attributes (pydantic model, dataclass, plain object). Parameters are keyed
    by field position (``p0``, ``p1``, ...). Absent values bind as ``None``,
    which the driver sends as NULL.
    """
    if isinstance(record, Mapping):
        unknown = sorted(set(record) - set(entity.field_names))
        if unknown:
            raise EntityDefinitionError(
                f"Record for '{entity.name}' has unknown fields: {', '.join(unknown)}"
            )
        lookup = record.get
    else:
        def lookup(name: str) -> Any:
            return getattr(record, name, None)

    return {
        ddl.bind_parameter_name(i): lookup(current.name)
        for i, current in enumerate(entity.fields)
    }


def add_record(gateway: DatabaseGateway, entity: EntityDescriptor, record: Any) -> str:
    """Insert one record into the entity's table

    Returns:
        The executed INSERT statement
    """
    statement = ddl.insert_record(entity)
    gateway.execute(statement, record_values(entity, record))
    logger.info("Inserted record into %s", entity.name)
    return statement
