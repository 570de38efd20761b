"""
Entity Registry

Holds entity descriptors by name, in registration order, and loads entity
sets named by a ``module:attribute`` target (used by the CLI and config).
"""

import importlib
import logging
from collections.abc import Iterable
from typing import Any

from .exceptions import EntityDefinitionError
from .models import EntityDescriptor

logger = logging.getLogger(__name__)


class EntityRegistry:
    """Registry of entity descriptors"""

    def __init__(self, entities: Iterable[EntityDescriptor] = ()) -> None:
        self.entities: dict[str, EntityDescriptor] = {}
        for entity in entities:
            self.register(entity)

    def register(self, entity: EntityDescriptor) -> EntityDescriptor:
        """
        Register an entity

        Raises:
            EntityDefinitionError: If an entity with the same name is already registered
        """
        if entity.name in self.entities:
            raise EntityDefinitionError(f"Entity '{entity.name}' is already registered")
        self.entities[entity.name] = entity
        logger.debug("Registered entity %s", entity.name)
        return entity

    def get(self, name: str) -> EntityDescriptor | None:
        return self.entities.get(name)

    def require(self, name: str) -> EntityDescriptor:
        """Get an entity or fail with the list of known names"""
        entity = self.entities.get(name)
        if entity is None:
            available = ", ".join(self.entities) or "none"
            raise EntityDefinitionError(
                f"Entity '{name}' not found. Available entities: {available}"
            )
        return entity

    def get_all(self) -> list[EntityDescriptor]:
        return list(self.entities.values())

    def get_all_names(self) -> list[str]:
        return list(self.entities)

    def __contains__(self, name: object) -> bool:
        return name in self.entities

    def __len__(self) -> int:
        return len(self.entities)


def _coerce_entities(value: Any, target: str) -> list[EntityDescriptor]:
    if isinstance(value, EntityRegistry):
        return value.get_all()
    if isinstance(value, EntityDescriptor):
        return [value]
    if isinstance(value, Iterable) and not isinstance(value, (str, bytes)):
        entities = list(value)
        for item in entities:
            if not isinstance(item, EntityDescriptor):
                raise EntityDefinitionError(
                    f"'{target}' contains {type(item).__name__}, expected EntityDescriptor"
                )
        return entities
    raise EntityDefinitionError(
        f"'{target}' is {type(value).__name__}; expected an EntityRegistry, "
        "an EntityDescriptor or a sequence of them"
    )


def load_entities(target: str) -> EntityRegistry:
    """Import ``module:attribute`` and return its entities as a registry

    The attribute may be an EntityRegistry, an EntityDescriptor, a sequence of
    descriptors, or a zero-argument callable returning one of those.

    Raises:
        EntityDefinitionError: If the target cannot be imported or holds no entities
    """
    module_name, sep, attribute = target.partition(":")
    if not sep or not module_name or not attribute:
        raise EntityDefinitionError(
            f"Invalid entities target '{target}', expected 'module:attribute'"
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as err:
        raise EntityDefinitionError(f"Cannot import module '{module_name}': {err}") from err

    try:
        value = getattr(module, attribute)
    except AttributeError as err:
        raise EntityDefinitionError(
            f"Module '{module_name}' has no attribute '{attribute}'"
        ) from err

    if callable(value) and not isinstance(value, (EntityRegistry, EntityDescriptor)):
        value = value()

    return EntityRegistry(_coerce_entities(value, target))
