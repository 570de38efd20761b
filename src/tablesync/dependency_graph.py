"""
Entity Dependency Graph

Directed graph of foreign-key references between entities, built with
NetworkX. Used to order entities so referenced tables come before the tables
that reference them, and to report cycles or references to tables outside
the entity set.

Edge direction: ``Course -> Student`` means Student references Course, so
Course must exist first.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import networkx as nx

from .exceptions import CircularDependencyError, EntityDefinitionError, MissingDependencyError
from .models import EntityDescriptor


@dataclass
class ForeignKeyEdge:
    """A foreign key from one entity to another"""

    from_entity: str  # Referencing entity
    from_column: str
    to_entity: str  # Referenced entity
    to_column: str


class EntityDependencyGraph:
    """Foreign-key dependency graph over a set of entities"""

    def __init__(self, entities: Iterable[EntityDescriptor] = ()) -> None:
        self.graph: nx.DiGraph = nx.DiGraph()
        self.entities: dict[str, EntityDescriptor] = {}
        self._position: dict[str, int] = {}
        self.dangling: list[ForeignKeyEdge] = []
        for entity in entities:
            self.add_entity(entity)

    def add_entity(self, entity: EntityDescriptor) -> None:
        """Add an entity node"""
        if entity.name in self.entities:
            raise EntityDefinitionError(f"Entity {entity.name} already exists in graph")
        self._position[entity.name] = len(self.entities)
        self.entities[entity.name] = entity
        self.graph.add_node(entity.name)
        self._link()

    def _link(self) -> None:
        self.dangling = []
        for entity in self.entities.values():
            for field in entity.foreign_keys:
                assert field.foreign_key is not None
                edge = ForeignKeyEdge(
                    from_entity=entity.name,
                    from_column=field.name,
                    to_entity=field.foreign_key.reference_table,
                    to_column=field.foreign_key.reference_column,
                )
                if edge.to_entity == entity.name:
                    continue  # self-reference never affects ordering
                if edge.to_entity not in self.entities:
                    self.dangling.append(edge)
                    continue
                self.graph.add_edge(edge.to_entity, edge.from_entity)

    def get_dependencies(self, name: str) -> list[str]:
        """Entities that ``name`` references"""
        if name not in self.graph:
            return []
        return sorted(self.graph.predecessors(name), key=self._sort_key)

    def get_dependents(self, name: str) -> list[str]:
        """Entities that reference ``name``"""
        if name not in self.graph:
            return []
        return sorted(self.graph.successors(name), key=self._sort_key)

    def detect_cycles(self) -> list[list[str]]:
        """Return every simple cycle as a list of entity names"""
        return [list(cycle) for cycle in nx.simple_cycles(self.graph)]

    def _sort_key(self, name: str) -> int:
        return self._position.get(name, len(self._position))

    def topological_order(self) -> list[EntityDescriptor]:
        """Entities with referenced tables first

        Entities with no dependency between them keep their input order.

        Raises:
            CircularDependencyError: If the foreign keys form a cycle
        """
        cycles = self.detect_cycles()
        if cycles:
            raise CircularDependencyError(cycles)
        names = nx.lexicographical_topological_sort(self.graph, key=self._sort_key)
        return [self.entities[name] for name in names]

    def validate_dependencies(self, strict: bool = False) -> list[str]:
        """Report references to entities outside the graph

        Args:
            strict: Raise on the first dangling reference instead of warning

        Returns:
            Warning messages (empty if every reference resolves)

        Raises:
            MissingDependencyError: In strict mode, for a dangling reference
        """
        warnings: list[str] = []
        for edge in self.dangling:
            if strict:
                raise MissingDependencyError(edge.from_entity, edge.to_entity)
            warnings.append(
                f"{edge.from_entity}.{edge.from_column} references "
                f"{edge.to_entity}.{edge.to_column}, which is not part of this entity set"
            )
        return warnings


def order_by_dependencies(entities: Sequence[EntityDescriptor]) -> list[EntityDescriptor]:
    """Sort entities so referenced tables come first"""
    return EntityDependencyGraph(entities).topological_order()
