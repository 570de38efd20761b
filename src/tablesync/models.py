"""
Entity Models

Static descriptions of the model types that map 1:1 onto tables. Descriptors
are built explicitly (directly or through ``EntityBuilder``) instead of being
discovered by inspecting classes at run time.
"""

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

from .exceptions import EntityDefinitionError, UnsupportedFieldType

KEY_COLUMN_NAME = "Id"


class SemanticType(StrEnum):
    """Semantic field types that have a column type"""

    INT = "Int"
    STRING = "String"
    DATETIME = "DateTime"
    BOOL = "Bool"


_PYTHON_TYPES: dict[type, SemanticType] = {
    int: SemanticType.INT,
    str: SemanticType.STRING,
    datetime: SemanticType.DATETIME,
    bool: SemanticType.BOOL,
}


def coerce_semantic_type(value: Any, field_name: str | None = None) -> SemanticType:
    """Resolve a SemanticType, its value or a Python type to a SemanticType

    Raises:
        UnsupportedFieldType: If the value names no supported type
    """
    if isinstance(value, SemanticType):
        return value
    if isinstance(value, str):
        try:
            return SemanticType(value)
        except ValueError:
            raise UnsupportedFieldType(value, field_name) from None
    if isinstance(value, type) and value in _PYTHON_TYPES:
        return _PYTHON_TYPES[value]
    raise UnsupportedFieldType(value, field_name)


class ForeignKeyRef(BaseModel):
    """Target of a foreign key"""

    model_config = ConfigDict(frozen=True)

    reference_table: str
    reference_column: str


class FieldDescriptor(BaseModel):
    """Column definition with its structural annotations"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., min_length=1)
    semantic_type: SemanticType = Field(..., alias="type")
    primary_key: bool = False
    unique: bool = False
    nullable: bool = False  # NOT NULL unless explicitly marked nullable
    foreign_key: ForeignKeyRef | None = None
    check: str | None = None  # CHECK expression, e.g. "Age >= 0"

    @field_validator("semantic_type", mode="before")
    @classmethod
    def _resolve_semantic_type(cls, value: Any, info: ValidationInfo) -> SemanticType:
        return coerce_semantic_type(value, info.data.get("name"))

    @property
    def is_constrained(self) -> bool:
        """Whether the column backs an index (primary key or unique)"""
        return self.primary_key or self.unique


class EntityDescriptor(BaseModel):
    """One model type and the table it maps to"""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    fields: tuple[FieldDescriptor, ...] = ()

    @model_validator(mode="after")
    def _check_field_names(self) -> "EntityDescriptor":
        if not self.fields:
            raise EntityDefinitionError(f"Entity '{self.name}' has no fields")
        seen: set[str] = set()
        for field in self.fields:
            if field.name in seen:
                raise EntityDefinitionError(
                    f"Entity '{self.name}' declares field '{field.name}' more than once"
                )
            seen.add(field.name)
        return self

    def field(self, name: str) -> FieldDescriptor | None:
        """Get a field by name"""
        for field in self.fields:
            if field.name == name:
                return field
        return None

    @property
    def field_names(self) -> list[str]:
        return [field.name for field in self.fields]

    @property
    def key_field(self) -> FieldDescriptor | None:
        """The column a primary key constraint is (re)applied to

        The first field marked primary key; entities without one fall back
        to the field named ``Id``.
        """
        for field in self.fields:
            if field.primary_key:
                return field
        return self.field(KEY_COLUMN_NAME)

    @property
    def foreign_keys(self) -> list[FieldDescriptor]:
        """Fields that declare a foreign key, in declaration order"""
        return [field for field in self.fields if field.foreign_key is not None]

    @property
    def referenced_tables(self) -> list[str]:
        tables: list[str] = []
        for field in self.foreign_keys:
            assert field.foreign_key is not None
            if field.foreign_key.reference_table not in tables:
                tables.append(field.foreign_key.reference_table)
        return tables


class EntityBuilder:
    """Fluent construction of an EntityDescriptor

    Example:
        student = (
            EntityBuilder("Student")
            .field("Id", int, primary_key=True)
            .field("CourseId", int, references=("Course", "Id"))
            .build()
        )
    """

    def __init__(self, name: str):
        self.name = name
        self._fields: list[FieldDescriptor] = []

    def field(
        self,
        name: str,
        semantic_type: Any,
        *,
        primary_key: bool = False,
        unique: bool = False,
        nullable: bool = False,
        references: tuple[str, str] | None = None,
        check: str | None = None,
    ) -> "EntityBuilder":
        foreign_key = None
        if references is not None:
            reference_table, reference_column = references
            foreign_key = ForeignKeyRef(
                reference_table=reference_table, reference_column=reference_column
            )
        self._fields.append(
            FieldDescriptor(
                name=name,
                semantic_type=semantic_type,
                primary_key=primary_key,
                unique=unique,
                nullable=nullable,
                foreign_key=foreign_key,
                check=check,
            )
        )
        return self

    def build(self) -> EntityDescriptor:
        return EntityDescriptor(name=self.name, fields=tuple(self._fields))
