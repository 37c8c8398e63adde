from dataclasses import dataclass, field
from itertools import chain

from graphql import FieldNode, GraphQLCompositeType, GraphQLField, GraphQLObjectType


@dataclass
class MergedField:
    # Field nodes that share the same response name and concrete object type
    # are guaranteed to have the same field name and arguments. The other
    # nodes are kept to merge their selection sets.
    response_key: str
    object_type: GraphQLObjectType
    field_def: GraphQLField
    fields: list[FieldNode] = field(default_factory=list)

    @property
    def field_name(self) -> str:
        return self.fields[0].name.value

    def __str__(self) -> str:
        return f'{self.object_type.name}.{self.response_key}'


@dataclass
class Scope:
    parent_type: GraphQLCompositeType
    possible_types: list[GraphQLObjectType]


ResponseKey = str
TypeName = str

MergedFieldMap = dict[ResponseKey, dict[TypeName, MergedField]]


def to_list(merged_fields: MergedFieldMap) -> list[MergedField]:
    return list(chain.from_iterable(by_type.values() for by_type in merged_fields.values()))
