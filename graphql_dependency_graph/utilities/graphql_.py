from typing import Optional

from graphql import (
    FieldNode,
    GraphQLCompositeType,
    GraphQLField,
    GraphQLInterfaceType,
    GraphQLNamedType,
    GraphQLObjectType,
    GraphQLSchema,
    GraphQLType,
    GraphQLUnionType,
    SchemaMetaFieldDef,
    TypeMetaFieldDef,
    get_named_type,
)

from graphql_dependency_graph.errors import InvariantViolation


# Not exactly the same as the executor's definition of getFieldDef, in this
# statically evaluated environment we do not always have an Object type,
# and need to handle Interface and Union types.
def get_field_def(
    schema: GraphQLSchema, parent_type: GraphQLCompositeType, field_name: str
) -> Optional[GraphQLField]:
    if field_name == '__schema' and schema.query_type is parent_type:
        return SchemaMetaFieldDef
    if field_name == '__type' and schema.query_type is parent_type:
        return TypeMetaFieldDef
    if isinstance(parent_type, (GraphQLObjectType, GraphQLInterfaceType)):
        return parent_type.fields.get(field_name)

    return None


def get_response_name(node: FieldNode) -> str:
    return node.alias.value if node.alias is not None else node.name.value


def unwrap_type(type_: GraphQLType) -> GraphQLNamedType:
    # [Animal!]! -> Animal
    return get_named_type(type_)


def get_possible_types(
    schema: GraphQLSchema, type_: GraphQLNamedType
) -> list[GraphQLObjectType]:
    if isinstance(type_, GraphQLObjectType):
        return [type_]
    if isinstance(type_, (GraphQLInterfaceType, GraphQLUnionType)):
        return list(schema.get_possible_types(type_))

    raise InvariantViolation(f'programming error: {type_} has no possible object types')


def narrow_possible_types(
    schema: GraphQLSchema,
    current: list[GraphQLObjectType],
    condition_type: GraphQLNamedType,
) -> list[GraphQLObjectType]:
    """Restrict ``current`` to the object types that satisfy ``condition_type``.

    An empty ``current`` list means "unconstrained", in which case every
    possible type of the condition is returned. Types are compared by
    identity and the order of ``current`` is kept.
    """
    resolved = get_possible_types(schema, condition_type)
    if not current:
        return resolved

    return [type_ for type_ in current if any(type_ is other for other in resolved)]
