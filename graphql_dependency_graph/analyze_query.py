import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union, cast

from graphql import (
    DocumentNode,
    FieldNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    GraphQLCompositeType,
    GraphQLDirective,
    GraphQLError,
    GraphQLField,
    GraphQLIncludeDirective,
    GraphQLObjectType,
    GraphQLSchema,
    GraphQLSkipDirective,
    InlineFragmentNode,
    OperationDefinitionNode,
    OperationType,
    SelectionSetNode,
    is_composite_type,
    type_from_ast,
    validate,
)
from graphql.execution.values import get_directive_values, get_variable_values

from graphql_dependency_graph.dependency_graph import FieldVertex, vertex_path
from graphql_dependency_graph.errors import (
    InvariantViolation,
    StructuralError,
    ValidationError,
    VariableCoercionError,
)
from graphql_dependency_graph.field_set import MergedField, MergedFieldMap, Scope, to_list
from graphql_dependency_graph.utilities.graphql_ import (
    get_field_def,
    get_response_name,
    narrow_possible_types,
    unwrap_type,
)

logger = logging.getLogger(__name__)

FragmentName = str

FragmentMap = Mapping[FragmentName, FragmentDefinitionNode]


@dataclass
class AnalysisOptions:
    validate_query: bool = True
    # Raise instead of falling back to empty variable values when the raw
    # variables cannot be coerced.
    strict_variables: bool = False


@dataclass
class OperationContext:
    schema: GraphQLSchema
    operation: OperationDefinitionNode
    fragments: FragmentMap


def analyze_query(
    document: DocumentNode,
    schema: GraphQLSchema,
    raw_variable_values: Optional[dict[str, Any]] = None,
    validate_query: bool = True,
    strict_variables: bool = False,
) -> FieldVertex:
    """Build the field dependency tree of the single operation in ``document``.

    Every selected field becomes a vertex that depends on the vertex of the
    field it was selected on. Top-level fields depend on a sentinel root
    vertex, which is returned. Use ``traverse_field_vertices`` or
    ``print_dependency_graph`` to walk the result.
    """
    if validate_query:
        errors = validate(schema, document)
        if errors:
            raise ValidationError.from_graphql_error(errors[0])

    operation_context = build_operation_context(schema, document)
    variable_values = coerce_variable_values(
        operation_context, raw_variable_values, strict_variables
    )
    context = AnalysisContext(operation_context, variable_values)

    root_type = context.get_operation_root_type()
    logger.debug(
        'Analyzing %s operation on "%s" (fragments: %s)',
        context.operation.operation.value,
        root_type.name,
        list(context.fragments),
    )

    roots = to_list(
        collect_fields(
            context,
            Scope(parent_type=root_type, possible_types=[root_type]),
            context.operation.selection_set,
        )
    )
    logger.debug('Collected root fields: %s', [str(merged_field) for merged_field in roots])

    root_vertex = FieldVertex(id=context.next_vertex_id())
    depth_first_visit(context, roots, root_vertex)

    return root_vertex


def build_operation_context(schema: GraphQLSchema, document: DocumentNode) -> OperationContext:
    operation: Optional[OperationDefinitionNode] = None
    fragments: dict[FragmentName, FragmentDefinitionNode] = {}

    for definition in document.definitions:
        if isinstance(definition, OperationDefinitionNode):
            if operation is not None:
                raise StructuralError('More than one operation found.', [operation, definition])
            operation = definition
        elif isinstance(definition, FragmentDefinitionNode):
            fragments[definition.name.value] = definition

    if operation is None:
        raise StructuralError('No operation found.', document)

    return OperationContext(schema, operation, MappingProxyType(fragments))


def coerce_variable_values(
    operation_context: OperationContext,
    raw_variable_values: Optional[dict[str, Any]],
    strict: bool = False,
) -> dict[str, Any]:
    coerced = get_variable_values(
        operation_context.schema,
        operation_context.operation.variable_definitions or [],
        raw_variable_values or {},
    )

    if isinstance(coerced, list):
        if strict:
            raise VariableCoercionError.from_graphql_error(coerced[0])
        # Directives are then evaluated as if no variables had been provided.
        logger.warning('Ignoring variable values: %s', coerced[0].message)
        return {}

    return coerced


def depth_first_visit(
    context: 'AnalysisContext',
    roots: list[MergedField],
    root_vertex: FieldVertex,
) -> None:
    # The stack is last-in-first-out: the most recently discovered field is
    # fully expanded before its pending siblings. Vertex ids depend on it.
    stack = [(merged_field, root_vertex) for merged_field in roots]

    while stack:
        merged_field, parent_vertex = stack.pop()

        vertex = FieldVertex(
            id=context.next_vertex_id(),
            merged_field=merged_field,
            depends_on=parent_vertex,
        )
        parent_vertex.depend_on_me.append(vertex)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug('Vertex %d: %s', vertex.id, vertex_path(vertex))

        for child in collect_subfields(context, merged_field):
            stack.append((child, vertex))


def collect_fields(
    context: 'AnalysisContext',
    scope: Scope,
    selection_set: SelectionSetNode,
    fields: Optional[MergedFieldMap] = None,
    visited_fragment_names: Optional[set[FragmentName]] = None,
) -> MergedFieldMap:
    if fields is None:
        fields = {}
    # Only guards against fragment cycles within this call, cyclic fragments
    # are expected to be rejected by validation.
    if visited_fragment_names is None:
        visited_fragment_names = set()

    for selection in selection_set.selections:
        if isinstance(selection, FieldNode):
            collect_field(context, scope, selection, fields)
        elif isinstance(selection, InlineFragmentNode):
            if not context.should_include_node(selection):
                continue

            new_scope = (
                context.new_scope(context.get_fragment_condition(selection), scope)
                if selection.type_condition is not None
                else scope
            )

            collect_fields(
                context, new_scope, selection.selection_set, fields, visited_fragment_names
            )
        elif isinstance(selection, FragmentSpreadNode):
            fragment = context.get_fragment(selection)
            fragment_name = fragment.name.value

            if fragment_name in visited_fragment_names or not context.should_include_node(
                selection
            ):
                continue
            visited_fragment_names.add(fragment_name)

            new_scope = context.new_scope(context.get_fragment_condition(fragment), scope)

            collect_fields(
                context, new_scope, fragment.selection_set, fields, visited_fragment_names
            )
        else:
            raise InvariantViolation(f'programming error: unexpected selection {selection.kind}')

    return fields


def collect_field(
    context: 'AnalysisContext',
    scope: Scope,
    field_node: FieldNode,
    fields: MergedFieldMap,
) -> None:
    if not context.should_include_node(field_node):
        return

    # __typename never gets a vertex.
    if field_node.name.value == '__typename':
        return

    response_key = get_response_name(field_node)
    fields_by_type = fields.setdefault(response_key, {})

    for object_type in scope.possible_types:
        merged_field = fields_by_type.get(object_type.name)
        if merged_field is None:
            fields_by_type[object_type.name] = MergedField(
                response_key=response_key,
                object_type=object_type,
                field_def=context.get_field_def(object_type, field_node),
                fields=[field_node],
            )
        else:
            merged_field.fields.append(field_node)


# Sub-selections of every node of the merged field are collected together, so
# `dog { name } dog { id }` yields both `name` and `id` under a single vertex.
def collect_subfields(context: 'AnalysisContext', merged_field: MergedField) -> list[MergedField]:
    return_type = unwrap_type(merged_field.field_def.type)
    if not is_composite_type(return_type):
        return []

    scope = context.new_scope(cast(GraphQLCompositeType, return_type))
    fields: MergedFieldMap = {}

    for field_node in merged_field.fields:
        if field_node.selection_set is not None:
            collect_fields(context, scope, field_node.selection_set, fields)

    return to_list(fields)


class AnalysisContext:
    schema: GraphQLSchema
    operation: OperationDefinitionNode
    fragments: FragmentMap
    variable_values: dict[str, Any]

    _vertex_count: int

    def __init__(
        self,
        operation_context: OperationContext,
        variable_values: dict[str, Any],
    ):
        self.schema = operation_context.schema
        self.operation = operation_context.operation
        self.fragments = operation_context.fragments
        self.variable_values = variable_values

        self._vertex_count = 0

    def next_vertex_id(self) -> int:
        vertex_id = self._vertex_count
        self._vertex_count += 1
        return vertex_id

    def get_operation_root_type(self) -> GraphQLObjectType:
        root_types = {
            OperationType.QUERY: self.schema.query_type,
            OperationType.MUTATION: self.schema.mutation_type,
            OperationType.SUBSCRIPTION: self.schema.subscription_type,
        }
        root_type = root_types[self.operation.operation]

        if root_type is None:
            raise StructuralError(
                f'Schema is not configured for {self.operation.operation.value} operations.',
                self.operation,
            )

        return root_type

    def get_field_def(self, object_type: GraphQLObjectType, field_node: FieldNode) -> GraphQLField:
        field_def = get_field_def(self.schema, object_type, field_node.name.value)

        if field_def is None:
            raise InvariantViolation(
                f'programming error: cannot query field "{field_node.name.value}"'
                f' on type "{object_type.name}"'
            )

        return field_def

    def get_fragment(self, fragment_spread: FragmentSpreadNode) -> FragmentDefinitionNode:
        fragment_name = fragment_spread.name.value
        fragment = self.fragments.get(fragment_name)

        if fragment is None:
            raise StructuralError(f'Unknown fragment "{fragment_name}".', fragment_spread)

        return fragment

    def get_fragment_condition(
        self, fragment: Union[FragmentDefinitionNode, InlineFragmentNode]
    ) -> GraphQLCompositeType:
        type_condition_node = fragment.type_condition
        type_ = type_from_ast(self.schema, type_condition_node)

        if not is_composite_type(type_):
            raise StructuralError(
                f'Type condition "{type_condition_node.name.value}" is not a composite type.',
                type_condition_node,
            )

        return cast(GraphQLCompositeType, type_)

    def new_scope(
        self,
        type_condition: GraphQLCompositeType,
        enclosing_scope: Optional[Scope] = None,
    ) -> Scope:
        possible_types = narrow_possible_types(
            self.schema,
            enclosing_scope.possible_types if enclosing_scope is not None else [],
            type_condition,
        )

        return Scope(
            parent_type=type_condition,
            possible_types=possible_types,
        )

    def should_include_node(
        self, node: Union[FieldNode, FragmentSpreadNode, InlineFragmentNode]
    ) -> bool:
        skip = self.get_directive_values(GraphQLSkipDirective, node)
        if skip is not None and skip['if'] is True:
            return False

        include = self.get_directive_values(GraphQLIncludeDirective, node)
        if include is not None and include['if'] is False:
            return False

        return True

    def get_directive_values(
        self,
        directive_def: GraphQLDirective,
        node: Union[FieldNode, FragmentSpreadNode, InlineFragmentNode],
    ) -> Optional[dict[str, Any]]:
        try:
            return get_directive_values(directive_def, node, self.variable_values)
        except GraphQLError as error:
            # A required argument bound to a variable that has no value, e.g.
            # one dropped because it could not be coerced.
            raise StructuralError.from_graphql_error(error) from error
