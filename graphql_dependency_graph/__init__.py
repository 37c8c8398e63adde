from typing import Any, Optional

from graphql import DocumentNode, GraphQLSchema

from graphql_dependency_graph.analyze_query import AnalysisOptions, analyze_query
from graphql_dependency_graph.dependency_graph import (
    DependencyEdge,
    FieldVertex,
    is_conditional_edge,
    print_dependency_graph,
    traverse_field_vertices,
    vertex_path,
)
from graphql_dependency_graph.errors import (
    InvariantViolation,
    QueryAnalysisError,
    StructuralError,
    ValidationError,
    VariableCoercionError,
)

__all__ = [
    'AnalysisOptions',
    'DependencyEdge',
    'FieldVertex',
    'InvariantViolation',
    'QueryAnalysisError',
    'QueryAnalyzer',
    'StructuralError',
    'ValidationError',
    'VariableCoercionError',
    'analyze_query',
    'is_conditional_edge',
    'print_dependency_graph',
    'traverse_field_vertices',
    'vertex_path',
]


class QueryAnalyzer:
    # Binds a schema and a set of options so that many documents can be
    # analyzed the same way. Holds no per-document state, every call to
    # `analyze` builds a fresh graph.

    schema: GraphQLSchema
    options: AnalysisOptions

    def __init__(self, schema: GraphQLSchema, options: Optional[AnalysisOptions] = None):
        self.schema = schema
        self.options = options if options is not None else AnalysisOptions()

    def analyze(
        self,
        document: DocumentNode,
        raw_variable_values: Optional[dict[str, Any]] = None,
    ) -> FieldVertex:
        return analyze_query(
            document,
            self.schema,
            raw_variable_values,
            validate_query=self.options.validate_query,
            strict_variables=self.options.strict_variables,
        )
