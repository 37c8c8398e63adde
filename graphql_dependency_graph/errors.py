from typing import TypeVar

from graphql import GraphQLError

TError = TypeVar('TError', bound='QueryAnalysisError')


class QueryAnalysisError(GraphQLError):
    """Base class for errors that abort a dependency analysis."""

    @classmethod
    def from_graphql_error(cls: type[TError], error: GraphQLError) -> TError:
        return cls(
            error.message,
            error.nodes,
            error.source,
            error.positions,
            error.path,
            error.original_error,
            error.extensions,
        )


class ValidationError(QueryAnalysisError):
    """The document does not validate against the schema.

    Carries the first error reported by the validator verbatim.
    """


class StructuralError(QueryAnalysisError):
    """The document cannot be analyzed as a single operation.

    Raised for a missing or ambiguous operation, an undefined fragment and a
    type condition that does not name a composite type.
    """


class VariableCoercionError(QueryAnalysisError):
    """Raw variable values could not be coerced (only in strict mode)."""


class InvariantViolation(Exception):
    pass
