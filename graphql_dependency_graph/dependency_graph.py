from dataclasses import dataclass, field
from typing import Callable, Optional

from graphql import FieldNode, GraphQLField, GraphQLObjectType

from graphql_dependency_graph.field_set import MergedField
from graphql_dependency_graph.utilities.graphql_ import unwrap_type

ROOT_VERTEX_NAME = 'ROOT'


@dataclass(eq=False)
class FieldVertex:
    id: int
    # None only for the sentinel root vertex
    merged_field: Optional[MergedField] = None
    depends_on: Optional['FieldVertex'] = field(default=None, repr=False)
    depend_on_me: list['FieldVertex'] = field(default_factory=list, repr=False)

    @property
    def is_root(self) -> bool:
        return self.merged_field is None

    @property
    def fields(self) -> list[FieldNode]:
        return self.merged_field.fields if self.merged_field is not None else []

    @property
    def object_type(self) -> Optional[GraphQLObjectType]:
        return self.merged_field.object_type if self.merged_field is not None else None

    @property
    def field_def(self) -> Optional[GraphQLField]:
        return self.merged_field.field_def if self.merged_field is not None else None

    @property
    def response_key(self) -> Optional[str]:
        return self.merged_field.response_key if self.merged_field is not None else None

    def __str__(self) -> str:
        if self.merged_field is None:
            return ROOT_VERTEX_NAME

        merged_field = self.merged_field
        return f'{merged_field}: {merged_field.field_def.type}'


@dataclass(frozen=True)
class DependencyEdge:
    # `from_vertex` depends on `to_vertex`
    from_vertex: FieldVertex
    to_vertex: FieldVertex
    conditional: bool

    def __str__(self) -> str:
        return f'{self.from_vertex} -> {self.to_vertex}'


def is_conditional_edge(parent: FieldVertex, child: FieldVertex) -> bool:
    """Whether ``child`` only depends on ``parent`` for some runtime types.

    That is the case when the parent field returns an interface or a union,
    so the child's object type is one of several possible implementations.
    Edges to the root vertex are never conditional.
    """
    if parent.field_def is None:
        return False

    return unwrap_type(parent.field_def.type) is not child.object_type


def traverse_field_vertices(root: FieldVertex, visitor: Callable[[FieldVertex], None]) -> None:
    # Children are pushed left to right, so later children are visited first.
    stack = [root]
    while stack:
        vertex = stack.pop()
        visitor(vertex)
        stack.extend(vertex.depend_on_me)


def print_dependency_graph(
    root: FieldVertex,
) -> tuple[list[FieldVertex], list[DependencyEdge]]:
    vertices: list[FieldVertex] = []
    edges: list[DependencyEdge] = []

    def visit_vertex(vertex: FieldVertex) -> None:
        vertices.append(vertex)
        for dependent in vertex.depend_on_me:
            edges.append(
                DependencyEdge(
                    from_vertex=dependent,
                    to_vertex=vertex,
                    conditional=is_conditional_edge(vertex, dependent),
                )
            )

    traverse_field_vertices(root, visit_vertex)

    return vertices, edges


def vertex_path(vertex: FieldVertex) -> str:
    """Describe the chain of dependencies from ``vertex`` up to the root.

    ``A1.b`` selected under ``Query.a`` prints as ``A1.b -> Query.a -> ROOT``.
    """
    names = []
    current: Optional[FieldVertex] = vertex
    while current is not None:
        names.append(ROOT_VERTEX_NAME if current.is_root else str(current.merged_field))
        current = current.depends_on

    return ' -> '.join(names)
