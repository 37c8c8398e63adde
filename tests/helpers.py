from graphql_dependency_graph import print_dependency_graph


def edge_strings(root):
    _, edges = print_dependency_graph(root)
    return [str(edge) for edge in edges]


def edge_strings_with_conditional(root):
    _, edges = print_dependency_graph(root)
    return [f'{edge} conditional: {str(edge.conditional).lower()}' for edge in edges]
