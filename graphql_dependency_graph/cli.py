"""Command-line interface for graphql-dependency-graph."""

import json
import logging
from pathlib import Path
from typing import Any, Optional

import click
from graphql import GraphQLError, build_schema, parse

from graphql_dependency_graph import AnalysisOptions, QueryAnalyzer, print_dependency_graph


def load_variables(value: Optional[str]) -> Optional[dict[str, Any]]:
    """Parse --variables, either inline JSON or @path/to/file.json."""
    if value is None:
        return None
    if value.startswith('@'):
        try:
            value = Path(value[1:]).read_text()
        except OSError as e:
            raise click.BadParameter(
                f'Cannot read {value[1:]}: {e.strerror}', param_hint='--variables'
            )
    try:
        variables = json.loads(value)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f'Invalid JSON: {e}', param_hint='--variables')
    if not isinstance(variables, dict):
        raise click.BadParameter('Expected a JSON object.', param_hint='--variables')
    return variables


@click.command()
@click.version_option(package_name='graphql-dependency-graph')
@click.option(
    '--schema',
    '-s',
    'schema_path',
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to the GraphQL schema (SDL) file.',
)
@click.option(
    '--query',
    '-q',
    'query_path',
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Path to the file holding the operation to analyze.',
)
@click.option(
    '--variables',
    default=None,
    help='Variable values as a JSON object, or @file.json.',
)
@click.option(
    '--no-validate',
    is_flag=True,
    help='Skip validating the query against the schema.',
)
@click.option(
    '--strict-variables',
    is_flag=True,
    help='Fail when variable values cannot be coerced.',
)
@click.option(
    '--verbose',
    '-v',
    is_flag=True,
    help='Enable verbose output.',
)
def main(schema_path, query_path, variables, no_validate, strict_variables, verbose):
    """Print the field dependency graph of a GraphQL query.

    Each line is one edge: the field on the left depends on the result of
    the field on the right.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    raw_variable_values = load_variables(variables)
    options = AnalysisOptions(validate_query=not no_validate, strict_variables=strict_variables)

    try:
        analyzer = QueryAnalyzer(build_schema(schema_path.read_text()), options)
        root = analyzer.analyze(parse(query_path.read_text()), raw_variable_values)
    except GraphQLError as e:
        click.echo(f'Error: {e.message}', err=True)
        raise SystemExit(1)

    vertices, edges = print_dependency_graph(root)
    for edge in edges:
        click.echo(f'{edge} conditional: {str(edge.conditional).lower()}')

    if verbose:
        click.echo(f'{len(vertices)} vertices, {len(edges)} edges', err=True)


if __name__ == '__main__':
    main()
