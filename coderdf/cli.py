"""
Command-line interface for CodeRDF.
"""
import os
import sys
import logging
import click
from rich.console import Console
from rich.table import Table
from rich.logging import RichHandler
from rich.markup import escape

from coderdf import CodeModel, __version__
from coderdf.core import CodeRDFError, SymbolTable
from coderdf.graph.storage import RDFLibTripleStore
from coderdf.ontology import java_ontology
from coderdf.parsers import JavaParser


# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True)]
)
logger = logging.getLogger("coderdf")
console = Console()


def _storage_config(db_type, db_path, db_in_memory):
    storage_config = {}
    if db_type == "kuzudb":
        if db_path:
            storage_config["db_path"] = db_path
        if db_in_memory:
            storage_config["in_memory"] = True
    return storage_config


@click.group()
@click.version_option(__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def cli(verbose):
    """CodeRDF - A schema-validated triple model of Java code."""
    if verbose:
        logger.setLevel(logging.DEBUG)


@cli.command()
@click.argument('source_path', type=click.Path(exists=True))
@click.option('--library', '-n', default=None, help='Library name (default: source directory or file name)')
@click.option('--classpath', '-cp', multiple=True, type=click.Path(exists=True),
              help='Source tree, class tree or jar whose types are known (repeatable)')
@click.option('--db-type', default='memory', type=click.Choice(['memory', 'rdflib', 'kuzudb']),
              help='Triple store type')
@click.option('--db-path', default=None, help='Database path (for KuzuDB on-disk mode)')
@click.option('--db-in-memory', is_flag=True, help='Use in-memory mode (for KuzuDB)')
@click.option('--export', 'export_file', type=click.Path(), default=None, help='Export the model to an RDF file')
@click.option('--format', 'rdf_format', default='turtle', help='RDF format of the export (turtle, xml, nt)')
def parse(source_path, library, classpath, db_type, db_path, db_in_memory, export_file, rdf_format):
    """Parse Java sources and build the code model."""
    source_path = os.path.abspath(source_path)
    model = CodeModel(storage_type=db_type, storage_config=_storage_config(db_type, db_path, db_in_memory))

    try:
        with console.status("Preloading symbols...", spinner="dots"):
            preload_paths = list(classpath)
            if os.path.isdir(source_path):
                preload_paths.append(source_path)
            for path in preload_paths:
                count = model.preload_symbols(path)
                logger.debug(f"Preloaded {count} symbols from {path}")

        handler = model.create_handler(with_statistics=True)
        parser = JavaParser(symbol_table=model.symbol_table)
        with console.status(f"Parsing Java code from {source_path}...", spinner="dots"):
            if os.path.isdir(source_path):
                parser.parse_directory(source_path, handler, library_name=library)
            else:
                parser.parse_file(source_path, handler, library_name=library)
    except CodeRDFError as e:
        console.print(f"[red]Error parsing {source_path}: {e}[/red]")
        model.close()
        sys.exit(1)

    # Print stats
    stats_table = Table(title="Parse Statistics")
    stats_table.add_column("Counter", style="cyan")
    stats_table.add_column("Count", style="green")
    for name, value in model.statistics.counters().items():
        stats_table.add_row(name.replace("_", " "), str(value))
    console.print(stats_table)

    unresolved = model.statistics.unresolved_types
    if unresolved:
        console.print(f"[yellow]Unresolved types: {', '.join(unresolved)}[/yellow]")

    model_stats = model.get_statistics()
    predicate_table = Table(title="Triple Statistics")
    predicate_table.add_column("Predicate", style="cyan")
    predicate_table.add_column("Count", style="green")
    for predicate, count in sorted(model_stats["predicate_counts"].items()):
        predicate_table.add_row(predicate, str(count))
    console.print(predicate_table)

    if export_file:
        with console.status(f"Exporting to {export_file}...", spinner="dots"):
            exported = model.export(export_file, rdf_format)
        console.print(f"[green]Exported {exported} triples to {export_file}.[/green]")

    console.print(f"[green]Parsing complete. {model_stats['total_triples']} triples in "
                  f"{model.statistics.parsing_time:.2f}s.[/green]")
    model.close()


@cli.command()
@click.argument('model_file', type=click.Path(exists=True))
@click.option('--subject', '-s', default=None, help='Subject to match (default: any)')
@click.option('--predicate', '-p', default=None, help='Predicate to match (default: any)')
@click.option('--object', '-o', 'obj', default=None, help='Object to match (default: any)')
@click.option('--format', 'rdf_format', default='turtle', help='RDF format of the model file')
@click.option('--limit', default=100, type=int, help='Maximum number of rows to show')
def query(model_file, subject, predicate, obj, rdf_format, limit):
    """Search the triples of an exported model."""
    try:
        store = RDFLibTripleStore(source=model_file, source_format=rdf_format)
    except Exception as e:
        console.print(f"[red]Error loading {model_file}: {e}[/red]")
        sys.exit(1)

    matches = list(store.search_triples(subject, predicate, obj))
    table = Table(title=f"Matches ({len(matches)})")
    table.add_column("Subject", style="cyan")
    table.add_column("Predicate", style="magenta")
    table.add_column("Object", style="green")
    for triple in matches[:limit]:
        value = f'"{triple.object}"' if triple.literal else triple.object
        table.add_row(escape(triple.subject), escape(triple.predicate), escape(value))
    console.print(table)
    if len(matches) > limit:
        console.print(f"[yellow]{len(matches) - limit} more matches not shown.[/yellow]")


@cli.command()
def ontology():
    """Print the relations of the Java ontology."""
    java = java_ontology()
    table = Table(title=f"Java Ontology ({java.get_relations_count()} relations)")
    table.add_column("Relation", style="cyan")
    for line in java.describe():
        table.add_row(escape(line))
    console.print(table)


@cli.command()
@click.argument('paths', nargs=-1, required=True, type=click.Path(exists=True))
def symbols(paths):
    """Preload a symbol table and list its names."""
    symbol_table = SymbolTable()
    for path in paths:
        try:
            symbol_table.preload(path)
        except ValueError as e:
            console.print(f"[red]Error: {e}[/red]")
            sys.exit(1)

    table = Table(title=f"Symbols ({len(symbol_table)})")
    table.add_column("Name", style="cyan")
    for name in symbol_table.names():
        table.add_row(name)
    console.print(table)


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
