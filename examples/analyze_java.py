#!/usr/bin/env python3
"""
Example script demonstrating how to use CodeRDF to model Java code.
"""
import os
import sys
import logging
from pathlib import Path
from rich.console import Console
from rich.table import Table

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from coderdf import CodeModel
from coderdf.parsers import JavaParser


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)
console = Console()


def main():
    """Main function for the example."""
    # Check if path argument is provided
    if len(sys.argv) < 2:
        console.print("[red]Error: Please provide a path to a Java project to analyze.[/red]")
        console.print("Usage: python analyze_java.py <path_to_java_project>")
        return 1

    java_project_path = sys.argv[1]

    # Create a new code model, known types come from the project itself
    model = CodeModel()
    if os.path.isdir(java_project_path):
        model.preload_symbols(java_project_path)

    parser = JavaParser(symbol_table=model.symbol_table)
    handler = model.create_handler()

    console.print(f"[bold cyan]Parsing Java code from {java_project_path}...[/bold cyan]")

    try:
        if os.path.isdir(java_project_path):
            parser.parse_directory(java_project_path, handler)
        else:
            parser.parse_file(java_project_path, handler)
    except Exception as e:
        console.print(f"[red]Error parsing Java code: {e}[/red]")
        return 1

    for line in model.statistics.report():
        console.print(line)

    # Print some example queries
    console.print("\n[bold cyan]Example Queries:[/bold cyan]")
    queries = model.query_model()

    class_table = Table(title="Classes")
    class_table.add_column("Class", style="cyan")
    class_table.add_column("Visibility", style="green")
    class_table.add_column("Methods", style="magenta")
    class_table.add_column("Attributes", style="magenta")

    for jclass in queries.get_all_classes():
        class_table.add_row(
            jclass.qualified_name,
            jclass.visibility.value if jclass.visibility else "",
            str(len(queries.get_methods_into(jclass.id))),
            str(len(queries.get_attributes_into(jclass.id))),
        )

    console.print(class_table)

    for library in queries.get_libraries():
        console.print(f"Library [green]{library.name}[/green] parsed from {library.location} at {library.date}")

    model.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
