import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn

from botapigen.codegen.codegen import Codegen
from botapigen.codegen.generator import Generator
from botapigen.codegen.schema_loader import SpecLoader
from botapigen.config import get_config
from botapigen.exceptions import BotAPIGenError

console = Console()
app = typer.Typer(
    name='botapigen',
    help='Generate typed Python bindings from bot API specifications',
    no_args_is_help=True,
)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(message)s',
        handlers=[RichHandler(console=console, show_path=False)],
    )


@app.command()
def generate(
    config: Annotated[
        str | None,
        typer.Option('--config', '-c', help='Path to configuration file (YAML)'),
    ] = None,
    verbose: Annotated[
        bool, typer.Option('--verbose', '-v', help='Show debug logging')
    ] = False,
) -> None:
    """Generate Python bindings from configuration.

    If no config file is specified, botapigen.yaml / botapigen.yml in the
    current directory or [tool.botapigen] in pyproject.toml is used.

    Examples:
        botapigen generate
        botapigen generate --config my-config.yaml
    """
    _setup_logging(verbose)

    try:
        codegen_config = get_config(config)

        for document_config in codegen_config.documents:
            with Progress(
                SpinnerColumn(),
                TextColumn('[progress.description]{task.description}'),
                console=console,
            ) as progress:
                task = progress.add_task(
                    f'Generating code for {document_config.source} in {document_config.output}...',
                    total=None,
                )

                codegen = Codegen(
                    document_config, write_methods=codegen_config.generate_methods
                )
                codegen.generate()

                progress.update(
                    task,
                    description=f'Code generation completed for {document_config.source}!',
                )

            console.print('[dim]Generated files:[/dim]')
            console.print(f'  - {document_config.output}/{document_config.types_file}')
            if codegen_config.generate_methods:
                console.print(
                    f'  - {document_config.output}/{document_config.methods_file}'
                )

        console.print('[green]Successfully generated code[/green]')

    except BotAPIGenError as e:
        console.print(f'[red]Error:[/red] {e}')
        raise typer.Exit(1)


@app.command()
def validate(
    source: Annotated[str, typer.Argument(help='Path or URL to the specification')],
    verbose: Annotated[
        bool, typer.Option('--verbose', '-v', help='Show debug logging')
    ] = False,
) -> None:
    """Check that a specification parses and generates without errors."""
    _setup_logging(verbose)

    try:
        spec = SpecLoader().load(source)
        generator = Generator(spec)
        generator.generate()
    except BotAPIGenError as e:
        console.print(f'[red]Invalid:[/red] {e}')
        raise typer.Exit(1)

    label = f' ({spec.version})' if spec.version else ''
    console.print(f'[green]Valid specification{label}[/green]')
    console.print(
        f'  {len(spec.types)} types, {len(spec.methods)} methods, '
        f'{len(generator.multitypes)} synthesized unions'
    )


@app.command()
def version() -> None:
    """Show the version of botapigen."""
    from botapigen._version import version

    console.print(f'botapigen version: {version}')


if __name__ == '__main__':
    app()
