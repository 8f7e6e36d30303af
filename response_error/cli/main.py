import click, importlib, importlib.util, json, sys
from pathlib import Path

from response_error.errors import GenerationError
from response_error.parser.ir import is_classifiable


def load_target(target: str) -> type:
    """Import `pkg.module:Name` or `path/to/file.py:Name`."""
    if ":" not in target:
        raise click.BadParameter(f"Expected 'module:Name', got '{target}'")
    location, attr = target.rsplit(":", 1)

    if location.endswith(".py"):
        path = Path(location)
        if not path.exists():
            raise click.BadParameter(f"File not found: {location}")
        spec = importlib.util.spec_from_file_location(path.stem, path)
        module = importlib.util.module_from_spec(spec)
        sys.modules[path.stem] = module
        spec.loader.exec_module(module)
    else:
        module = importlib.import_module(location)

    obj = module
    for part in attr.split("."):
        obj = getattr(obj, part)
    if not is_classifiable(obj):
        raise click.BadParameter(f"{attr} is not a @response_error sum-type")
    return obj


def _load_or_abort(target: str) -> type:
    try:
        return load_target(target)
    except GenerationError as e:
        click.echo(f"Error: {e}", err=True)
        if e.hint:
            click.echo(f"  hint: {e.hint}", err=True)
        raise click.Abort()


@click.group()
def cli(): ...


@cli.command()
@click.argument("target")
def check(target):
    """Validate the annotations of a sum-type."""
    cls = _load_or_abort(target)
    table = cls.__response_table__
    annotated = {*table.status, *table.reason, *table.type, *table.details, *table.forwards, *table.internals}
    click.echo(f"{table.name}: {len(table.variants)} variants, {len(annotated)} annotated, {len(table.forwards)} forwarded")
    click.echo("OK")


@cli.command()
@click.argument("target")
@click.option("-o", "--out", default=None, help="Write JSON here instead of stdout")
def table(target, out):
    """Dump the metadata table as JSON."""
    cls = _load_or_abort(target)
    data = json.dumps(cls.__response_table__.to_dict(), indent=2)
    if out is None:
        click.echo(data)
        return
    with open(out, "w") as f:
        f.write(data)
    click.echo(f"Wrote {out}")


@cli.command()
@click.argument("target")
def source(target):
    """Print the generated dispatch source."""
    cls = _load_or_abort(target)
    click.echo(cls.__response_source__, nl=False)


if __name__ == "__main__":
    cli()
