"""
Command-Line Interface for zplforge.

Usage:
    zplforge render INPUT    - Render a ZPL label to PNG or PDF
    zplforge check INPUT     - Parse a label and list its instructions
    zplforge encode IMAGE    - Encode an image as ^GF graphic field data
"""

import dataclasses
import re
import sys
from pathlib import Path

import click

from .codec import encode as encode_image
from .codec import to_graphic_field
from .engine import ZplEngine, compile_zpl
from .errors import ImageError, ParseError, ZplError
from .pdf import PdfBackend
from .png import PngBackend
from .units import Resolution, Unit, UnitKind

# --var NAME=VALUE
VARIABLE_PATTERN = re.compile(r"^([^=\s]+)=(.*)$", re.DOTALL)

# --format choices
BACKENDS = {
    "png": PngBackend,
    "pdf": PdfBackend,
}

# Longest field value shown by `check` before it is shortened
MAX_SHOWN_VALUE = 40


def validate_variables(ctx, param, value):
    """Validate --var options.

    Args:
        ctx: Click context
        param: Click parameter
        value: Tuple of NAME=VALUE strings

    Returns:
        Dict of variable names to values

    Raises:
        click.BadParameter: If an entry is not NAME=VALUE
    """
    variables = {}
    for item in value or ():
        match = VARIABLE_PATTERN.match(item)
        if not match:
            raise click.BadParameter(
                f"Invalid variable '{item}'. Expected NAME=VALUE"
            )
        variables[match.group(1)] = match.group(2)
    return variables


def validate_dpi(ctx, param, value):
    """Convert --dpi to a Resolution (152, 203, 300, 600 or any positive number)."""
    try:
        dpi = float(value)
    except ValueError:
        raise click.BadParameter(f"Invalid DPI '{value}'") from None
    if dpi <= 0:
        raise click.BadParameter("DPI must be positive")
    return Resolution.from_dpi(int(dpi) if dpi.is_integer() else dpi)


def _describe(instruction) -> str:
    parts = []
    for field in dataclasses.fields(instruction):
        value = getattr(instruction, field.name)
        if isinstance(value, bytes):
            shown = f"<{len(value)} bytes>"
        elif isinstance(value, str) and len(value) > MAX_SHOWN_VALUE:
            shown = repr(value[:MAX_SHOWN_VALUE] + "...")
        else:
            shown = repr(value)
        parts.append(f"{field.name}={shown}")
    return f"{type(instruction).__name__}({', '.join(parts)})"


@click.group()
@click.option("--debug/--no-debug", default=False, help="Enable debug output")
@click.pass_context
def main(ctx, debug):
    """ZPL label compiler and renderer."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@main.command()
@click.argument("source", metavar="INPUT", type=click.File("r"))
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Output file (default label.png or label.pdf)",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["png", "pdf"]),
    default="png",
    help="Output format (default png)",
)
@click.option("--width", default=4.0, help="Label width (default 4)")
@click.option("--height", default=6.0, help="Label height (default 6)")
@click.option(
    "--unit",
    type=click.Choice(["in", "mm", "cm", "dots"]),
    default="in",
    help="Unit of --width and --height (default in)",
)
@click.option(
    "--dpi",
    default="203",
    callback=validate_dpi,
    help="Printer resolution: 152, 203, 300, 600 or a custom value",
)
@click.option(
    "--var",
    "variables",
    multiple=True,
    callback=validate_variables,
    help="Template variable NAME=VALUE for {{NAME}} (repeatable)",
)
@click.pass_context
def render(ctx, source, output, output_format, width, height, unit, dpi,
           variables):
    """Render a ZPL label to a PNG image or a PDF page.

    Use - as INPUT to read the label from standard input.
    """
    debug = ctx.obj["debug"]
    kind = UnitKind(unit)

    try:
        engine = ZplEngine(
            source.read(),
            Unit(width, kind),
            Unit(height, kind),
            resolution=dpi,
            debug=debug,
        )
        backend = BACKENDS[output_format](debug=debug)
        rendered = engine.render(backend, variables=variables)
    except ParseError as e:
        click.echo(str(e), err=True)
        sys.exit(1)
    except ZplError as e:
        click.echo(f"Render error: {e}", err=True)
        sys.exit(1)
    except ImportError as e:
        click.echo(str(e), err=True)
        sys.exit(1)

    if output is None:
        output = f"label.{output_format}"
    Path(output).write_bytes(rendered)
    click.echo(f"Wrote {output} ({len(rendered)} bytes)")


@main.command()
@click.argument("source", metavar="INPUT", type=click.File("r"))
@click.pass_context
def check(ctx, source):
    """Parse a ZPL label and list the instructions it produces."""
    try:
        instructions = compile_zpl(source.read(), debug=ctx.obj["debug"])
    except ZplError as e:
        click.echo(str(e), err=True)
        sys.exit(1)

    click.echo(f"{len(instructions)} instruction(s)")
    for i, instruction in enumerate(instructions, 1):
        click.echo(f"  [{i}] {_describe(instruction)}")


@main.command()
@click.argument("image", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--field",
    is_flag=True,
    help="Print a complete ^GFA command instead of the bare payload",
)
def encode(image, field):
    """Encode an image as compressed ^GF graphic field data.

    Dark pixels (luminance below 128) print black.
    """
    try:
        if field:
            click.echo(to_graphic_field(image))
        else:
            data, _, _ = encode_image(image)
            click.echo(data)
    except ImageError as e:
        click.echo(f"Image error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
