"""Command-line interface for photoprint.

Usage:
    # Inspect the page layout for a folder of photos
    python cli.py layout photos/ --layout=4 --paper=A4 --output=layout.json

    # Render a print-ready PDF
    python cli.py render photos/ prints.pdf --margins=instant_camera --rotate IMG_0042.jpg=90

    # Rasterize the PDF for a quick look
    python cli.py preview prints.pdf previews/

    # Remember settings for next time
    python cli.py configure --layout=3 --paper=LETTER --incomplete=fill-layout
"""

import json
import logging
import sys
from collections.abc import Callable
from pathlib import Path

import click

from photoprint.config import DEFAULT_SETTINGS_PATH, MARGIN_PRESETS, PREVIEW_DPI
from photoprint.coordinates import rasterize_pdf
from photoprint.errors import ConfigurationError, DocumentWriteFailure, SourceUnavailable
from photoprint.layout import create_layout, validate_configuration
from photoprint.loading import apply_rotations, discover_photos, probe_photos
from photoprint.pagination import paginate
from photoprint.preferences import Settings, load_settings, save_settings, settings_to_dict
from photoprint.rendering import render_pdf
from photoprint.validation import (
    IncompletePageMode,
    LayoutType,
    MarginConfig,
    PaperSize,
    Photo,
    PhotoStatus,
    PrintJob,
)

# Configure root logger
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)

LAYOUT_CHOICES = click.Choice(["2", "3", "4"])
PAPER_CHOICES = click.Choice([p.value for p in PaperSize], case_sensitive=False)
MARGIN_CHOICES = click.Choice(sorted(MARGIN_PRESETS), case_sensitive=False)
INCOMPLETE_CHOICES = click.Choice(["leave-blank", "fill-layout"])


def layout_options(func: Callable[..., None]) -> Callable[..., None]:
    """Options shared by commands that lay out photos."""
    func = click.option(
        "--rotate",
        multiple=True,
        metavar="NAME=DEGREES",
        help="Rotate a photo clockwise (repeatable)",
    )(func)
    func = click.option("--incomplete", type=INCOMPLETE_CHOICES, help="Short final page handling")(func)
    func = click.option("--margins", type=MARGIN_CHOICES, help="Margin preset")(func)
    func = click.option("--paper", type=PAPER_CHOICES, help="Paper size")(func)
    func = click.option("--layout", "layout_choice", type=LAYOUT_CHOICES, help="Photos per page")(func)
    return func


def apply_overrides(
    settings: Settings,
    layout_choice: str | None = None,
    paper: str | None = None,
    margins: str | None = None,
    incomplete: str | None = None,
    copies: int | None = None,
    dpi: int | None = None,
) -> Settings:
    """Merge command-line options over the loaded settings."""
    updates: dict[str, object] = {}
    if layout_choice:
        updates["layout"] = LayoutType.from_capacity(int(layout_choice))
    if paper:
        updates["paper_size"] = PaperSize.from_name(paper)
    if margins:
        updates["margins"] = MarginConfig.preset(margins)
    if incomplete:
        updates["incomplete_page_mode"] = IncompletePageMode(incomplete.upper().replace("-", "_"))
    if copies is not None:
        updates["copies"] = copies
    if dpi is not None:
        updates["dpi"] = dpi
    return Settings(**{**settings.model_dump(), **updates})


def parse_rotations(values: tuple[str, ...]) -> dict[str, int]:
    """Parse NAME=DEGREES pairs."""
    rotations: dict[str, int] = {}
    for value in values:
        name, sep, degrees = value.rpartition("=")
        if not sep or not name:
            raise click.BadParameter(f"Expected NAME=DEGREES, got {value!r}", param_hint="--rotate")
        try:
            rotations[name] = int(degrees)
        except ValueError as e:
            raise click.BadParameter(f"Degrees must be an integer in {value!r}", param_hint="--rotate") from e
    return rotations


def collect_photos(image_dir: str, rotate: tuple[str, ...]) -> list[Photo]:
    """Discover photos and apply rotations, mapping failures to click errors."""
    try:
        photos = discover_photos(image_dir)
    except SourceUnavailable as e:
        raise click.ClickException(str(e)) from e

    if not photos:
        raise click.ClickException(f"No images found in {image_dir}")

    try:
        return apply_rotations(photos, parse_rotations(rotate))
    except (KeyError, ValueError) as e:
        raise click.BadParameter(str(e), param_hint="--rotate") from e


@click.group()
@click.option(
    "--settings",
    "settings_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_SETTINGS_PATH,
    show_default=True,
    help="Preference file",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, settings_path: Path, verbose: bool) -> None:
    """photoprint - arrange photos on printable pages."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    ctx.ensure_object(dict)
    ctx.obj["settings_path"] = settings_path
    ctx.obj["settings"] = load_settings(settings_path)


@cli.command()
@click.argument("image_dir", type=click.Path(file_okay=False))
@layout_options
@click.option("--output", type=click.Path(dir_okay=False), help="Write layout JSON here")
@click.pass_context
def layout(
    ctx: click.Context,
    image_dir: str,
    layout_choice: str | None,
    paper: str | None,
    margins: str | None,
    incomplete: str | None,
    rotate: tuple[str, ...],
    output: str | None,
) -> None:
    """Compute page layout for the photos in IMAGE_DIR.

    Output:
        - Page summary on stdout
        - Layout JSON at --output (optional)
    """
    settings = apply_overrides(ctx.obj["settings"], layout_choice, paper, margins, incomplete)
    photos = probe_photos(collect_photos(image_dir, rotate))

    click.echo(
        f"📐 Laying out {len(photos)} photos: {settings.layout.display_name}, "
        f"{settings.paper_size.display_name}"
    )

    try:
        validate_configuration(settings.layout, settings.paper_size, settings.margins)
        layout_data = create_layout(
            photos,
            settings.paper_size,
            settings.margins,
            settings.layout,
            settings.incomplete_page_mode,
        )
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e

    for page in layout_data["pages"]:
        names = ", ".join(p["name"] for p in page["positioned_photos"])
        click.echo(f"  ✓ page {page['page_number']} ({page['layout']}): {names}")

    failed = [p.name for p in photos if p.status is PhotoStatus.FAILED]
    for name in failed:
        click.echo(f"  ⚠ {name}: unreadable, will be left blank", err=True)

    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json.dumps(layout_data, indent=2))
        click.echo(f"📁 Layout JSON saved to: {output_path}")


@cli.command()
@click.argument("image_dir", type=click.Path(file_okay=False))
@click.argument("output_pdf", type=click.Path(dir_okay=False))
@layout_options
@click.option("--copies", type=click.IntRange(min=1), help="Number of copies")
@click.option("--dpi", type=click.IntRange(min=1), help="Photo raster density")
@click.option("--no-cut-guides", is_flag=True, help="Do not outline slots")
@click.pass_context
def render(
    ctx: click.Context,
    image_dir: str,
    output_pdf: str,
    layout_choice: str | None,
    paper: str | None,
    margins: str | None,
    incomplete: str | None,
    rotate: tuple[str, ...],
    copies: int | None,
    dpi: int | None,
    no_cut_guides: bool,
) -> None:
    """Render the photos in IMAGE_DIR to a print-ready OUTPUT_PDF."""
    settings = apply_overrides(
        ctx.obj["settings"], layout_choice, paper, margins, incomplete, copies, dpi
    )
    photos = collect_photos(image_dir, rotate)

    click.echo(f"🖨️  Rendering {len(photos)} photos to {output_pdf}...")

    pages = paginate(photos, settings.layout, settings.incomplete_page_mode)
    job = PrintJob(
        pages=tuple(pages),
        paper_size=settings.paper_size,
        margins=settings.margins,
        copies=settings.copies,
    )

    def report(done: int, total: int) -> None:
        logger.debug(f"Page {done}/{total} written")

    try:
        result = render_pdf(
            job,
            output_pdf,
            dpi=settings.dpi,
            progress_callback=report,
            cut_guides=not no_cut_guides,
        )
    except (ConfigurationError, DocumentWriteFailure) as e:
        raise click.ClickException(str(e)) from e

    for skipped in result["skipped_photos"]:
        click.echo(
            f"  ⚠ page {skipped['page_number']}: skipped {skipped['name']} ({skipped['reason']})",
            err=True,
        )

    click.echo(f"✓ Rendered {result['page_count']} pages")
    click.echo(f"📁 Output PDF saved to: {result['output_path']}")


@cli.command()
@click.argument("pdf_path", type=click.Path(exists=True, dir_okay=False))
@click.argument("output_dir", type=click.Path(file_okay=False))
@click.option("--dpi", default=PREVIEW_DPI, type=click.IntRange(min=1), help="Preview resolution")
def preview(pdf_path: str, output_dir: str, dpi: int) -> None:
    """Rasterize a rendered PDF into PNG page previews."""
    try:
        pages = rasterize_pdf(pdf_path, output_dir, dpi, prefix=Path(pdf_path).stem)
    except RuntimeError as e:
        raise click.ClickException(str(e)) from e

    for page in pages:
        click.echo(f"  ✓ {Path(page['image_path']).name} ({page['width_px']}x{page['height_px']}px)")
    click.echo(f"📁 Previews saved to: {output_dir}/")


@cli.command()
@click.option("--layout", "layout_choice", type=LAYOUT_CHOICES, help="Photos per page")
@click.option("--paper", type=PAPER_CHOICES, help="Paper size")
@click.option("--margins", type=MARGIN_CHOICES, help="Margin preset")
@click.option("--margin-top", type=click.FloatRange(min=0), help="Top margin (mm)")
@click.option("--margin-bottom", type=click.FloatRange(min=0), help="Bottom margin (mm)")
@click.option("--margin-side", type=click.FloatRange(min=0), help="Left and right margins (mm)")
@click.option("--incomplete", type=INCOMPLETE_CHOICES, help="Short final page handling")
@click.option("--copies", type=click.IntRange(min=1), help="Number of copies")
@click.option("--dpi", type=click.IntRange(min=1), help="Photo raster density")
@click.pass_context
def configure(
    ctx: click.Context,
    layout_choice: str | None,
    paper: str | None,
    margins: str | None,
    margin_top: float | None,
    margin_bottom: float | None,
    margin_side: float | None,
    incomplete: str | None,
    copies: int | None,
    dpi: int | None,
) -> None:
    """Update and save default settings."""
    settings = apply_overrides(
        ctx.obj["settings"], layout_choice, paper, margins, incomplete, copies, dpi
    )

    margin_updates: dict[str, float] = {}
    if margin_top is not None:
        margin_updates["top_mm"] = margin_top
    if margin_bottom is not None:
        margin_updates["bottom_mm"] = margin_bottom
    if margin_side is not None:
        margin_updates["left_mm"] = margin_side
        margin_updates["right_mm"] = margin_side
    if margin_updates:
        custom = MarginConfig(**{**settings.margins.model_dump(), **margin_updates})
        settings = settings.model_copy(update={"margins": custom})

    try:
        validate_configuration(settings.layout, settings.paper_size, settings.margins)
    except ConfigurationError as e:
        raise click.ClickException(f"Settings not saved: {e}") from e

    save_settings(settings, ctx.obj["settings_path"])
    ctx.obj["settings"] = settings
    click.echo(f"✓ Settings saved to {ctx.obj['settings_path']}")


@cli.command("show-config")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Print the current settings."""
    click.echo(json.dumps(settings_to_dict(ctx.obj["settings"]), indent=2))


if __name__ == "__main__":
    cli()
