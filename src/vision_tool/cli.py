"""Main CLI entry point."""

import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

import anthropic
import click
import openai
from dotenv import load_dotenv
from PIL import UnidentifiedImageError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from vision_tool.config import Config, Provider
from vision_tool.enhancement import (
    QUICK_ENHANCE,
    EnhancementSettings,
    decode_image,
    encode_image,
    enhance,
)
from vision_tool.overlay import ImageDimensions, draw_overlays, remap
from vision_tool.postprocessing import clean_recognized_text
from vision_tool.providers.anthropic import AnthropicProvider
from vision_tool.providers.openai import OpenAIProvider
from vision_tool.synthesizer import synthesize

console = Console(stderr=True)
load_dotenv()

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp", ".gif", ".bmp"}

SLIDER = click.IntRange(-100, 100)

provider_option = click.option(
    "--provider", "-p",
    type=click.Choice([p.value for p in Provider], case_sensitive=False),
    default=None,
    help="LLM provider to use. Defaults to $VISION_TOOL_PROVIDER or anthropic.",
)
model_option = click.option(
    "--model", "-m",
    default=None,
    help="Model name override (defaults to best vision model for the provider).",
)
api_key_option = click.option(
    "--api-key",
    default=None,
    help="API key (overrides environment variable).",
)
image_argument = click.argument(
    "image_path", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr.")
@click.version_option(package_name="vision-tool")
def main(verbose):
    """Ask questions about, extract text from, and enhance images."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


# ── enhance ────────────────────────────────────────────────────────────────────


@main.command("enhance")
@image_argument
@click.option("--brightness", "-b", type=SLIDER, default=0, show_default=True)
@click.option("--contrast", "-c", type=SLIDER, default=0, show_default=True)
@click.option("--saturation", "-s", type=SLIDER, default=0, show_default=True)
@click.option(
    "--quick", is_flag=True,
    help="Use the one-click preset (brightness +40, contrast +20, saturation +10).",
)
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output PNG path. Defaults to <name>-enhanced.png next to the input.",
)
def enhance_command(image_path, brightness, contrast, saturation, quick, output):
    """Adjust brightness, contrast and saturation of IMAGE_PATH."""
    _check_extension(image_path)
    settings = QUICK_ENHANCE if quick else EnhancementSettings(
        brightness=brightness, contrast=contrast, saturation=saturation
    )
    output = output or image_path.with_name(f"{image_path.stem}-enhanced.png")

    buffer = _decode(image_path)
    with console.status("[cyan]Enhancing image..."):
        result = encode_image(enhance(buffer, settings))

    output.write_bytes(result)
    console.print(
        f"[green]Written to {output}[/green] "
        f"[dim](brightness {settings.brightness:+d}, contrast {settings.contrast:+d}, "
        f"saturation {settings.saturation:+d})[/dim]"
    )


# ── ocr ────────────────────────────────────────────────────────────────────────


@main.command("ocr")
@image_argument
@provider_option
@model_option
@api_key_option
@click.option("--boxes", is_flag=True, help="Print word boxes as JSON instead of text.")
@click.option(
    "--display", "display_size",
    default=None,
    metavar="WxH",
    help="Rescale boxes to an image shown at this size, e.g. 800x600.",
)
@click.option(
    "--annotate",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write a copy of the image with the word boxes highlighted.",
)
def ocr_command(image_path, provider, model, api_key, boxes, display_size, annotate):
    """Extract text from IMAGE_PATH and lay it out as word boxes."""
    _check_extension(image_path)
    display = _parse_size(display_size) if display_size else None
    config = _load_config(provider, model, api_key)

    buffer = _decode(image_path)
    png = encode_image(buffer)
    provider_obj = _build_provider(config)

    with console.status(f"[cyan]Running OCR via {config.provider.value} ({config.model})..."):
        raw_text = _call_provider(provider_obj.recognize, png)

    result = synthesize(clean_recognized_text(raw_text), buffer.width, buffer.height)
    console.print(f"[dim]{len(result.text_blocks)} word box(es)[/dim]")

    natural = remap(
        result.text_blocks,
        ImageDimensions(buffer.width, buffer.height, buffer.width, buffer.height),
    )
    if annotate:
        annotate.write_bytes(draw_overlays(png, natural))
        console.print(f"[green]Annotated image written to {annotate}[/green]")

    if not boxes:
        click.echo(result.full_text)
        return

    if display:
        overlays = remap(
            result.text_blocks, ImageDimensions(buffer.width, buffer.height, *display)
        )
    else:
        overlays = natural
    click.echo(json.dumps(
        {
            "full_text": result.full_text,
            "language": result.language,
            "text_blocks": [asdict(box) for box in overlays],
        },
        indent=2,
    ))


# ── ask ────────────────────────────────────────────────────────────────────────


@main.command("ask")
@image_argument
@click.argument("question")
@provider_option
@model_option
@api_key_option
def ask_command(image_path, question, provider, model, api_key):
    """Ask QUESTION about IMAGE_PATH."""
    _check_extension(image_path)
    config = _load_config(provider, model, api_key)
    png = encode_image(_decode(image_path))
    provider_obj = _build_provider(config)

    with console.status(f"[cyan]Asking {config.provider.value} ({config.model})..."):
        answer = _call_provider(provider_obj.ask, png, question)

    click.echo(answer)


# ── Helpers ────────────────────────────────────────────────────────────────────


def _fail(message: str) -> None:
    console.print(f"[red]Error:[/red] {escape(message)}")
    sys.exit(1)


def _check_extension(path: Path) -> None:
    suffix = path.suffix.lower()
    if suffix not in IMAGE_EXTENSIONS:
        console.print(f"[red]Unsupported file type:[/red] {suffix}")
        sys.exit(1)


def _decode(path: Path):
    try:
        return decode_image(path.read_bytes())
    except (UnidentifiedImageError, OSError) as e:
        _fail(f"Could not read image {path}: {e}")


def _parse_size(value: str) -> tuple[int, int]:
    try:
        width, height = (int(part) for part in value.lower().split("x"))
    except ValueError:
        raise click.BadParameter(f"expected WIDTHxHEIGHT, got {value!r}", param_hint="--display")
    if width <= 0 or height <= 0:
        raise click.BadParameter("width and height must be positive", param_hint="--display")
    return width, height


def _load_config(provider, model, api_key) -> Config:
    try:
        return Config.from_env(
            provider=Provider(provider.lower()) if provider else None,
            model_override=model,
            api_key_override=api_key,
        )
    except RuntimeError as e:
        _fail(str(e))


def _call_provider(method, *args) -> str:
    try:
        return method(*args)
    except (anthropic.APIError, openai.APIError) as e:
        _fail(f"Provider request failed: {e}")


def _build_provider(config: Config):
    if config.provider == Provider.ANTHROPIC:
        return AnthropicProvider(
            api_key=config.api_key, model=config.model, max_tokens=config.max_tokens
        )
    elif config.provider == Provider.OPENAI:
        return OpenAIProvider(
            api_key=config.api_key, model=config.model, max_tokens=config.max_tokens
        )
    else:
        raise ValueError(f"Unknown provider: {config.provider}")
