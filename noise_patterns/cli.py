"""Typer CLI for building noise pattern utilities."""
import logging
from pathlib import Path
from typing import List, Optional

import typer
import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from . import generator
from .binder import NoiseUtilities
from .cache import NoiseCache, PatternCacheError
from .metrics import intensity_stats
from .schema import NoiseConfig
from .stylesheet import render_stylesheet

# loading variables from .env file
load_dotenv()

app = typer.Typer(add_completion=False)
log = logging.getLogger(__name__)


def setup_logging(verbosity: int = 0) -> None:
    level = [logging.WARNING, logging.INFO, logging.DEBUG][min(verbosity, 2)]
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(message)s",
        datefmt="%H:%M:%S",
    )


def load_config(path: Path) -> NoiseConfig:
    if not path.exists():
        log.info("No config at %s, using defaults", path)
        return NoiseConfig()
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return NoiseConfig.model_validate(data)


@app.command()
def build(
    config_file: str = typer.Option("config/noise.yaml", "--config", help="Noise config YAML"),
    root: str = typer.Option(".", envvar="NOISE_PATTERNS_ROOT", help="Build root; patterns go under <root>/<output_dir>."),
    out: str = typer.Option("noise.css", help="Stylesheet output path."),
    classes: Optional[List[str]] = typer.Option(None, "--class", help="Extra utility class to emit (repeatable)."),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="Increase log verbosity."),
):
    """Run one build pass: evict unused patterns, generate what is needed, write CSS."""
    setup_logging(verbose)
    try:
        cfg = load_config(Path(config_file))
    except (ValidationError, yaml.YAMLError) as e:
        typer.echo(f"Invalid config {config_file}: {e}", err=True)
        raise typer.Exit(code=1)

    wanted = list(cfg.utilities) + list(classes or [])
    try:
        cache = NoiseCache(Path(root) / cfg.output_dir)
        utilities = NoiseUtilities(cache, cfg)
        with cache.build():
            rules = list(utilities.base().items())
            for class_name in dict.fromkeys(wanted):
                if class_name == "noise":
                    continue
                resolved = utilities.resolve_class(class_name)
                if resolved is None:
                    log.warning("Skipping %r: not a noise utility", class_name)
                    continue
                rules.append(resolved)
            live = sorted(cache.live)
            generated = list(cache.generated)
            evicted = list(cache.evicted)
    except PatternCacheError as e:
        typer.echo(f"Noise pattern cache failure: {e}", err=True)
        raise typer.Exit(code=1)

    out_path = Path(out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(render_stylesheet(rules), encoding="utf-8")
    typer.echo(
        f"Build complete: {len(live)} pattern(s) in use, {len(generated)} generated, "
        f"{len(evicted)} evicted. Stylesheet: {out_path}"
    )


@app.command()
def sample(
    mean: int,
    std_dev: int,
    out: str,
    opacity: int = typer.Option(100, min=0, max=100, help="Alpha channel as a percentage."),
    size: int = typer.Option(generator.CANVAS_SIZE, min=1, help="Square canvas size in pixels."),
):
    """Write a single noise image outside the cache."""
    pixels = generator.generate_pixels(size, size, mean, std_dev, opacity=opacity)
    path = generator.encode_png(pixels, out)
    typer.echo(f"Wrote {path}")


@app.command()
def stats(image: str):
    """Print intensity statistics of a noise image."""
    s = intensity_stats(generator.load_pixels(image))
    typer.echo(f"mean={s['mean']:.2f} std_dev={s['std_dev']:.2f} clipped={s['clipped']:.4f} pixels={s['count']}")


def main():  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
