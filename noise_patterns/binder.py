"""Noise utilities: turn utility values into cache lookups & style declarations.

Supported classes (as a styling framework would expose them):
 - ``noise``                   default pattern
 - ``noise-<preset>``          configured preset, e.g. ``noise-subtle``
 - ``noise-[mean,dev]``        arbitrary pattern, optional third opacity component
 - ``noise-opacity-<key>``     overlay opacity from the opacity scale
 - ``noise-opacity-[value]``   arbitrary overlay opacity

Malformed values never fail the build: they are logged and replaced with the
configured default parameters.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from .cache import NoiseCache
from .schema import PARAMETER_LIMIT, NoiseConfig, NoiseParameters
from .utils import class_selector, format_opacity

log = logging.getLogger(__name__)

USAGE = "Usage: noise-[mean,dev] or noise-[mean,dev,opacity] (e.g., noise-[128,20])"

Preset = Union[str, NoiseParameters, Mapping[str, Any]]


def _parse_int(text: str, name: str) -> int:
    try:
        return int(text)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {text!r}") from None


def _check_range(value: int, name: str) -> int:
    if not -PARAMETER_LIMIT <= value <= PARAMETER_LIMIT:
        raise ValueError(f"{name} must be between -{PARAMETER_LIMIT} and {PARAMETER_LIMIT}")
    return value


def parse_noise_value(value: str) -> NoiseParameters:
    """Parse a ``mean,stdDev[,opacity]`` tuple string.

    Raises ValueError describing the first problem found.
    """
    if not value or "," not in value:
        raise ValueError(f"Invalid format {value!r}. {USAGE}")
    parts = [p.strip() for p in value.split(",")]
    if len(parts) not in (2, 3):
        raise ValueError(f"Expected 2 or 3 comma-separated values, got {len(parts)}. {USAGE}")
    mean = _check_range(_parse_int(parts[0], "Mean"), "Mean")
    std_dev = _check_range(_parse_int(parts[1], "Standard deviation"), "Standard deviation")
    opacity = None
    if len(parts) == 3:
        opacity = _parse_int(parts[2], "Opacity")
        if not 0 <= opacity <= 100:
            raise ValueError(f"Opacity must be between 0 and 100, got {opacity}")
    return NoiseParameters(mean=mean, std_dev=std_dev, opacity=opacity)


def _preset_parameters(preset: Preset) -> NoiseParameters:
    if isinstance(preset, NoiseParameters):
        return preset
    if isinstance(preset, str):
        return parse_noise_value(preset)
    try:
        return NoiseParameters.model_validate(preset)
    except ValidationError as e:
        raise ValueError(f"Invalid preset record {dict(preset)!r}: {e.error_count()} error(s)") from e


def resolve_parameters(
    value: Optional[str],
    presets: Mapping[str, Preset],
    default: NoiseParameters,
) -> NoiseParameters:
    """Resolve a preset name or tuple string, falling back to ``default``.

    Never raises for a malformed value; the problem is logged as a warning.
    """
    try:
        if value is not None and value in presets:
            return _preset_parameters(presets[value])
        return parse_noise_value(value or "")
    except ValueError as e:
        log.warning("Noise pattern error: %s. Using default pattern.", e)
        return default


class NoiseUtilities:
    """Bind noise utility values to a ``NoiseCache``."""

    def __init__(self, cache: NoiseCache, config: Optional[NoiseConfig] = None):
        self.cache = cache
        self.config = config or NoiseConfig()

    def image_url(self, filename: str) -> str:
        return f"{self.config.public_path.rstrip('/')}/{filename}"

    def parameters_for(self, value: Optional[str]) -> NoiseParameters:
        return resolve_parameters(value, self.config.presets, self.config.default)

    def declarations(self, params: NoiseParameters) -> Dict[str, Any]:
        filename = self.cache.generate(params.mean, params.std_dev)
        decl: Dict[str, Any] = {
            "--noise-mean": str(params.mean),
            "--noise-dev": str(params.std_dev),
        }
        if params.opacity is not None:
            decl["--noise-opacity"] = format_opacity(params.opacity)
        decl.update({
            "position": "relative",
            "isolation": "isolate",
            "&::before": {
                "content": '""',
                "position": "absolute",
                "top": "0",
                "left": "0",
                "width": "100%",
                "height": "100%",
                "background-image": f"url('{self.image_url(filename)}')",
                "background-repeat": "repeat",
                "pointer-events": "none",
                "z-index": "0",
                "opacity": f"var(--noise-opacity, {self.config.default_opacity})",
            },
            "> *": {
                "z-index": "10",
            },
        })
        return decl

    def noise(self, value: Optional[str]) -> Dict[str, Any]:
        return self.declarations(self.parameters_for(value))

    def base(self) -> Dict[str, Dict[str, Any]]:
        """The bare ``.noise`` rule, using the default pattern."""
        return {".noise": self.declarations(self.config.default)}

    def noise_opacity(self, value: str) -> Dict[str, str]:
        """Only rewrites ``--noise-opacity``; the pattern itself is untouched."""
        if value in self.config.opacity:
            return {"--noise-opacity": self.config.opacity[value]}
        try:
            opacity = float(value)
        except (TypeError, ValueError):
            opacity = None
        if opacity is None or not 0.0 <= opacity <= 1.0:
            log.warning(
                "Noise opacity error: %r is not a number between 0 and 1. Using default opacity.",
                value,
            )
            return {"--noise-opacity": self.config.default_opacity}
        return {"--noise-opacity": value.strip()}

    def resolve_class(self, class_name: str) -> Optional[Tuple[str, Dict[str, Any]]]:
        """Map a utility class name to ``(selector, declarations)``.

        Returns None for class names that are not noise utilities.
        """
        selector = class_selector(class_name)
        if class_name == "noise":
            return selector, self.declarations(self.config.default)
        if class_name.startswith("noise-opacity-"):
            value = _arbitrary_or_key(class_name[len("noise-opacity-"):])
            return selector, self.noise_opacity(value)
        if class_name.startswith("noise-"):
            raw = class_name[len("noise-"):]
            if raw.startswith("[") and raw.endswith("]"):
                return selector, self.noise(raw[1:-1])
            if raw in self.config.presets:
                return selector, self.noise(raw)
        return None


def _arbitrary_or_key(raw: str) -> str:
    if raw.startswith("[") and raw.endswith("]"):
        return raw[1:-1]
    return raw


__all__ = ["NoiseUtilities", "parse_noise_value", "resolve_parameters"]
