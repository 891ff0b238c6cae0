"""noise_patterns

Build-time generator of grayscale noise textures exposed as style utilities.

Primary entrypoints:
 - cli.py (Typer CLI)
 - cache.py (PNG pattern cache with per-build eviction)
 - generator.py (Gaussian noise pixels + PNG encoding)
 - binder.py (utility values -> style declarations)
 - stylesheet.py (CSS rendering)
"""

__version__ = "0.1.0"

__all__ = [
    "binder",
    "cache",
    "generator",
    "stylesheet",
]
