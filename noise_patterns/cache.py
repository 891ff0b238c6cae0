"""Filesystem cache for generated noise patterns.

The output directory *is* the cache: a pattern exists iff its PNG is on disk.
Files are generated once per key and then reused across builds. Eviction is
scoped to builds: ``cleanup`` removes every pattern that was not requested
since the previous cleanup, so it must run at the start of a build, before
any ``generate`` call (``NoiseCache.build`` enforces that order).
"""
from __future__ import annotations

import logging
import math
import os
from contextlib import contextmanager
from pathlib import Path
from typing import FrozenSet, Iterator, List, Optional, Set, Union

import orjson

from . import generator

log = logging.getLogger(__name__)

PREFIX = "noise-"
SUFFIX = ".png"
MANIFEST_NAME = ".noise-manifest.json"


class PatternCacheError(OSError):
    """A filesystem operation on the pattern cache failed."""

    def __init__(self, operation: str, path: Path, cause: OSError):
        self.operation = operation
        self.path = Path(path)
        self.cause = cause
        reason = cause.strerror or str(cause)
        super().__init__(cause.errno, f"Cannot {operation} {self.path}: {reason}")

    def __str__(self) -> str:
        return self.args[1]


def round_half_up(value: float) -> int:
    if isinstance(value, int):
        return int(value)
    if not math.isfinite(value):
        raise ValueError(f"Noise parameters must be finite numbers, got {value!r}")
    return int(math.floor(value + 0.5))


def cache_key(mean: float, std_dev: float) -> str:
    """Return the cache key for a parameter pair.

    Example: noise-128-20
    """
    return f"{PREFIX}{round_half_up(mean)}-{round_half_up(std_dev)}"


def is_pattern_file(name: str) -> bool:
    return name.startswith(PREFIX) and name.endswith(SUFFIX)


class NoiseCache:
    """Content-keyed PNG cache with a per-build live set.

    Lifecycle of one build::

        cache.cleanup()          # evict what the previous build did not use
        cache.generate(m, s)     # any number of times
        cache.save_manifest()    # optional: lets a new process keep this build's files

    ``build()`` wraps those three steps in a context manager.
    """

    def __init__(self, output_dir: Optional[Union[str, os.PathLike]] = None, rng=None):
        if output_dir is None:
            output_dir = Path.cwd() / "public" / "noise-patterns"
        self.output_dir = Path(output_dir)
        self.rng = rng
        self._live: Set[str] = set()
        self._dir_ready = False
        # Per build pass, reset by cleanup
        self.generated: List[str] = []
        self.evicted: List[str] = []
        self._live.update(self._load_manifest())

    @property
    def manifest_path(self) -> Path:
        return self.output_dir / MANIFEST_NAME

    @property
    def live(self) -> FrozenSet[str]:
        return frozenset(self._live)

    def filename_for(self, mean: float, std_dev: float) -> str:
        return cache_key(mean, std_dev) + SUFFIX

    def path_for(self, filename: str) -> Path:
        return self.output_dir / filename

    def ensure_dir(self) -> Path:
        if not self._dir_ready:
            try:
                self.output_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise PatternCacheError("create directory", self.output_dir, e) from e
            self._dir_ready = True
        return self.output_dir

    def exists(self, mean: float, std_dev: float) -> bool:
        self.ensure_dir()
        path = self.path_for(self.filename_for(mean, std_dev))
        try:
            return path.exists()
        except OSError as e:
            raise PatternCacheError("stat", path, e) from e

    def generate(self, mean: float, std_dev: float) -> str:
        """Return the pattern filename, writing the PNG on a cache miss."""
        filename = self.filename_for(mean, std_dev)
        self._live.add(filename)
        if self.exists(mean, std_dev):
            log.debug("Cache hit: %s", filename)
            return filename

        path = self.path_for(filename)
        tmp = path.with_name(path.name + ".tmp")
        log.info("Generating noise pattern %s", filename)
        pixels = generator.noise_pattern(round_half_up(mean), round_half_up(std_dev), rng=self.rng)
        try:
            generator.encode_png(pixels, tmp)
            os.replace(tmp, path)
        except OSError as e:
            try:
                tmp.unlink(missing_ok=True)
            except OSError:
                log.warning("Could not remove partial pattern %s", tmp)
            raise PatternCacheError("write", path, e) from e
        self.generated.append(filename)
        return filename

    def cleanup(self) -> List[str]:
        """Delete cached patterns outside the live set, then reset the live set.

        Returns the deleted filenames.
        """
        self.ensure_dir()
        try:
            names = sorted(os.listdir(self.output_dir))
        except OSError as e:
            raise PatternCacheError("list", self.output_dir, e) from e
        removed = []
        for name in names:
            if not is_pattern_file(name) or name in self._live:
                continue
            path = self.path_for(name)
            try:
                path.unlink()
            except OSError as e:
                raise PatternCacheError("delete", path, e) from e
            removed.append(name)
        if removed:
            log.info("Removed %d unused noise pattern(s)", len(removed))
        self._live.clear()
        self.evicted = removed
        self.generated = []
        return removed

    def save_manifest(self) -> Path:
        """Record the live set so the next process evicts only unused patterns."""
        self.ensure_dir()
        path = self.manifest_path
        try:
            path.write_bytes(orjson.dumps({"live": sorted(self._live)}, option=orjson.OPT_INDENT_2))
        except OSError as e:
            raise PatternCacheError("write", path, e) from e
        return path

    def _load_manifest(self) -> List[str]:
        path = self.manifest_path
        if not path.exists():
            return []
        try:
            data = orjson.loads(path.read_bytes())
        except OSError as e:
            raise PatternCacheError("read", path, e) from e
        except orjson.JSONDecodeError:
            log.warning("Ignoring unreadable noise manifest %s", path)
            return []
        live = data.get("live") if isinstance(data, dict) else None
        if not isinstance(live, list):
            log.warning("Ignoring malformed noise manifest %s", path)
            return []
        return [name for name in live if isinstance(name, str) and is_pattern_file(name)]

    @contextmanager
    def build(self) -> Iterator["NoiseCache"]:
        """Run one build pass: cleanup first, generate inside, record on success."""
        self.cleanup()
        yield self
        self.save_manifest()


__all__ = ["NoiseCache", "PatternCacheError", "cache_key", "round_half_up", "is_pattern_file"]
