from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional, Dict, Union

from .cache import round_half_up

# Accepted range for mean and std_dev; keeps cache filenames short and finite
PARAMETER_LIMIT = 10_000


class NoiseParameters(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    mean: int = Field(ge=-PARAMETER_LIMIT, le=PARAMETER_LIMIT)
    std_dev: int = Field(alias="stdDev", ge=-PARAMETER_LIMIT, le=PARAMETER_LIMIT)
    # Percent; applied on the CSS side, never baked into the cached image
    opacity: Optional[int] = Field(default=None, ge=0, le=100)

    @field_validator("mean", "std_dev", mode="before")
    @classmethod
    def _round_floats(cls, v):
        # Same rounding rule as the cache key
        if isinstance(v, float):
            return round_half_up(v)
        return v


DEFAULT_PRESETS: Dict[str, str] = {
    "subtle": "100,20",
    "medium": "128,50",
    "strong": "128,100",
}


class NoiseConfig(BaseModel):
    """Configuration surface consumed by the build and the utility binder."""
    model_config = ConfigDict(populate_by_name=True)

    output_dir: str = "public/noise-patterns"
    public_path: str = "/noise-patterns"
    default: NoiseParameters = NoiseParameters(mean=128, std_dev=20)
    default_opacity: str = "0.05"
    # preset name -> "mean,stdDev[,opacity]" or {mean, stdDev[, opacity]}
    presets: Dict[str, Union[str, NoiseParameters]] = Field(default_factory=lambda: dict(DEFAULT_PRESETS))
    # opacity scale for the standalone noise-opacity utility
    opacity: Dict[str, str] = Field(default_factory=dict)
    utilities: List[str] = []
