"""
Pydantic configuration models for the assocplot recipes.

The defaults reproduce the published forest and Manhattan figures. Any field
can be overridden from a YAML file through ``load_config``; extra keys are
rejected so that a misspelled option never goes unnoticed.

Scale and guide entries are overrides: a ``scales`` entry for a channel
replaces the recipe's default scale for that channel, and a ``guides`` entry
replaces its default guide override.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, TypeVar

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .aesthetics import Channel
from .coords import CoordSystem
from .errors import ConfigurationError
from .legend import GuideSpec
from .scales import Scale
from .transforms import bonferroni_threshold

ConfigT = TypeVar("ConfigT", bound=BaseModel)


class ScaleConfig(BaseModel):
    """A discrete scale declared in configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    channel: Channel
    values: dict[Any, Any] = Field(description="Domain value -> visual value")
    domain: Optional[list[Any]] = None
    breaks: Optional[list[Any]] = None
    labels: Optional[list[str]] = None
    name: Optional[str] = None

    def to_scale(self) -> Scale:
        return Scale.manual(
            self.channel,
            self.values,
            domain=self.domain,
            breaks=self.breaks,
            labels=self.labels,
            name=self.name,
        )


class GuideConfig(BaseModel):
    """Swatch overrides for the guide of one channel."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    channel: Channel
    override_aes: dict[str, Any] = Field(default_factory=dict)

    def to_guide(self) -> GuideSpec:
        return GuideSpec(self.override_aes)


class PlotConfig(BaseModel):
    """Options shared by every recipe."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    title: Optional[str] = None
    x_label: Optional[str] = None
    y_label: Optional[str] = None
    coord: CoordSystem = CoordSystem.IDENTITY
    merge_legends: bool = True
    show_legend: bool = True
    scales: list[ScaleConfig] = Field(default_factory=list)
    guides: list[GuideConfig] = Field(default_factory=list)


class ForestConfig(PlotConfig):
    """Forest plot of odds ratios across adjustment models."""

    title: Optional[str] = (
        "Effect of Smoking Detection Algorithm on Lung Cancer Genetic Associations"
    )
    x_label: Optional[str] = ""
    y_label: Optional[str] = "Odds Ratio"
    coord: CoordSystem = CoordSystem.FLIPPED

    alpha: float = Field(default=0.05, gt=0, le=1, description="Family-wise alpha")
    n_tests: int = Field(default=12, ge=1, description="Independent tests corrected for")
    corrected_alpha: Optional[float] = Field(
        default=None,
        gt=0,
        le=1,
        description="Explicit threshold; overrides alpha / n_tests",
    )

    model_order: list[str] = Field(default_factory=lambda: ["ICD", "NLP", "No Correction"])
    legend_order: list[str] = Field(default_factory=lambda: ["No Correction", "NLP", "ICD"])
    model_labels: dict[str, str] = Field(default_factory=lambda: {"No Correction": "Unadjusted"})
    model_colors: dict[str, str] = Field(
        default_factory=lambda: {"ICD": "#000000", "NLP": "#e79f00", "No Correction": "#0072B2"},
    )
    model_shapes: dict[str, str] = Field(
        default_factory=lambda: {"ICD": "diamond", "NLP": "square", "No Correction": "triangle-up"},
    )
    adjustment_title: str = "Adjustment Type"

    # indexed by composite group code: 0 is "not significant"
    significance_fills: list[str] = Field(
        default_factory=lambda: ["white", "#000000", "#e79f00", "#0072B2"],
    )
    significance_alphas: list[float] = Field(default_factory=lambda: [0.5, 1.0, 1.0, 1.0])
    significance_title: str = "Genetic Association"
    significance_labels: list[str] = Field(
        default_factory=lambda: ["Not Significant", "Significant (p<0.004)"],
    )

    # step between neighbouring models at one SNP
    dodge_width: float = Field(default=0.2, ge=0)
    reference_line: float = 1.0
    reference_linetype: str = "dashed"

    highlights: dict[str, float] = Field(
        default_factory=lambda: {"rs1051730": 1.35, "rs931794": 1.39, "rs748404": 0.87},
        description="Previously reported odds ratios drawn over the estimates",
    )
    highlight_color: str = "red"
    highlight_size: float = Field(default=3.0, gt=0)

    @model_validator(mode="after")
    def _check_model_tables(self) -> ForestConfig:
        codes = len(self.model_order) + 1
        if len(self.significance_fills) != codes or len(self.significance_alphas) != codes:
            msg = (
                f"significance_fills and significance_alphas need {codes} entries "
                "(one for 'not significant' plus one per model)"
            )
            raise ValueError(msg)
        if len(self.significance_labels) != 2:  # noqa: PLR2004
            msg = "significance_labels needs exactly two entries"
            raise ValueError(msg)
        stray = sorted(set(self.legend_order) - set(self.model_order))
        if stray:
            msg = f"legend_order names models missing from model_order: {stray}"
            raise ValueError(msg)
        return self

    @property
    def threshold(self) -> float:
        """The corrected significance threshold actually applied."""
        if self.corrected_alpha is not None:
            return self.corrected_alpha
        return bonferroni_threshold(self.alpha, self.n_tests)


class ManhattanConfig(PlotConfig):
    """Genome-wide Manhattan plot."""

    x_label: Optional[str] = "Chromosome"
    y_label: Optional[str] = "-log10(p)"
    show_legend: bool = False

    suggestive_p: float = Field(default=1e-5, gt=0, le=1)
    suggestive_color: str = "green"
    annotate_p: float = Field(default=1e-5, gt=0, le=1)
    annotate_color: str = "darkgreen"
    label_hjust: float = 1.1
    label_vjust: float = -0.2

    chromosome_colors: list[str] = Field(
        default_factory=lambda: ["black", "blue"],
        min_length=1,
    )
    chromosome_order: Optional[list[str]] = None
    stagger_prefix: str = "\n"

    sample_size: Optional[int] = Field(default=40000, ge=1)
    seed: Optional[int] = 42


def parse_config(raw: Any, model: type[ConfigT]) -> ConfigT:
    """
    Validate an already-parsed mapping into a config model.

    Raises:
        ConfigurationError: If validation fails
    """
    try:
        return model.model_validate(raw or {})
    except ValidationError as exc:
        msg = f"invalid {model.__name__}: {exc}"
        raise ConfigurationError(msg) from exc


def load_config(path: str | Path, model: type[ConfigT]) -> ConfigT:
    """
    Load and validate a YAML config file.

    Args:
        path: YAML file; an empty file yields the defaults
        model: Config model to validate against

    Returns:
        The validated config

    Raises:
        ConfigurationError: If the file is missing, not valid YAML, or does
                            not validate
    """
    config_path = Path(path)
    if not config_path.is_file():
        msg = f"config file not found: {config_path}"
        raise ConfigurationError(msg)
    try:
        with config_path.open(encoding="utf8") as config_handle:
            raw = yaml.safe_load(config_handle)
    except yaml.YAMLError as exc:
        msg = f"could not parse {config_path}: {exc}"
        raise ConfigurationError(msg) from exc
    if raw is not None and not isinstance(raw, dict):
        msg = f"{config_path} must contain a mapping at the top level"
        raise ConfigurationError(msg)
    return parse_config(raw, model)
