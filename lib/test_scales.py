"""Tests for discrete scales and the scale registry."""

import pytest
from assocplot.aesthetics import Channel
from assocplot.errors import ConfigurationError, UnmappedDomainValue
from assocplot.scales import Scale, ScaleRegistry, discrete_domain, natural_sort_key
from assocplot.table import Table

MODEL_COLORS = {"ICD": "#000000", "NLP": "#e79f00", "No Correction": "#0072B2"}
LEGEND_ORDER = ["No Correction", "NLP", "ICD"]


@pytest.fixture
def color_scale() -> Scale:
    """Model colors with legend breaks in plot order."""
    return Scale.manual(
        Channel.COLOR,
        MODEL_COLORS,
        breaks=LEGEND_ORDER,
        labels=["Unadjusted", "NLP", "ICD"],
        name="Adjustment Type",
    )


@pytest.fixture
def fill_scale() -> Scale:
    """Four fill values, only two of which are shown in the legend."""
    return Scale.manual(
        Channel.FILL,
        {0: "white", 1: "#000000", 2: "#e79f00", 3: "#0072B2"},
        breaks=[0, 1],
        labels=["Not Significant", "Significant"],
    )


class TestNaturalOrder:
    """Test the natural sort used for discrete domains."""

    def test_numeric_names_before_text(self) -> None:
        values = ["X", "10", "2", "chr1", "Y"]
        assert sorted(values, key=natural_sort_key) == ["chr1", "2", "10", "X", "Y"]

    def test_non_finite_names_sort_as_text(self) -> None:
        values = ["nan", "X", "inf", "2", "1"]
        assert sorted(values, key=natural_sort_key) == ["1", "2", "X", "inf", "nan"]

    def test_discrete_domain(self) -> None:
        table = Table.from_records([{"CHR": "10"}, {"CHR": "2"}, {"CHR": None}, {"CHR": "2"}])
        assert discrete_domain(table, "CHR") == ("2", "10")


class TestScaleConstruction:
    """Test scale defaults and construction-time checks."""

    def test_defaults(self) -> None:
        scale = Scale.manual("color", {"a": "red", "b": "blue"})

        assert scale.channel is Channel.COLOR
        assert scale.domain == ("a", "b")
        assert scale.breaks == ("a", "b")
        assert scale.labels == ("a", "b")
        assert scale.name is None

    def test_breaks_must_be_in_domain(self) -> None:
        with pytest.raises(ConfigurationError, match="not in its domain"):
            Scale.manual(Channel.COLOR, MODEL_COLORS, breaks=["ICD", "Bayesian"])

    def test_labels_must_match_breaks(self) -> None:
        with pytest.raises(ConfigurationError, match="2 labels for 3 breaks"):
            Scale.manual(Channel.COLOR, MODEL_COLORS, breaks=LEGEND_ORDER, labels=["a", "b"])

    def test_unknown_channel(self) -> None:
        with pytest.raises(ConfigurationError, match="unknown aesthetic channel"):
            Scale.manual("linetype", {"a": "solid"})

    def test_declared_domain_may_exceed_range(self) -> None:
        """Test that an unmapped domain value only fails when it is resolved."""
        scale = Scale.manual(Channel.SHAPE, {"a": "circle"}, domain=["a", "b"], breaks=["a"])

        assert scale.resolve("a") == "circle"
        with pytest.raises(UnmappedDomainValue):
            scale.resolve("b")

    def test_positional(self) -> None:
        scale = Scale.positional(Channel.X, ["rs2", "rs1"])
        assert scale.resolve("rs2") == 1.0
        assert scale.resolve("rs1") == 2.0

    def test_alternating(self) -> None:
        scale = Scale.alternating(Channel.COLOR, ["1", "2", "3"], ["black", "blue"])
        assert [scale.resolve(chrom) for chrom in ("1", "2", "3")] == ["black", "blue", "black"]

    def test_alternating_needs_values(self) -> None:
        with pytest.raises(ConfigurationError):
            Scale.alternating(Channel.COLOR, ["1"], [])


class TestScaleResolution:
    """Test resolution and legend rows."""

    def test_resolve(self, color_scale: Scale) -> None:
        assert color_scale.resolve("NLP") == "#e79f00"

    def test_unmapped_value_names_channel_and_value(self, color_scale: Scale) -> None:
        with pytest.raises(UnmappedDomainValue) as excinfo:
            color_scale.resolve("Bayesian")

        assert excinfo.value.channel is Channel.COLOR
        assert excinfo.value.value == "Bayesian"
        assert "color" in str(excinfo.value)

    def test_legend_rows_follow_breaks(self, color_scale: Scale) -> None:
        """Test that rows come in break order, not domain order."""
        rows = color_scale.legend_rows()

        assert [row.key for row in rows] == LEGEND_ORDER
        assert [row.label for row in rows] == ["Unadjusted", "NLP", "ICD"]
        assert [row.visual for row in rows] == ["#0072B2", "#e79f00", "#000000"]

    def test_partial_breaks_collapse_legend(self, fill_scale: Scale) -> None:
        """Test that a 4-value domain with 2 breaks gives 2 rows but resolves all 4."""
        assert len(fill_scale.legend_rows()) == 2
        assert [fill_scale.resolve(code) for code in range(4)] == [
            "white",
            "#000000",
            "#e79f00",
            "#0072B2",
        ]

    def test_order_of_puts_breaks_first(self, fill_scale: Scale) -> None:
        order = fill_scale.order_of([3, 1, 0, 2])
        assert sorted(order, key=order.get) == [0, 1, 2, 3]

    def test_order_of_omits_undeclared(self, color_scale: Scale) -> None:
        assert "Bayesian" not in color_scale.order_of(["ICD", "Bayesian"])

    def test_with_guide(self, color_scale: Scale) -> None:
        relabelled = color_scale.with_guide(name="Model")
        assert relabelled.name == "Model"
        assert relabelled.labels == color_scale.labels

        narrowed = color_scale.with_guide(breaks=["ICD"])
        assert narrowed.breaks == ("ICD",)
        assert narrowed.labels == ("ICD",)


class TestScaleRegistry:
    """Test the immutable registry."""

    def test_with_scale_returns_new_registry(self, color_scale: Scale) -> None:
        empty = ScaleRegistry()
        registry = empty.with_scale(color_scale)

        assert Channel.COLOR in registry
        assert Channel.COLOR not in empty
        assert len(empty) == 0

    def test_later_scale_replaces_earlier(self, color_scale: Scale) -> None:
        replacement = Scale.manual(Channel.COLOR, {"ICD": "red"})
        registry = ScaleRegistry().with_scale(color_scale).with_scale(replacement)

        assert len(registry) == 1
        assert registry.resolve(Channel.COLOR, "ICD") == "red"

    def test_require_missing_scale(self) -> None:
        with pytest.raises(ConfigurationError, match="no scale registered"):
            ScaleRegistry().require("shape")

    def test_legend_rows_without_scale(self) -> None:
        assert ScaleRegistry().legend_rows(Channel.ALPHA) == ()

    def test_registries_compare_by_value(self, color_scale: Scale) -> None:
        assert ScaleRegistry().with_scale(color_scale) == ScaleRegistry({Channel.COLOR: color_scale})
