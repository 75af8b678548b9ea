"""Tests for the immutable plot declaration."""

import pytest
from assocplot.aesthetics import Channel, aes, value
from assocplot.coords import CoordSystem
from assocplot.dodge import Dodge
from assocplot.errors import ConfigurationError
from assocplot.layers import Point, PointRange
from assocplot.primitives import AxisTick
from assocplot.scales import Scale
from assocplot.spec import PlotSpec, plot
from assocplot.table import Table


@pytest.fixture
def table() -> Table:
    return Table.from_records(
        [
            {"snp": "rs1", "model": "ICD", "odds_ratio": 1.2, "lower_ci": 1.0, "upper_ci": 1.4},
            {"snp": "rs1", "model": "NLP", "odds_ratio": 1.1, "lower_ci": 0.9, "upper_ci": 1.3},
        ],
    )


@pytest.fixture
def color_scale() -> Scale:
    return Scale.manual(Channel.COLOR, {"ICD": "black", "NLP": "orange"})


class TestBuilder:
    """Test that builder methods return new specs."""

    def test_add_layer_leaves_receiver(self, table: Table) -> None:
        base = plot(table)
        extended = base.add_layer(Point(aes(x="snp", y="odds_ratio")))

        assert base.layers == ()
        assert len(extended.layers) == 1

    def test_shared_template(self, table: Table, color_scale: Scale) -> None:
        """Test that two specs built from one template do not affect each other."""
        template = plot(table).add_scale(color_scale)
        flipped = template.flip()
        titled = template.with_labels(title="Forest")

        assert template.coord is CoordSystem.IDENTITY
        assert flipped.coord is CoordSystem.FLIPPED
        assert titled.labels.title == "Forest"
        assert flipped.labels.title is None

    def test_equal_builds_are_equal(self, table: Table, color_scale: Scale) -> None:
        def build() -> PlotSpec:
            return (
                plot(table)
                .add_scale(color_scale)
                .add_layer(Point(aes(x="snp", y="odds_ratio", color="model")))
                .with_labels(x="SNP")
                .with_guide("color", {"shape": "circle"})
            )

        assert build() == build()
        assert build() != build().flip()

    def test_later_scale_replaces(self, table: Table, color_scale: Scale) -> None:
        replacement = Scale.manual(Channel.COLOR, {"ICD": "red", "NLP": "blue"})
        spec = plot(table).add_scale(color_scale).add_scale(replacement)
        assert spec.scales.get(Channel.COLOR) == replacement

    def test_with_labels_keeps_unset(self, table: Table) -> None:
        spec = plot(table).with_labels(title="T", x="X").with_labels(y="Y")
        assert (spec.labels.title, spec.labels.x, spec.labels.y) == ("T", "X", "Y")

    def test_with_coord_string(self, table: Table) -> None:
        assert plot(table).with_coord("flipped").coord is CoordSystem.FLIPPED
        with pytest.raises(ConfigurationError):
            plot(table).with_coord("polar")

    def test_with_ticks(self, table: Table) -> None:
        ticks = [AxisTick(value="1", position=3.0, text="1")]
        spec = plot(table).with_ticks("x", ticks)
        assert spec.ticks[Channel.X] == tuple(ticks)
        with pytest.raises(ConfigurationError, match="x or y"):
            plot(table).with_ticks("color", ticks)

    def test_legend_toggles(self, table: Table) -> None:
        spec = plot(table).show_legend(False).merge_legend(False)
        assert not spec.legend_visible
        assert not spec.merge_legends


class TestValidate:
    """Test whole-declaration checks."""

    def test_valid_spec_returns_itself(self, table: Table, color_scale: Scale) -> None:
        spec = plot(table).add_scale(color_scale).add_layer(
            Point(aes(x="odds_ratio", y="upper_ci", color="model")),
        )
        assert spec.validate() is spec

    def test_missing_field(self, table: Table) -> None:
        spec = plot(table).add_layer(Point(aes(x="snp", y="beta")))
        with pytest.raises(ConfigurationError, match="beta"):
            spec.validate()

    def test_missing_field_in_layer_data(self, table: Table) -> None:
        own = Table.from_records([{"snp": "rs1"}])
        spec = plot(table).add_layer(Point(aes(x="snp", y="odds_ratio"), data=own))
        with pytest.raises(ConfigurationError, match="odds_ratio"):
            spec.validate()

    def test_missing_scale(self, table: Table) -> None:
        spec = plot(table).add_layer(Point(aes(x="odds_ratio", y="upper_ci", color="model")))
        with pytest.raises(ConfigurationError, match="no color scale"):
            spec.validate()

    def test_literal_needs_no_scale(self, table: Table) -> None:
        spec = plot(table).add_layer(Point(aes(x="odds_ratio", y="upper_ci", color=value("red"))))
        spec.validate()

    def test_dodge_channel_must_be_bound(self, table: Table, color_scale: Scale) -> None:
        layer = PointRange(
            aes(x="snp", y="odds_ratio", ymin="lower_ci", ymax="upper_ci"),
            dodge=Dodge(by=Channel.COLOR),
        )
        spec = plot(table).add_scale(color_scale).add_layer(layer)
        with pytest.raises(ConfigurationError, match="dodges by color"):
            spec.validate()

    def test_empty_table_skips_field_check(self) -> None:
        spec = plot(Table.from_records([])).add_layer(Point(aes(x="snp", y="odds_ratio")))
        spec.validate()
