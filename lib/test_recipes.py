"""Tests for the forest and Manhattan recipes."""

import math

import pytest
from assocplot.aesthetics import Channel, Geometry
from assocplot.config import ForestConfig, GuideConfig, ManhattanConfig, ScaleConfig
from assocplot.errors import ConfigurationError
from assocplot.primitives import Orientation
from assocplot.recipes import forest_spec, manhattan_spec, prepare_manhattan_table
from assocplot.render import render
from assocplot.table import MANHATTAN_SCHEMA, Table

PVALUES = {
    ("rs1", "ICD"): 0.001,
    ("rs1", "NLP"): 0.02,
    ("rs1", "No Correction"): 0.0041,
    ("rs2", "ICD"): 0.5,
    ("rs2", "NLP"): 0.003,
    ("rs2", "No Correction"): 0.0042,
    ("rs3", "ICD"): 0.2,
    ("rs3", "NLP"): 0.3,
    ("rs3", "No Correction"): 1e-6,
}


@pytest.fixture
def forest_table() -> Table:
    """Three SNPs by three adjustment models."""
    return Table.from_records(
        {
            "snp": snp,
            "model": model,
            "odds_ratio": 1.2,
            "lower_ci": 1.0,
            "upper_ci": 1.4,
            "pval": pval,
        }
        for (snp, model), pval in PVALUES.items()
    )


@pytest.fixture
def gwas_table() -> Table:
    """Two chromosomes with one genome-wide hit on each and an incomplete record."""
    rows = [
        ("rs10", "1", 100, 0.5),
        ("rs11", "1", 200, 1e-8),
        ("rs12", "1", 300, 0.2),
        ("rs20", "2", 50, 0.01),
        ("rs21", "2", 60, 2e-6),
        ("rs22", "2", 70, None),
    ]
    return Table.from_records(
        [{"SNP": snp, "CHR": chrom, "BP": bp, "P": p} for snp, chrom, bp, p in rows],
    )


class TestForest:
    """Test the forest plot built with the default options."""

    def test_primitive_counts(self, forest_table: Table) -> None:
        rendered = render(forest_spec(forest_table))

        assert len(rendered.by_kind(Geometry.POINTRANGE)) == 9
        assert len(rendered.by_kind(Geometry.HLINE)) == 1
        assert len(rendered.by_kind(Geometry.POINT)) == 3

    def test_flipped_orientation(self, forest_table: Table) -> None:
        rendered = render(forest_spec(forest_table))

        assert rendered.flipped
        assert rendered.by_kind(Geometry.POINTRANGE)[0].orientation is Orientation.HORIZONTAL
        line = rendered.by_kind(Geometry.HLINE)[0]
        assert line.orientation is Orientation.VERTICAL
        assert line.y == 1.0
        assert line.style["linetype"] == "dashed"

    def test_significance_styles(self, forest_table: Table) -> None:
        """Test that significant estimates are filled in their model colour."""
        ranges = render(forest_spec(forest_table)).by_kind(Geometry.POINTRANGE)
        styles = [dict(primitive.style) for primitive in ranges]

        assert (styles[0]["fill"], styles[0]["alpha"]) == ("#000000", 1.0)
        assert (styles[1]["fill"], styles[1]["alpha"]) == ("white", 0.5)
        assert styles[2]["fill"] == "#0072B2"
        assert styles[5]["fill"] == "white"
        assert styles[8]["fill"] == "#0072B2"
        assert styles[0]["shape"] == "diamond"

    def test_dodge_follows_legend_order(self, forest_table: Table) -> None:
        spec = forest_spec(forest_table)
        center = spec.scales.resolve(Channel.X, "rs1")
        ranges = render(spec).by_kind(Geometry.POINTRANGE)[:3]
        offsets = {
            primitive.style["color"]: round(primitive.x - center, 6) for primitive in ranges
        }

        assert offsets == {"#0072B2": -0.2, "#e79f00": 0.0, "#000000": 0.2}

    def test_highlights_share_the_snp_axis(self, forest_table: Table) -> None:
        rendered = render(forest_spec(forest_table))
        highlights = rendered.by_kind(Geometry.POINT)

        assert {primitive.y for primitive in highlights} == {1.35, 1.39, 0.87}
        assert all(primitive.style["color"] == "red" for primitive in highlights)
        assert len(rendered.y_axis.ticks) == 0
        assert len(rendered.x_axis.ticks) == 6

    def test_guides(self, forest_table: Table) -> None:
        guides = render(forest_spec(forest_table)).guides

        assert [guide.title for guide in guides] == ["Adjustment Type", "Genetic Association"]
        adjustment, significance = guides
        assert [row.label for row in adjustment.rows] == ["Unadjusted", "NLP", "ICD"]
        assert [row.swatch["fill"] for row in adjustment.rows] == [
            "#0072B2",
            "#e79f00",
            "#000000",
        ]
        assert [row.label for row in significance.rows] == [
            "Not Significant",
            "Significant (p<0.004)",
        ]
        assert [row.swatch["shape"] for row in significance.rows] == ["square", "square"]
        assert [row.swatch["alpha"] for row in significance.rows] == [0.5, 1.0]

    def test_labels(self, forest_table: Table) -> None:
        rendered = render(forest_spec(forest_table))
        assert rendered.title.startswith("Effect of Smoking")
        assert rendered.y_axis.title == "Odds Ratio"
        assert rendered.x_axis.title == ""

    def test_unknown_model(self, forest_table: Table) -> None:
        table = Table.from_records(
            [*forest_table.rows(), {**forest_table.rows()[0], "model": "Bayesian"}],
        )
        with pytest.raises(ConfigurationError, match="Bayesian"):
            forest_spec(table)

    def test_missing_column(self, forest_table: Table) -> None:
        table = Table(forest_table.frame.drop("pval"))
        with pytest.raises(ConfigurationError, match="pval"):
            forest_spec(table)

    def test_config_overrides(self, forest_table: Table) -> None:
        config = ForestConfig(
            coord="identity",
            highlights={},
            scales=[
                ScaleConfig(
                    channel="shape",
                    values={"ICD": "circle", "NLP": "circle", "No Correction": "cross"},
                ),
            ],
            guides=[GuideConfig(channel="color", override_aes={"fill": "grey"})],
        )
        rendered = render(forest_spec(forest_table, config))

        assert not rendered.flipped
        assert len(rendered.by_kind(Geometry.POINT)) == 0
        assert rendered.by_kind(Geometry.POINTRANGE)[0].style["shape"] == "circle"
        assert all(row.swatch["fill"] == "grey" for row in rendered.guides[0].rows)

    def test_hidden_legend(self, forest_table: Table) -> None:
        rendered = render(forest_spec(forest_table, ForestConfig(show_legend=False)))
        assert rendered.guides == ()


class TestManhattan:
    """Test the Manhattan plot recipe."""

    def test_prepare(self, gwas_table: Table) -> None:
        data = prepare_manhattan_table(gwas_table, ManhattanConfig())

        assert len(data) == 5
        assert data.column("position") == [1, 2, 3, 4, 5]
        assert data.column("neg_log10_p")[1] == pytest.approx(8.0)

    def test_layers(self, gwas_table: Table) -> None:
        rendered = render(manhattan_spec(gwas_table))

        points = rendered.by_layer(0)
        assert len(points) == 5
        assert [primitive.style["color"] for primitive in points] == [
            "black",
            "black",
            "black",
            "blue",
            "blue",
        ]
        line = rendered.by_kind(Geometry.HLINE)[0]
        assert line.y == pytest.approx(5.0)
        assert line.style["color"] == "green"

    def test_annotations(self, gwas_table: Table) -> None:
        rendered = render(manhattan_spec(gwas_table))

        highlighted = rendered.by_layer(2)
        labels = rendered.by_kind(Geometry.TEXT)
        assert [primitive.x for primitive in highlighted] == [2.0, 5.0]
        assert [primitive.label for primitive in labels] == ["rs11", "rs21"]
        assert labels[0].nudge == (1.1, -0.2)
        assert labels[0].style["color"] == "darkgreen"

    def test_ticks(self, gwas_table: Table) -> None:
        ticks = render(manhattan_spec(gwas_table)).x_axis.ticks

        assert [tick.position for tick in ticks] == [2.0, 4.5]
        assert [tick.label for tick in ticks] == ["1", "\n2"]

    def test_no_legend(self, gwas_table: Table) -> None:
        rendered = render(manhattan_spec(gwas_table))
        assert rendered.guides == ()
        assert rendered.x_axis.title == "Chromosome"
        assert rendered.y_axis.title == "-log10(p)"

    def test_sampling(self, gwas_table: Table) -> None:
        config = ManhattanConfig(sample_size=3, seed=7)
        first = render(manhattan_spec(gwas_table, config)).by_layer(0)
        second = render(manhattan_spec(gwas_table, config)).by_layer(0)

        assert len(first) == 3
        assert [primitive.y for primitive in first] == [primitive.y for primitive in second]

    def test_chromosome_order(self, gwas_table: Table) -> None:
        config = ManhattanConfig(chromosome_order=["2", "1"])
        data = prepare_manhattan_table(gwas_table, config)
        assert data.column("CHR") == ["2", "2", "1", "1", "1"]

    def test_empty_input(self) -> None:
        rendered = render(manhattan_spec(Table.empty(MANHATTAN_SCHEMA)))

        assert rendered.primitives == ()
        assert rendered.x_axis.ticks == ()

    def test_zero_p_value(self) -> None:
        table = Table.from_records([{"SNP": "rs1", "CHR": "1", "BP": 1, "P": 0.0}])
        data = prepare_manhattan_table(table, ManhattanConfig())
        assert math.isfinite(data.column("neg_log10_p")[0])
