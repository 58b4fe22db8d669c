"""Tests for build_grid and ReferenceGridBuilder."""

import math

import numpy as np
import pandas as pd
import pytest

from refgrid.analysis.grid_config import GridConfig
from refgrid.analysis.reference_grid import ReferenceGridBuilder, build_grid, cartesian_product
from refgrid.data.views import DatasetView
from refgrid.exceptions import ColumnNotFoundError, EmptyInputError, InvalidParameterError, RefGridError


SALARY_LEVELS = ["<1000", "<2000", "2000+"]


class TestBuildGridBasics:
    """Representative values for targets and collapsed columns."""

    def test_categorical_target_holds_numerics_at_mean(self, affairs_df: pd.DataFrame) -> None:
        """One row per salary level, every numeric column held at its mean."""
        grid = build_grid(affairs_df, ["salary"])

        assert len(grid) == 3
        assert grid["salary"].tolist() == SALARY_LEVELS
        assert (grid["age"] == affairs_df["age"].mean()).all()
        assert grid["age"].iloc[0] == pytest.approx(0.11)
        assert (grid["concealing"] == affairs_df["concealing"].mean()).all()

    def test_categorical_by_numeric_target(self, affairs_df: pd.DataFrame) -> None:
        """Three salary levels crossed with ten concealing values give 30 rows."""
        grid = build_grid(affairs_df, ["salary", "concealing"], length_out=10)

        assert len(grid) == 30
        assert grid["concealing"].nunique() == 10
        assert grid["concealing"].min() == pytest.approx(-2.52)
        assert grid["concealing"].max() == pytest.approx(3.0)
        np.testing.assert_allclose(np.sort(grid["concealing"].unique()), np.linspace(-2.52, 3.0, 10))

    def test_every_column_appears_once(self, affairs_df: pd.DataFrame) -> None:
        grid = build_grid(affairs_df, ["liking", "salary"])
        assert sorted(grid.columns) == sorted(affairs_df.columns)
        assert grid.columns.is_unique

    def test_targets_come_first_in_given_order(self, affairs_df: pd.DataFrame) -> None:
        """Targets lead the column order; the first column varies slowest."""
        grid = build_grid(affairs_df, ["concealing", "salary"], length_out=2)

        assert grid.columns.tolist() == ["concealing", "salary", "age", "liking"]
        assert grid["concealing"].tolist() == pytest.approx([-2.52, -2.52, -2.52, 3.0, 3.0, 3.0])
        assert grid["salary"].tolist() == SALARY_LEVELS * 2

    def test_single_string_target(self, affairs_df: pd.DataFrame) -> None:
        pd.testing.assert_frame_equal(build_grid(affairs_df, "salary"), build_grid(affairs_df, ["salary"]))

    def test_length_out_one_yields_minimum(self, affairs_df: pd.DataFrame) -> None:
        grid = build_grid(affairs_df, ["concealing"], length_out=1)
        assert len(grid) == 1
        assert grid["concealing"].iloc[0] == affairs_df["concealing"].min()

    def test_categorical_dtype_is_preserved(self, affairs_df: pd.DataFrame) -> None:
        grid = build_grid(affairs_df, ["concealing"])
        assert isinstance(grid["salary"].dtype, pd.CategoricalDtype)
        assert grid["salary"].cat.categories.tolist() == SALARY_LEVELS

    def test_reference_level_is_first_declared_level(self, affairs_df: pd.DataFrame) -> None:
        grid = build_grid(affairs_df, ["concealing"], length_out=3)
        assert (grid["salary"] == "<1000").all()

    def test_plain_labels_use_natural_sort_order(self, mixed_df: pd.DataFrame) -> None:
        grid = build_grid(mixed_df, ["city"])
        assert grid["city"].tolist() == ["Aarau", "Bern", "Chur"]
        assert (grid["smoker"] == False).all()  # noqa: E712
        assert grid["group"].iloc[0] == pytest.approx(10 / 6)

    def test_unsortable_labels_keep_first_observed_order(self) -> None:
        df = pd.DataFrame({"label": ["b", 1, "a", 1], "x": [1.0, 2.0, 3.0, 4.0]})
        grid = build_grid(df, ["label"])
        assert grid["label"].tolist() == ["b", 1, "a"]

    def test_missing_values_are_ignored(self, mixed_df: pd.DataFrame) -> None:
        grid = build_grid(mixed_df, ["city"])
        assert (grid["income"] == 2240.0).all()

    def test_constant_numeric_target_collapses_to_one_value(self) -> None:
        df = pd.DataFrame({"x": [5.0, 5.0, 5.0], "y": [1.0, 2.0, 3.0]})
        grid = build_grid(df, ["x"], length_out=10)
        assert grid["x"].tolist() == [5.0]


class TestPolicies:
    """Collapsing of non-target columns."""

    @pytest.mark.parametrize(
        ("policy", "statistic"),
        [("mean", "mean"), ("median", "median"), ("min", "min"), ("max", "max")],
    )
    def test_numeric_statistics(self, affairs_df: pd.DataFrame, policy: str, statistic: str) -> None:
        grid = build_grid(affairs_df, ["salary"], numerics_policy=policy)
        expected = getattr(affairs_df["liking"], statistic)()
        assert (grid["liking"] == expected).all()

    def test_numeric_combination_enumerates_non_targets(self, affairs_df: pd.DataFrame) -> None:
        grid = build_grid(affairs_df, ["salary"], length_out=4, numerics_policy="combination")
        assert len(grid) == 3 * 4 * 4 * 4
        assert grid["liking"].nunique() == 4

    def test_factor_combination_enumerates_non_targets(self, mixed_df: pd.DataFrame) -> None:
        grid = build_grid(mixed_df, ["income"], length_out=2, factors_policy="combination")
        # income x city x smoker x group(mean)
        assert len(grid) == 2 * 3 * 2 * 1
        assert sorted(grid["smoker"].unique().tolist()) == [False, True]

    @pytest.mark.parametrize("numeric_range", ["iqr", "sd"])
    def test_numeric_range(self, affairs_df: pd.DataFrame, numeric_range: str) -> None:
        grid = build_grid(affairs_df, ["concealing"], length_out=5, numeric_range=numeric_range)
        col = affairs_df["concealing"]
        if numeric_range == "iqr":
            low, high = col.quantile(0.25), col.quantile(0.75)
        else:
            low, high = col.mean() - col.std(), col.mean() + col.std()
        assert grid["concealing"].min() == pytest.approx(low)
        assert grid["concealing"].max() == pytest.approx(high)
        assert len(grid) == 5

    def test_policy_enums_are_accepted(self, affairs_df: pd.DataFrame) -> None:
        from refgrid.analysis.policies import FactorsPolicy, NumericsPolicy

        grid = build_grid(
            affairs_df,
            ["concealing"],
            numerics_policy=NumericsPolicy.MEDIAN,
            factors_policy=FactorsPolicy.COMBINATION,
        )
        assert len(grid) == 10 * 3


class TestSchema:
    """Explicit column kinds."""

    def test_override_integer_codes_as_categorical(self, mixed_df: pd.DataFrame) -> None:
        grid = build_grid(mixed_df, ["group"], schema={"group": "categorical"})
        assert grid["group"].tolist() == [1, 2, 3]

    def test_override_unknown_column(self, mixed_df: pd.DataFrame) -> None:
        with pytest.raises(ColumnNotFoundError):
            build_grid(mixed_df, ["city"], schema={"nope": "numeric"})

    def test_booleans_are_categorical(self, mixed_df: pd.DataFrame) -> None:
        grid = build_grid(mixed_df, ["smoker"])
        assert grid["smoker"].tolist() == [False, True]


class TestTargetSpecifications:
    """Explicit values and shortcuts in target strings."""

    def test_explicit_numeric_values(self, affairs_df: pd.DataFrame) -> None:
        grid = build_grid(affairs_df, ["salary", "age=[0, 0.5]"])
        assert len(grid) == 6
        assert grid.columns.tolist() == ["salary", "age", "concealing", "liking"]
        assert sorted(grid["age"].unique()) == [0.0, 0.5]

    def test_explicit_categorical_values(self, affairs_df: pd.DataFrame) -> None:
        grid = build_grid(affairs_df, ["salary=['2000+', '<1000']"])
        assert grid["salary"].tolist() == ["2000+", "<1000"]

    def test_unknown_category_is_rejected(self, affairs_df: pd.DataFrame) -> None:
        with pytest.raises(InvalidParameterError):
            build_grid(affairs_df, ["salary=['5000+']"])

    def test_non_numeric_values_for_numeric_column(self, affairs_df: pd.DataFrame) -> None:
        with pytest.raises(InvalidParameterError):
            build_grid(affairs_df, ["age=['old']"])

    def test_sd_shortcut(self, affairs_df: pd.DataFrame) -> None:
        grid = build_grid(affairs_df, ["liking=[sd]"])
        col = affairs_df["liking"]
        assert grid["liking"].tolist() == pytest.approx([col.mean() - col.std(), col.mean(), col.mean() + col.std()])

    def test_fivenum_and_minmax_shortcuts(self, affairs_df: pd.DataFrame) -> None:
        grid = build_grid(affairs_df, ["liking=[fivenum]", "concealing=[minmax]"])
        assert len(grid) == 5 * 2
        assert sorted(grid["concealing"].unique()) == [-2.52, 3.0]

    def test_shortcut_on_categorical_column(self, affairs_df: pd.DataFrame) -> None:
        with pytest.raises(InvalidParameterError):
            build_grid(affairs_df, ["salary=[sd]"])

    def test_unknown_value_for_boolean_column_is_rejected(self) -> None:
        df = pd.DataFrame({"smoker": [True, False], "x": [1.0, 2.0]})
        with pytest.raises(InvalidParameterError, match="maybe"):
            build_grid(df, ["smoker=['maybe']"])

    def test_unobserved_plain_label_is_rejected(self, mixed_df: pd.DataFrame) -> None:
        with pytest.raises(InvalidParameterError, match="Zurich"):
            build_grid(mixed_df, ["city=['Zurich']"])

    def test_observed_plain_labels(self, mixed_df: pd.DataFrame) -> None:
        grid = build_grid(mixed_df, ["city=['Chur', 'Bern']"])
        assert grid["city"].tolist() == ["Chur", "Bern"]

    def test_non_string_column_label(self) -> None:
        df = pd.DataFrame({0: [1.0, 2.0], 1: ["a", "b"]})
        grid = build_grid(df, [0], length_out=2)
        assert grid.columns.tolist() == [0, 1]
        assert grid[0].tolist() == [1.0, 2.0]
        assert (grid[1] == "a").all()


class TestErrors:
    """Validation failures surface before any computation."""

    def test_missing_target(self, affairs_df: pd.DataFrame) -> None:
        with pytest.raises(ColumnNotFoundError) as excinfo:
            build_grid(affairs_df, ["income"])
        assert isinstance(excinfo.value, KeyError)
        assert isinstance(excinfo.value, RefGridError)
        assert "income" in str(excinfo.value)

    @pytest.mark.parametrize("table", [pd.DataFrame(), pd.DataFrame({"x": pd.Series([], dtype=float)})])
    def test_empty_table(self, table: pd.DataFrame) -> None:
        with pytest.raises(EmptyInputError):
            build_grid(table, ["x"])

    @pytest.mark.parametrize("length_out", [0, -3, 2.5, True, "10"])
    def test_invalid_length_out(self, affairs_df: pd.DataFrame, length_out: object) -> None:
        with pytest.raises(InvalidParameterError):
            build_grid(affairs_df, ["concealing"], length_out=length_out)

    @pytest.mark.parametrize(
        "kwargs",
        [{"numerics_policy": "mode"}, {"factors_policy": "mean"}, {"numeric_range": "full"}],
    )
    def test_unknown_policy(self, affairs_df: pd.DataFrame, kwargs: dict[str, str]) -> None:
        with pytest.raises(InvalidParameterError):
            build_grid(affairs_df, ["salary"], **kwargs)

    @pytest.mark.parametrize("targets", [[], ["salary", "salary"], ["age", "age=[1, 2]"]])
    def test_empty_or_duplicate_targets(self, affairs_df: pd.DataFrame, targets: list[str]) -> None:
        with pytest.raises(InvalidParameterError):
            build_grid(affairs_df, targets)

    def test_column_without_observations(self) -> None:
        df = pd.DataFrame({"x": [1.0, 2.0], "y": [np.nan, np.nan]})
        with pytest.raises(EmptyInputError):
            build_grid(df, ["x"])

    def test_table_must_be_a_dataframe(self) -> None:
        with pytest.raises(InvalidParameterError):
            build_grid({"x": [1.0, 2.0]}, ["x"])  # type: ignore[arg-type]


class TestGridProperties:
    """Row count, determinism, independence from the source, chaining."""

    @pytest.mark.parametrize("numerics_policy", ["mean", "combination"])
    @pytest.mark.parametrize("factors_policy", ["reference_level", "combination"])
    @pytest.mark.parametrize("targets", [["salary"], ["concealing"], ["salary", "liking"]])
    def test_row_count_is_product_of_cardinalities(
        self,
        affairs_df: pd.DataFrame,
        targets: list[str],
        numerics_policy: str,
        factors_policy: str,
    ) -> None:
        config = GridConfig(length_out=3, numerics_policy=numerics_policy, factors_policy=factors_policy)
        result = ReferenceGridBuilder(DatasetView.from_frame(affairs_df), targets, config).fit().result()
        assert result.n_rows == math.prod(result.cardinalities.values())

    def test_deterministic(self, affairs_df: pd.DataFrame) -> None:
        first = build_grid(affairs_df, ["salary", "concealing"], length_out=7)
        second = build_grid(affairs_df, ["salary", "concealing"], length_out=7)
        pd.testing.assert_frame_equal(first, second)

    def test_source_is_not_modified(self, affairs_df: pd.DataFrame) -> None:
        before = affairs_df.copy()
        grid = build_grid(affairs_df, ["salary"])
        grid.loc[:, "age"] = 100.0
        pd.testing.assert_frame_equal(affairs_df, before)

    def test_grid_is_valid_input_for_a_second_call(self, affairs_df: pd.DataFrame) -> None:
        first = build_grid(affairs_df, ["concealing", "liking"], length_out=5)
        second = build_grid(
            first,
            ["concealing"],
            length_out=5,
            numerics_policy="combination",
            factors_policy="combination",
        )
        assert len(first) == 25
        assert len(second) == 25
        np.testing.assert_allclose(np.sort(second["concealing"].unique()), np.sort(first["concealing"].unique()))
        assert (second["salary"] == "<1000").all()

    def test_chaining_coarsens_a_target_and_keeps_earlier_levels(self, affairs_df: pd.DataFrame) -> None:
        """A fine grid fed back with a smaller length_out keeps its enumerated levels."""
        fine = build_grid(affairs_df, ["salary", "concealing"], length_out=10)
        coarse = build_grid(fine, "concealing", length_out=4, factors_policy="combination")

        assert len(fine) == 30
        assert len(coarse) == 4 * 3
        assert coarse.columns.tolist() == ["concealing", "salary", "age", "liking"]
        assert coarse.nunique().to_dict() == {"concealing": 4, "salary": 3, "age": 1, "liking": 1}
        np.testing.assert_allclose(coarse["concealing"].unique(), np.linspace(-2.52, 3.0, 4))
        assert coarse["salary"].unique().tolist() == SALARY_LEVELS

    def test_chaining_does_not_respread_collapsed_columns(self, affairs_df: pd.DataFrame) -> None:
        fine = build_grid(affairs_df, ["salary", "concealing"], length_out=10)
        refined = build_grid(fine, "salary", length_out=5, numerics_policy="combination")

        assert len(refined) == 3 * 5
        assert refined.nunique().to_dict() == {"salary": 3, "concealing": 5, "age": 1, "liking": 1}
        assert refined["liking"].iloc[0] == pytest.approx(3.5)


class TestCartesianProduct:
    """Low-level assembly of the grid."""

    def test_first_column_varies_slowest(self) -> None:
        grid = cartesian_product({"a": pd.Series([1, 2]), "b": pd.Series(["x", "y", "z"])})
        assert grid["a"].tolist() == [1, 1, 1, 2, 2, 2]
        assert grid["b"].tolist() == ["x", "y", "z"] * 2
