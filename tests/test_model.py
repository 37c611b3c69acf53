"""Tests for WoeModel transform, IV analysis and persistence."""

import json
from decimal import Decimal

import numpy as np
import pandas as pd
import pytest

from woekit import (
    DuplicateColumnError,
    ModelLoadError,
    ModelSaveError,
    WoeEncoder,
    WoeModel,
    information_value,
)
from woekit.logging_config import logger, setup_logger

setup_logger(level="INFO")


@pytest.fixture
def credit_model(credit_df):
    encoder = WoeEncoder(
        input_cols=["grade", "region", "term"],
        label_col="default",
        output_col_postfix="woe",
        uid="woe_credit",
    )
    return encoder.fit(credit_df)


class TestTransform:
    """Test cases for WoeModel.transform."""

    def test_round_trip_lookup(self, credit_df, credit_model):
        """Every row gets the WOE stored for its category."""
        result = credit_model.transform(credit_df)

        for col in credit_model.input_cols:
            table = credit_model.get_woe_table(col).set_index("category")["woe"]
            expected = credit_df[col].map(table)
            np.testing.assert_allclose(result[f"{col}_woe"], expected)

    def test_appends_columns_without_mutating_input(self, credit_df, credit_model):
        original_columns = list(credit_df.columns)
        result = credit_model.transform(credit_df)

        assert list(credit_df.columns) == original_columns
        assert list(result.columns) == original_columns + credit_model.output_cols
        pd.testing.assert_frame_equal(result[original_columns], credit_df)

    def test_unseen_category_is_nan(self, example_df):
        model = WoeEncoder(input_cols=["x"], label_col="y", output_col_postfix="woe").fit(
            example_df
        )
        new_data = pd.DataFrame({"x": ["a", "zzz", "b"]})

        result = model.transform(new_data)

        assert np.isnan(result["x_woe"].iloc[1])
        assert result["x_woe"].iloc[0] == pytest.approx(np.log(1 / 3))
        assert result["x_woe"].iloc[2] == pytest.approx(np.log(2.01 / 3 / 0.01))

    def test_missing_category_uses_fitted_null_group(self, missing_df):
        model = WoeEncoder(input_cols=["x"], label_col="y", output_col_postfix="woe").fit(
            missing_df
        )
        table = model.get_woe_table("x")
        null_woe = table.loc[table["category"].isna(), "woe"].iloc[0]

        result = model.transform(pd.DataFrame({"x": [None, np.nan, "b"]}))

        assert result["x_woe"].iloc[0] == pytest.approx(null_woe)
        assert result["x_woe"].iloc[1] == pytest.approx(null_woe)

    def test_missing_category_without_null_group_is_nan(self, example_df):
        model = WoeEncoder(input_cols=["x"], label_col="y", output_col_postfix="woe").fit(
            example_df
        )
        result = model.transform(pd.DataFrame({"x": [None, "a"]}))

        assert np.isnan(result["x_woe"].iloc[0])
        assert not np.isnan(result["x_woe"].iloc[1])

    def test_label_not_needed(self, credit_df, credit_model):
        result = credit_model.transform(credit_df.drop(columns="default"))
        assert "grade_woe" in result.columns

    def test_missing_input_column_raises(self, credit_df, credit_model):
        with pytest.raises(ValueError, match="grade"):
            credit_model.transform(credit_df.drop(columns="grade"))

    def test_existing_output_column_raises(self, credit_df, credit_model):
        with pytest.raises(DuplicateColumnError):
            credit_model.transform(credit_df.assign(term_woe=1.0))

    def test_logs_information_value(self, credit_df, credit_model):
        messages = []
        handler_id = logger.add(messages.append, level="INFO", format="{message}")
        try:
            credit_model.transform(credit_df)
        finally:
            logger.remove(handler_id)

        logged = "".join(messages)
        for col in credit_model.input_cols:
            assert f"iv value for {col} is:" in logged


class TestModelAccessors:
    """Test cases for IV analysis, schema and copy."""

    def test_information_values(self, credit_model):
        ivs = credit_model.information_values()

        assert list(ivs) == ["grade", "region", "term"]
        for col, iv in ivs.items():
            table = credit_model.get_woe_table(col)
            expected = float(np.sum(table["woe"] * (table["p1"] - table["p0"])))
            assert iv == pytest.approx(expected)
            assert credit_model.information_value(col) == pytest.approx(expected)

    def test_unknown_feature_raises(self, credit_model):
        with pytest.raises(ValueError, match="not found"):
            credit_model.information_value("nope")

    def test_iv_analysis(self, credit_model):
        analysis = credit_model.get_iv_analysis()

        assert list(analysis.columns) == [
            "feature",
            "output_col",
            "n_categories",
            "iv",
            "predictive_power",
        ]
        assert analysis["feature"].tolist() == ["grade", "region", "term"]
        assert analysis.set_index("feature").loc["grade", "n_categories"] == 4
        assert analysis.set_index("feature").loc["term", "n_categories"] == 2

    def test_tables_are_copies(self, credit_model):
        table = credit_model.get_woe_table("grade")
        table["woe"] = 0.0

        assert (credit_model.get_woe_table("grade")["woe"] != 0.0).any()

    def test_wrapper_tables_are_copies(self, credit_df, credit_model):
        expected = credit_model.transform(credit_df)

        wrapper = credit_model.woe_table_wrappers[0]
        wrapper.woe_table.loc[0, "woe"] = 99.0
        wrapper.woe_table.drop(index=wrapper.woe_table.index, inplace=True)

        assert (credit_model.get_woe_table("grade")["woe"] != 99.0).all()
        pd.testing.assert_frame_equal(credit_model.transform(credit_df), expected)

    def test_get_all_woe_tables(self, credit_model):
        tables = credit_model.get_all_woe_tables()
        assert list(tables) == ["grade", "region", "term"]
        assert list(tables["region"].columns) == ["category", "p1", "p0", "woe"]

    def test_transform_schema(self, credit_model):
        assert credit_model.transform_schema(["grade", "region", "term"]) == [
            "grade",
            "region",
            "term",
            "grade_woe",
            "region_woe",
            "term_woe",
        ]

    def test_copy_with_new_postfix(self, credit_df, credit_model):
        copied = credit_model.copy(output_col_postfix="enc")

        assert copied.uid == credit_model.uid
        assert copied.output_cols == ["grade_enc", "region_enc", "term_enc"]
        assert credit_model.output_cols == ["grade_woe", "region_woe", "term_woe"]
        np.testing.assert_allclose(
            copied.transform(credit_df)["grade_enc"],
            credit_model.transform(credit_df)["grade_woe"],
        )

    def test_copy_rejects_unknown_params(self, credit_model):
        with pytest.raises(ValueError, match="Invalid parameters"):
            credit_model.copy(n_bins=5)


class TestPersistence:
    """Test cases for WoeModel.save and WoeModel.load."""

    def test_save_layout(self, tmp_path, credit_model):
        path = tmp_path / "model"
        credit_model.save(path)

        assert (path / "metadata.json").is_file()
        for col in credit_model.input_cols:
            assert (path / f"data_{col}.parquet").is_file()

        metadata = json.loads((path / "metadata.json").read_text())
        assert metadata["class"] == "WoeModel"
        assert metadata["uid"] == "woe_credit"
        assert metadata["params"] == {"output_col_postfix": "woe", "label_col": "default"}
        assert [t["input_col"] for t in metadata["tables"]] == ["grade", "region", "term"]
        assert [t["category_encoding"] for t in metadata["tables"]] == ["native"] * 3

    def test_load_restores_model(self, tmp_path, credit_df, credit_model):
        path = tmp_path / "model"
        credit_model.save(path)

        loaded = WoeModel.load(path)

        assert loaded.uid == credit_model.uid
        assert loaded.label_col == credit_model.label_col
        assert loaded.output_col_postfix == credit_model.output_col_postfix
        assert loaded.input_cols == credit_model.input_cols
        assert loaded.output_cols == credit_model.output_cols
        for col in credit_model.input_cols:
            original = credit_model.get_woe_table(col)
            restored = loaded.get_woe_table(col)
            assert restored["category"].tolist() == original["category"].tolist()
            np.testing.assert_allclose(restored[["p1", "p0", "woe"]], original[["p1", "p0", "woe"]])
            assert information_value(restored) == pytest.approx(information_value(original))

        pd.testing.assert_frame_equal(loaded.transform(credit_df), credit_model.transform(credit_df))

    def test_load_keeps_null_category(self, tmp_path, missing_df):
        model = WoeEncoder(input_cols=["x"], label_col="y", output_col_postfix="woe").fit(
            missing_df
        )
        model.save(tmp_path / "model")
        loaded = WoeModel.load(tmp_path / "model")

        new_data = pd.DataFrame({"x": [None, "a", "c"]})
        np.testing.assert_allclose(
            loaded.transform(new_data)["x_woe"], model.transform(new_data)["x_woe"]
        )

    def test_save_refuses_existing_directory(self, tmp_path, credit_model):
        path = tmp_path / "model"
        credit_model.save(path)

        with pytest.raises(FileExistsError):
            credit_model.save(path)

        credit_model.copy(label_col="target").save(path, overwrite=True)
        assert WoeModel.load(path).label_col == "target"

    def test_mixed_type_categories_round_trip(self, tmp_path):
        df = pd.DataFrame({"x": ["a", 1, "a", 1, None], "y": [1, 0, 0, 1, 1]})
        model = WoeEncoder(input_cols=["x"], label_col="y", output_col_postfix="woe").fit(df)
        path = tmp_path / "model"

        model.save(path)
        loaded = WoeModel.load(path)

        metadata = json.loads((path / "metadata.json").read_text())
        assert metadata["tables"][0]["category_encoding"] == "tagged"
        assert loaded.get_woe_table("x")["category"].tolist() == ["a", 1, None]

        new_data = pd.DataFrame({"x": [1, "a", None, "1", 2]})
        expected = model.transform(new_data)["x_woe"]
        result = loaded.transform(new_data)["x_woe"]
        np.testing.assert_allclose(result, expected)
        assert np.isnan(result.iloc[3])
        assert np.isnan(result.iloc[4])

    def test_unsupported_category_fails_before_writing(self, tmp_path):
        df = pd.DataFrame({"x": [Decimal("1.5"), "a", Decimal("1.5")], "y": [1, 0, 0]})
        model = WoeEncoder(input_cols=["x"], label_col="y", output_col_postfix="woe").fit(df)
        path = tmp_path / "model"

        with pytest.raises(ModelSaveError, match="Decimal"):
            model.save(path)

        assert list(tmp_path.iterdir()) == []

    def test_failed_overwrite_keeps_previous_model(self, tmp_path, credit_model):
        path = tmp_path / "model"
        credit_model.save(path)
        df = pd.DataFrame({"x": [Decimal("1.5"), "a"], "y": [1, 0]})
        unsavable = WoeEncoder(input_cols=["x"], label_col="y", output_col_postfix="woe").fit(df)

        with pytest.raises(ModelSaveError):
            unsavable.save(path, overwrite=True)

        assert WoeModel.load(path).input_cols == credit_model.input_cols
        assert list(tmp_path.iterdir()) == [path]

    def test_write_error_keeps_previous_model(self, tmp_path, monkeypatch, credit_model):
        path = tmp_path / "model"
        credit_model.save(path)

        def fail_to_parquet(self, *args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr(pd.DataFrame, "to_parquet", fail_to_parquet)
        with pytest.raises(OSError, match="disk full"):
            credit_model.copy(label_col="target").save(path, overwrite=True)
        monkeypatch.undo()

        assert WoeModel.load(path).label_col == "default"
        assert list(tmp_path.iterdir()) == [path]

    def test_load_missing_metadata(self, tmp_path):
        with pytest.raises(ModelLoadError, match="metadata.json"):
            WoeModel.load(tmp_path)

    def test_load_malformed_metadata(self, tmp_path):
        (tmp_path / "metadata.json").write_text("{not json")
        with pytest.raises(ModelLoadError, match="Malformed"):
            WoeModel.load(tmp_path)

    def test_load_wrong_class(self, tmp_path):
        (tmp_path / "metadata.json").write_text(json.dumps({"class": "OtherModel"}))
        with pytest.raises(ModelLoadError, match="Expected metadata"):
            WoeModel.load(tmp_path)

    def test_load_incomplete_metadata(self, tmp_path):
        (tmp_path / "metadata.json").write_text(json.dumps({"class": "WoeModel", "uid": "x"}))
        with pytest.raises(ModelLoadError, match="Incomplete"):
            WoeModel.load(tmp_path)

    def test_load_missing_table_file(self, tmp_path, credit_model):
        path = tmp_path / "model"
        credit_model.save(path)
        (path / "data_region.parquet").unlink()

        with pytest.raises(ModelLoadError, match="data_region.parquet"):
            WoeModel.load(path)

    def test_load_wrong_table_columns(self, tmp_path, credit_model):
        path = tmp_path / "model"
        credit_model.save(path)
        pd.DataFrame({"region": ["north"], "woe": [0.1]}).to_parquet(
            path / "data_region.parquet", index=False
        )

        with pytest.raises(ModelLoadError, match="expected"):
            WoeModel.load(path)
