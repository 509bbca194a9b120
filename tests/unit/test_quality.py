"""
Unit Tests - Data Quality
"""
import polars as pl

from track_analytics.quality import (
    DataValidator,
    ValidationSeverity,
    ValidationStatus,
    create_tracks_validator,
)


class TestDataValidator:
    """Tests for DataValidator"""

    def test_not_null_check_passes(self):
        """Test not null check with valid data"""
        df = pl.DataFrame({"artist": ["a", "b", "c"]})

        result = DataValidator().add_not_null_check("artist").validate(df)

        assert result.status == ValidationStatus.PASSED
        assert result.passed_checks == 1

    def test_not_null_check_fails(self):
        """Test not null check with null values"""
        df = pl.DataFrame({"artist": ["a", None, "c"]})

        result = DataValidator().add_not_null_check("artist").validate(df)

        assert result.status == ValidationStatus.FAILED
        assert result.failed_checks == 1
        assert result.checks[0].failed_rows == 1

    def test_range_check_ignores_nulls(self):
        """Test nulls are not counted as out of range"""
        df = pl.DataFrame({"views": [10.0, None, 0.0]})

        result = DataValidator().add_non_negative_check("views").validate(df)

        assert result.status == ValidationStatus.PASSED

    def test_range_check_fails(self):
        """Test values outside the range"""
        df = pl.DataFrame({"energy": [0.5, 1.5, -0.1]})

        result = DataValidator().add_range_check("energy", min_value=0, max_value=1).validate(df)

        assert result.status == ValidationStatus.FAILED
        assert result.checks[0].failed_rows == 2

    def test_enum_check(self):
        """Test values outside the allowed set"""
        df = pl.DataFrame({"album_type": ["album", "ep", None]})

        result = DataValidator().add_enum_check("album_type", ["album", "single"]).validate(df)

        assert result.status == ValidationStatus.FAILED
        assert result.checks[0].failed_rows == 1

    def test_missing_column(self):
        """Test a check on an absent column fails"""
        result = DataValidator().add_not_null_check("artist").validate(pl.DataFrame({"track": ["x"]}))

        assert result.status == ValidationStatus.FAILED
        assert "not found" in result.checks[0].message

    def test_warning_gives_partial(self):
        """Test warnings do not fail the suite"""
        df = pl.DataFrame({"artist": [None]})

        result = (
            DataValidator()
            .add_not_null_check("artist", severity=ValidationSeverity.WARNING)
            .validate(df)
        )

        assert result.status == ValidationStatus.PARTIAL
        assert result.warning_count == 1

    def test_strict_mode_fails_on_warning(self):
        df = pl.DataFrame({"artist": [None]})

        result = (
            DataValidator(strict_mode=True)
            .add_not_null_check("artist", severity=ValidationSeverity.WARNING)
            .validate(df)
        )

        assert result.status == ValidationStatus.FAILED

    def test_custom_check(self):
        """Test an arbitrary failing-row expression"""
        df = pl.DataFrame({"views": [10.0, 5.0, None], "likes": [1, 9, 3]})

        result = (
            DataValidator()
            .add_custom_check(
                "likes_within_views", "likes",
                (pl.col("likes") > pl.col("views")).fill_null(False),
                "rows with more likes than views",
            )
            .validate(df)
        )

        assert result.status == ValidationStatus.FAILED
        assert result.checks[0].failed_rows == 1
        assert result.checks[0].message == "Column 'likes' has 1 rows with more likes than views"

    def test_success_rate(self):
        df = pl.DataFrame({"artist": ["a"], "views": [-1.0]})

        result = (
            DataValidator()
            .add_not_null_check("artist")
            .add_non_negative_check("views")
            .validate(df)
        )

        assert result.success_rate == 50.0
        assert [check.name for check in result.failures()] == ["range_views"]


class TestTracksValidator:
    """Tests for the pre-configured track validator"""

    def test_generated_tracks_pass(self, generated_tracks_df):
        """Test generated data passes every blocking check"""
        result = create_tracks_validator().validate(generated_tracks_df)

        assert result.status in (ValidationStatus.PASSED, ValidationStatus.PARTIAL)
        assert result.failed_checks == 0

    def test_negative_stream_rejected(self, generated_tracks_df):
        df = generated_tracks_df.head(5).with_columns(pl.lit(-1).alias("stream"))

        result = create_tracks_validator().validate(df)

        assert result.status == ValidationStatus.FAILED
        assert "range_stream" in [check.name for check in result.failures()]

    def test_unknown_platform_rejected(self, generated_tracks_df):
        df = generated_tracks_df.head(5).with_columns(pl.lit("Tidal").alias("most_played_on"))

        result = create_tracks_validator().validate(df)

        assert "enum_most_played_on" in [check.name for check in result.failures()]
