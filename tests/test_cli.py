"""Tests for the command line interface."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from mapset_timing import __version__
from mapset_timing.cli.main import main
from mapset_timing.config import get_settings


def write_mapset(directory: Path, hit_objects: list[dict], timing_lines: list[dict] | None = None) -> Path:
    path = directory / "mapset.json"
    path.write_text(
        json.dumps(
            {
                "title": "Test Song",
                "beatmaps": [
                    {
                        "version": "Hard",
                        "star_rating": 3.0,
                        "timing_lines": timing_lines or [{"offset": 0, "uninherited": True, "ms_per_beat": 500}],
                        "hit_objects": hit_objects,
                    }
                ],
            }
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def clean_mapset(temp_output_dir: Path) -> Path:
    """Return a mapset without any issues."""
    return write_mapset(temp_output_dir, [{"type": "circle", "time": 500 * i} for i in range(10)])


@pytest.fixture
def unsnapped_mapset(temp_output_dir: Path) -> Path:
    """Return a mapset with one unsnapped circle."""
    circles = [{"type": "circle", "time": 500 * i} for i in range(10)]
    return write_mapset(temp_output_dir, circles + [{"type": "circle", "time": 5128}])


class TestCheckCommand:
    """Tests for the check command."""

    def test_clean_mapset(self, runner: CliRunner, clean_mapset: Path):
        """A clean mapset exits successfully."""
        result = runner.invoke(main, ["check", str(clean_mapset)])

        assert result.exit_code == 0
        assert "No issues found." in result.output

    def test_problem_exits_with_error(self, runner: CliRunner, unsnapped_mapset: Path):
        """Problems are printed per difficulty and fail the command."""
        result = runner.invoke(main, ["check", str(unsnapped_mapset)])

        assert result.exit_code == 1
        assert "Hard" in result.output
        assert "00:05:128 - Circle unsnapped by 3.0 ms." in result.output

    def test_json_output(self, runner: CliRunner, unsnapped_mapset: Path):
        """JSON output lists the issues with their level and timestamp."""
        result = runner.invoke(main, ["check", str(unsnapped_mapset), "--json"])

        data = json.loads(result.stdout)
        assert data["success"] is True
        assert data["errors"] == []
        unsnaps = [issue for issue in data["issues"] if issue["check"] == "unsnaps"]
        assert unsnaps == [
            {
                "check": "unsnaps",
                "template": "Problem",
                "level": "Problem",
                "message": "00:05:128 - Circle unsnapped by 3.0 ms.",
                "beatmap": "Hard",
                "time": 5128,
                "timestamp": "00:05:128",
            }
        ]

    def test_min_level_filters_output(self, runner: CliRunner, temp_output_dir: Path):
        """Issues below the minimum level are hidden but still decide the exit code."""
        mapset = write_mapset(temp_output_dir, [{"type": "circle", "time": 5001.5}])

        result = runner.invoke(main, ["check", str(mapset), "--json", "--min-level", "problem"])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["issues"] == []

    def test_failing_difficulty(self, runner: CliRunner, temp_output_dir: Path):
        """A difficulty that cannot be checked fails the command."""
        path = temp_output_dir / "mapset.json"
        path.write_text(json.dumps({"beatmaps": [{"version": "Empty"}]}), encoding="utf-8")

        result = runner.invoke(main, ["check", str(path), "--json"])

        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["success"] is False
        assert [issue["message"] for issue in data["issues"]] == ["There are no timing lines."]

    def test_invalid_file(self, runner: CliRunner, temp_output_dir: Path):
        """Malformed input is reported without a traceback."""
        path = temp_output_dir / "mapset.json"
        path.write_text("[]", encoding="utf-8")

        result = runner.invoke(main, ["check", str(path)])

        assert result.exit_code == 1
        assert "Error" in result.output

    def test_overrides(self, runner: CliRunner, clean_mapset: Path):
        """Command line options override the settings."""
        result = runner.invoke(main, ["check", str(clean_mapset), "--nightcore-cymbals", "--workers", "2"])

        assert result.exit_code == 0
        settings = get_settings()
        assert settings.nightcore_cymbals is True
        assert settings.max_workers == 2


class TestInfoCommand:
    """Tests for the info command."""

    def test_shows_settings(self, runner: CliRunner):
        """Current settings are listed."""
        result = runner.invoke(main, ["info"])

        assert result.exit_code == 0
        assert "snap_tolerance_ms: 1.0" in result.output
        assert "nightcore_cymbals: False" in result.output


class TestChecksCommand:
    """Tests for the checks command."""

    def test_lists_checks(self, runner: CliRunner):
        """Every check is listed with its category and issue templates."""
        result = runner.invoke(main, ["checks"])

        assert result.exit_code == 0
        for name in ("unsnaps", "rare_divisors", "snap_consistency", "inconsistent_lines"):
            assert name in result.output
        assert "(Timing)" in result.output
        assert "Snap Consistency:" in result.output
        assert "Toggles Kiai:" in result.output


def test_version(runner: CliRunner):
    """Version option prints the package version."""
    result = runner.invoke(main, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output
