"""Tests for the command line interface."""

import pandas as pd
import pytest
import yaml
from click.testing import CliRunner

from emrio_tools.cli import robustness
from emrio_tools.gvc import SUMMARY_COLUMNS


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def temp_output_dir(tmp_path):
    """Create a temporary output directory."""
    return tmp_path / "output"


@pytest.fixture
def synthetic_config_file(tmp_path):
    """Create a config file with the illustrative shares."""
    shares = {"Primary": 0.45, "Secondary": 0.35, "Tertiary": 0.40}
    config = {
        "row_shares": {"A": shares, "B": shares},
        "monte_carlo": {"n_scenarios": 4},
    }
    config_path = tmp_path / "config.yaml"
    with open(config_path, "w") as f:
        yaml.dump(config, f)
    return config_path


@pytest.fixture
def sample_config_file(tmp_path):
    """Create a config file for the small sample table."""
    config = {"row_shares": {"A": {"AGR": 0.5}, "B": {"AGR": 0.3}}}
    config_path = tmp_path / "sample_config.yaml"
    with open(config_path, "w") as f:
        yaml.dump(config, f)
    return config_path


def test_cli_synthetic(cli_runner, synthetic_config_file, temp_output_dir):
    """Test a run on the synthetic table."""
    result = cli_runner.invoke(
        robustness,
        [str(synthetic_config_file), str(temp_output_dir), "--synthetic"],
    )
    assert result.exit_code == 0, result.output

    summary = pd.read_csv(temp_output_dir / "summary.csv")
    assert list(summary.columns) == SUMMARY_COLUMNS
    assert summary["ISO_COUNTRY"].tolist() == ["A", "B"]

    scenarios = pd.read_csv(temp_output_dir / "scenarios.csv")
    assert len(scenarios) == 8
    assert scenarios["scenario"].max() == 4

    with open(temp_output_dir / "metadata.yaml") as f:
        metadata = yaml.safe_load(f)
    assert metadata["n_scenarios"] == 4
    assert metadata["candidate_count"] == 18
    assert metadata["drop_count"] == 2
    assert metadata["seed"] == 20251005
    assert metadata["countries"] == ["A", "B"]
    assert metadata["negative_cells"] == [0, 0, 0, 0]


def test_cli_overrides(cli_runner, synthetic_config_file, temp_output_dir):
    """Test that command line options override the configuration."""
    result = cli_runner.invoke(
        robustness,
        [
            str(synthetic_config_file),
            str(temp_output_dir),
            "--synthetic",
            "--scenarios",
            "3",
            "--rate",
            "0.5",
            "--seed",
            "11",
            "--domestic",
        ],
    )
    assert result.exit_code == 0, result.output

    with open(temp_output_dir / "metadata.yaml") as f:
        metadata = yaml.safe_load(f)
    assert metadata["n_scenarios"] == 3
    assert metadata["cross_border"] is False
    assert metadata["candidate_count"] == 36
    assert metadata["drop_count"] == 18
    assert metadata["seed"] == 11


def test_cli_input_table(cli_runner, sample_config_file, sample_csv, temp_output_dir):
    """Test a run on a table read from CSV."""
    result = cli_runner.invoke(
        robustness,
        [
            str(sample_config_file),
            str(temp_output_dir),
            "--input",
            str(sample_csv),
            "--scenarios",
            "2",
            "--rate",
            "0.5",
        ],
    )
    assert result.exit_code == 0, result.output

    with open(temp_output_dir / "metadata.yaml") as f:
        metadata = yaml.safe_load(f)
    assert metadata["candidate_count"] == 2
    assert metadata["drop_count"] == 1
    assert len(pd.read_csv(temp_output_dir / "summary.csv")) == 2


def test_cli_requires_one_table(cli_runner, synthetic_config_file, sample_csv, temp_output_dir):
    """Test that exactly one of --input and --synthetic is accepted."""
    result = cli_runner.invoke(robustness, [str(synthetic_config_file), str(temp_output_dir)])
    assert result.exit_code != 0
    assert "exactly one" in result.output

    result = cli_runner.invoke(
        robustness,
        [
            str(synthetic_config_file),
            str(temp_output_dir),
            "--synthetic",
            "--input",
            str(sample_csv),
        ],
    )
    assert result.exit_code != 0


def test_cli_missing_shares(cli_runner, sample_config_file, temp_output_dir):
    """Test that configuration errors are reported without a traceback."""
    result = cli_runner.invoke(
        robustness,
        [str(sample_config_file), str(temp_output_dir), "--synthetic"],
    )
    assert result.exit_code == 1
    assert "Missing firm share for (A, Primary)" in result.output
    assert not (temp_output_dir / "summary.csv").exists()


def test_cli_invalid_rate(cli_runner, synthetic_config_file, temp_output_dir):
    """Test that an out-of-range rate is rejected by the option parser."""
    result = cli_runner.invoke(
        robustness,
        [str(synthetic_config_file), str(temp_output_dir), "--synthetic", "--rate", "2"],
    )
    assert result.exit_code != 0
