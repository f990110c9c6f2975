"""Command line interface for the EMRIO internal robustness analysis."""

import logging
from pathlib import Path

import click
import yaml

from emrio_tools.analysis import run_analysis
from emrio_tools.configurations.config import AnalysisConfig, MonteCarloConfig
from emrio_tools.errors import EMRIOError
from emrio_tools.readers.synthetic import make_synthetic_base_table
from emrio_tools.readers.table_reader import read_base_table

logger = logging.getLogger(__name__)


@click.command()
@click.argument("config_path", type=click.Path(exists=True, path_type=Path))
@click.argument("output_dir", type=click.Path(path_type=Path))
@click.option(
    "--input",
    "input_path",
    type=click.Path(exists=True, path_type=Path),
    help="Path to CSV file containing the sector-level base table",
)
@click.option(
    "--synthetic",
    is_flag=True,
    default=False,
    help="Use the illustrative two-country, three-sector table instead of --input",
)
@click.option(
    "--scenarios",
    type=click.IntRange(min=1),
    help="Number of Monte Carlo scenarios (overrides the configuration)",
)
@click.option(
    "--rate",
    type=click.FloatRange(0.0, 1.0),
    help="Share of candidate FF links reallocated per scenario (overrides the configuration)",
)
@click.option("--seed", type=int, help="Random seed (overrides the configuration)")
@click.option(
    "--domestic",
    is_flag=True,
    default=False,
    help="Also reallocate FF links within a country",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    default="INFO",
    help="Set the logging level",
)
def robustness(
    config_path: Path,
    output_dir: Path,
    input_path: Path | None,
    synthetic: bool,
    scenarios: int | None,
    rate: float | None,
    seed: int | None,
    domestic: bool,
    log_level: str,
) -> None:
    """Run the Monte Carlo internal robustness analysis of a base table.

    Writes scenarios.csv (indicators of every scenario), summary.csv (per-country
    uncertainty) and metadata.yaml (sampling information) to OUTPUT_DIR.

    Args:
        config_path: Path to YAML configuration file
        output_dir: Directory to write output files to
        input_path: Optional path to the base table CSV
        synthetic: Use the illustrative table
        scenarios: Optional override of the number of scenarios
        rate: Optional override of the reallocation rate
        seed: Optional override of the random seed
        domestic: Include within-country FF links
        log_level: Logging level to use
    """
    # Setup logging
    logging.basicConfig(
        level=getattr(logging, log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if synthetic == (input_path is not None):
        raise click.UsageError("Provide exactly one of --input or --synthetic")

    # Load configuration
    logger.info(f"Loading configuration from {config_path}")
    config = AnalysisConfig.from_yaml(config_path)

    overrides = {}
    if scenarios is not None:
        overrides["n_scenarios"] = scenarios
    if rate is not None:
        overrides["rate"] = rate
    if seed is not None:
        overrides["seed"] = seed
    if domestic:
        overrides["cross_border"] = False
    if overrides:
        logger.info(f"Overriding Monte Carlo settings: {overrides}")
        config.monte_carlo = MonteCarloConfig.model_validate(
            {**config.monte_carlo.model_dump(), **overrides}
        )

    try:
        if synthetic:
            logger.info("Using the synthetic base table")
            base_table = make_synthetic_base_table()
        else:
            logger.info(f"Loading base table from {input_path}")
            base_table = read_base_table(input_path)

        result = run_analysis(base_table, config)
    except EMRIOError as e:
        raise click.ClickException(str(e)) from e

    # Create output directory if it doesn't exist
    output_dir.mkdir(parents=True, exist_ok=True)

    scenarios_path = output_dir / "scenarios.csv"
    result.stacked_scenarios().to_csv(scenarios_path, index=False)
    logger.info(f"Saved per-scenario indicators to {scenarios_path}")

    summary_path = output_dir / "summary.csv"
    result.summary.to_csv(summary_path, index=False)
    logger.info(f"Saved summary to {summary_path}")

    metadata = result.scenarios.metadata.to_dict()
    metadata["n_scenarios"] = len(result.scenarios)
    metadata["countries"] = result.system.countries
    metadata["negative_cells"] = result.scenarios.negative_cell_counts()
    metadata_path = output_dir / "metadata.yaml"
    with open(metadata_path, "w") as f:
        yaml.safe_dump(metadata, f, sort_keys=False)
    logger.info(f"Saved metadata to {metadata_path}")

    logger.info("Done!")


if __name__ == "__main__":
    robustness()
