"""
Incident Trend Pipeline - Main Script

Runs the complete pipeline once, top to bottom:
1. Load: fetch the raw incident table
2. Clean: keep date, hour, coordinates and lethality flag
3. Aggregate: monthly incident counts
4. Forecast: seasonal exponential smoothing with explicit model selection

Results are printed to the console; run ``streamlit run viz.py`` for charts.
"""

import logging
import traceback

import click

from incidents import PipelineConfig, PipelineError, ResultsReporter, ValidationConfig, run_pipeline
from incidents.config import DEFAULT_SOURCE_URL
from incidents.pipeline import MODEL_CHOICES

# Set up logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


@click.command()
@click.option(
    "--source",
    "-s",
    envvar="INCIDENTS_SOURCE_URL",
    default=DEFAULT_SOURCE_URL,
    show_default=True,
    help="URL or local path of the incident CSV",
)
@click.option(
    "--model",
    "-m",
    type=click.Choice(list(MODEL_CHOICES), case_sensitive=False),
    default="ets",
    help="Forecasting model to use",
)
@click.option(
    "--criterion",
    type=click.Choice(["aic", "aicc", "bic"], case_sensitive=False),
    default="aicc",
    help="Information criterion for ETS model selection",
)
@click.option("--horizon", type=click.IntRange(min=1), default=12, help="Months to forecast")
@click.option(
    "--on-malformed",
    type=click.Choice(["raise", "skip"]),
    default="raise",
    help="Fail on malformed date/time fields or skip those rows",
)
@click.option("--fill-gaps/--no-fill-gaps", default=True, help="Zero-fill months with no recorded incidents")
@click.option("--holdout", type=click.IntRange(min=0), default=12, help="Months held out for validation (0 disables)")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
def main(
    source: str,
    model: str,
    criterion: str,
    horizon: int,
    on_malformed: str,
    fill_gaps: bool,
    holdout: int,
    verbose: bool,
) -> None:
    """
    Run the incident trend pipeline and print summaries.
    """
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = PipelineConfig(
        source_url=source,
        on_malformed=on_malformed,
        fill_missing_months=fill_gaps,
        forecast_horizon=horizon,
        information_criterion=criterion.lower(),
        validation=ValidationConfig(enable_validation=holdout > 0, holdout_periods=max(holdout, 1)),
    )

    try:
        logger.info("=" * 80)
        logger.info("INCIDENT TREND PIPELINE")
        logger.info("=" * 80)
        logger.info(f"Source: {source}")
        logger.info(f"Forecaster: {model}")

        result = run_pipeline(config, source=source, model=model)

        reporter = ResultsReporter(result.cleaned, result.series, result.forecast)
        click.echo(reporter.format_summary(result.report))

        logger.info("=" * 80)
        logger.info("PIPELINE COMPLETED SUCCESSFULLY!")
        logger.info("=" * 80)
        if result.filled_months:
            logger.info(f"Zero-filled months: {result.filled_months}")

    except PipelineError as e:
        logger.error(f"Pipeline failed: {e}")
        raise SystemExit(1) from e
    except Exception as e:
        logger.error(f"Pipeline failed: {e}")
        traceback.print_exc()
        raise


if __name__ == "__main__":
    main()
