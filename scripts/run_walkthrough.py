"""
ImputeLab - Imputation Walkthrough
Loads a table, injects missing values into the target column, applies every
imputation strategy and writes the comparison charts plus a JSON summary.

Example:
    python scripts/run_walkthrough.py data/birthwt.csv --target bwt \
        --exclude low --categorical race --seed 555 --count 15
"""

import sys
from pathlib import Path
from typing import List, Optional

# Add project root to path
ROOT_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT_DIR))

from config.logging_config import get_logger, log_execution_time, setup_logging
from config.settings import settings
from core.data_loader import DataLoader
from core.exceptions import ImputeLabError
from core.utils import save_json
from agents.imputation.config import ImputationConfig
from agents.imputation.imputation_orchestrator import ImputationOrchestrator
from services.report.chart_service import ChartFactory

logger = get_logger(__name__, component="cli")


@log_execution_time
def run(
    data_path: Path,
    target_column: str,
    config: ImputationConfig,
    out_dir: Path,
) -> bool:
    """
    Run the walkthrough and write its artifacts into ``out_dir``.

    Artifacts are written whenever the walkthrough itself ran, even if every
    strategy failed (the report then holds only the reference series).

    Returns:
        True when at least one strategy succeeded
    """
    df = DataLoader().load(
        data_path,
        target_column=target_column,
        categorical_columns=config.categorical_columns,
    )

    result = ImputationOrchestrator(config).run(data=df, target_column=target_column)
    if result.is_failed():
        for err in result.errors:
            logger.error(err)
        return False

    for warning in result.warnings:
        logger.warning(warning)

    report = result.data["report"]
    out_dir.mkdir(parents=True, exist_ok=True)

    ChartFactory.save_figure(
        ChartFactory.density_overlay(
            report,
            title=f"{target_column}: distribution after imputation",
            x_title=target_column,
        ),
        out_dir / "density.html",
    )
    ChartFactory.save_figure(
        ChartFactory.missingness_bars(result.data["missingness"]),
        out_dir / "missingness.html",
    )

    save_json(
        {
            "summary": result.data["summary"],
            "injection": result.data["injection"].to_dict(),
            "result_set": result.data["result_set"].to_dict(),
            "statistics": report.to_frame().reset_index().to_dict(orient="records"),
            "x_domain": list(report.x_domain),
            "y_domain": list(report.y_domain),
            "skipped": report.skipped,
            "telemetry": result.data["telemetry"],
        },
        out_dir / "summary.json",
    )

    print("\n" + "=" * 60)
    print(report.to_frame().round(3).to_string())
    print("=" * 60 + "\n")

    if not result.data["result_set"].results:
        logger.error("No imputation strategy succeeded")
        return False
    return True


def main(argv: Optional[List[str]] = None) -> int:
    """Main function"""

    import argparse

    parser = argparse.ArgumentParser(description="Run the missing-value imputation walkthrough")
    parser.add_argument("data", type=Path, help="Input table (csv, tsv, xlsx, json, parquet)")
    parser.add_argument("--target", default=settings.TARGET_COLUMN, help="Column to blank and impute")
    parser.add_argument("--count", type=int, default=None, help="Number of injected missing values")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--k", type=int, default=None, help="kNN neighbour count")
    parser.add_argument("--m", type=int, default=None, help="Multiple-imputation replicates")
    parser.add_argument("--alpha", type=float, default=None, help="Regression p-value threshold")
    parser.add_argument("--reduction", choices=("first", "mean"), default=None,
                        help="How MI replicates collapse into one column")
    parser.add_argument("--exclude", nargs="*", default=None,
                        help="Predictors to drop before regression")
    parser.add_argument("--categorical", nargs="*", default=None,
                        help="Numeric-coded columns to treat as categorical")
    parser.add_argument("--workers", type=int, default=None, help="Runner thread pool size")
    parser.add_argument("--out", type=Path, default=None, help="Output directory for reports")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")

    args = parser.parse_args(argv)

    setup_logging(log_level=args.log_level)

    try:
        config = ImputationConfig.from_settings().with_overrides(
            seed=args.seed,
            missing_count=args.count,
            k=args.k,
            m=args.m,
            significance_threshold=args.alpha,
            reduction=args.reduction,
            regression_exclude=args.exclude,
            categorical_columns=args.categorical,
            max_workers=args.workers,
        )
        ok = run(args.data, args.target, config, args.out or settings.report_path())
    except ImputeLabError as e:
        logger.error(f"Walkthrough aborted: {e}")
        return 1

    if not ok:
        logger.error("Walkthrough failed")
        return 1

    logger.success("✅ Walkthrough complete!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
