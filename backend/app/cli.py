r"""backend\app\cli.py

Command line entry point (``inventory-predict``).

Usage:
    inventory-predict run                       # batch over the configured range
    inventory-predict run --delay-ms 0 --count 5
    inventory-predict analyze                   # report over stored predictions
    inventory-predict init-db                   # create tables
    inventory-predict serve                     # start the API with uvicorn
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import threading
from typing import List, Optional, Sequence, TextIO, Tuple

from .core.config import Settings, get_settings, load_batch_config
from .core.errors import ConfigurationError, PersistenceError
from .models.schemas import BatchRunSummary, RiskLevel
from .services import analysis_service
from .services.batch_service import BatchOrchestrator, random_stock
from .services.container import build_services
from .services.prediction_store import PredictionStore

LOGGER = logging.getLogger(__name__)

OUTPUT_FILE = "batch_predictions.json"
SUMMARY_FILE = "batch_summary.txt"


def write_batch_outputs(
    summary: BatchRunSummary, product_ids: Sequence[str], output_dir: str
) -> Tuple[str, str]:
    """Write the full run as JSON plus a short text summary; return both paths."""

    os.makedirs(output_dir, exist_ok=True)
    output_path = os.path.join(output_dir, OUTPUT_FILE)
    summary_path = os.path.join(output_dir, SUMMARY_FILE)

    with open(output_path, "w", encoding="utf-8") as handle:
        json.dump(summary.model_dump(mode="json", by_alias=True), handle, indent=2)

    product_range = f"{product_ids[0]} to {product_ids[-1]}" if product_ids else "-"
    lines = [
        "Batch Prediction Summary",
        "========================",
        f"Timestamp: {summary.timestamp.isoformat()}",
        f"Total Requests: {summary.total_requests}",
        f"Successful: {summary.successful_requests}",
        f"Failed: {summary.failed_requests}",
        f"Success Rate: {summary.success_rate:.2f}%",
        f"Execution Time: {summary.execution_time_ms / 1000:g} seconds",
        f"Cancelled: {'yes' if summary.cancelled else 'no'}",
        "",
        f"Product Range: {product_range}",
        "Output Files:",
        f"- Detailed Results: {output_path}",
        f"- Summary: {summary_path}",
    ]
    with open(summary_path, "w", encoding="utf-8") as handle:
        handle.write("\n".join(lines) + "\n")
    return output_path, summary_path


def run_interruptible(
    orchestrator: BatchOrchestrator,
    product_ids: List[str],
    stock_min: int,
    stock_max: int,
    delay_ms: int,
) -> BatchRunSummary:
    """Run the batch on a worker thread so Ctrl-C turns into a cancellation."""

    cancel = threading.Event()
    outcome: dict = {}

    def _target() -> None:
        try:
            outcome["summary"] = orchestrator.run_batch(
                product_ids,
                current_stock_generator=random_stock(stock_min, stock_max),
                inter_request_delay_ms=delay_ms,
                cancel_token=cancel,
            )
        except BaseException as exc:  # re-raised on the calling thread
            outcome["error"] = exc

    worker = threading.Thread(target=_target, name="batch-run", daemon=True)
    worker.start()
    while worker.is_alive():
        try:
            worker.join(timeout=0.5)
        except KeyboardInterrupt:
            LOGGER.warning("Interrupted; cancelling after the current product")
            cancel.set()

    if "error" in outcome:
        raise outcome["error"]
    return outcome["summary"]


def print_analysis(store: PredictionStore, out: TextIO = sys.stdout) -> None:
    stats = store.get_stats()
    records = store.get_all(100)

    print("Overall Statistics:", file=out)
    print(f"   Total Predictions: {stats.total}", file=out)
    print(f"   Success Rate: {stats.success_rate:.1f}%", file=out)
    print("   Risk Distribution:", file=out)
    for level in RiskLevel:
        if level in stats.risk_distribution:
            print(f"     {level.value}: {stats.risk_distribution[level]} products", file=out)

    print("\nCritical Risk Products with Low Stock (<30 units):", file=out)
    for record in analysis_service.critical_low_stock(store.get_by_risk(RiskLevel.CRITICAL)):
        print(
            f"   {record.product_id}: {record.current_stock} -> {record.stock_predicted} units "
            f"(need {analysis_service.shortfall(record)} more)",
            file=out,
        )

    print("\nTop 10 Highest Predicted Demand:", file=out)
    for index, record in enumerate(analysis_service.top_demand(records), start=1):
        print(f"   {index}. {record.product_id}: {record.stock_predicted} units predicted", file=out)

    print("\nTop 10 Largest Stock Shortfalls:", file=out)
    for index, (record, needed) in enumerate(analysis_service.shortfalls(records), start=1):
        print(
            f"   {index}. {record.product_id}: Need {needed} more units "
            f"({record.current_stock} -> {record.stock_predicted})",
            file=out,
        )

    print("\nWell-Stocked Products (current stock >= predicted):", file=out)
    stocked = analysis_service.well_stocked(records)
    if not stocked:
        print("   No products are adequately stocked based on predictions!", file=out)
    for record, surplus in stocked:
        print(f"   {record.product_id}: {record.current_stock} units (surplus: {surplus})", file=out)


def _cmd_run(args: argparse.Namespace, settings: Settings) -> int:
    config = load_batch_config(settings)
    if args.count is not None:
        config = config.model_copy(update={"product_count": args.count, "product_ids": None})
    delay_ms = args.delay_ms if args.delay_ms is not None else config.delay_ms
    product_ids = config.resolved_product_ids()

    services = build_services(settings)
    try:
        services.store.init_schema()
    except PersistenceError as exc:
        LOGGER.error("Error preparing prediction store: %s", exc)
        return 1
    try:
        summary = run_interruptible(
            services.batch, product_ids, config.stock_min, config.stock_max, delay_ms
        )
    except ConfigurationError as exc:
        LOGGER.error("Server configuration error: %s", exc)
        return 2

    output_path, summary_path = write_batch_outputs(summary, product_ids, args.output_dir)
    print(f"Successful predictions: {summary.successful_requests}")
    print(f"Failed predictions: {summary.failed_requests}")
    print(f"Success rate: {summary.success_rate:.2f}%")
    print(f"Total execution time: {summary.execution_time_ms / 1000:g} seconds")
    print(f"Results saved to: {output_path}")
    print(f"Summary saved to: {summary_path}")
    return 130 if summary.cancelled else 0


def _cmd_analyze(args: argparse.Namespace, settings: Settings) -> int:
    store = PredictionStore.from_url(settings.db_url)
    try:
        print_analysis(store)
    except PersistenceError as exc:
        LOGGER.error("Error analyzing predictions: %s", exc)
        return 1
    return 0


def _cmd_init_db(args: argparse.Namespace, settings: Settings) -> int:
    PredictionStore.from_url(settings.db_url).init_schema()
    print(f"Schema ready at {settings.db_url}")
    return 0


def _cmd_serve(args: argparse.Namespace, settings: Settings) -> int:
    import uvicorn

    uvicorn.run(
        "backend.app.main:app",
        host=args.host or settings.api_host,
        port=args.port or settings.api_port,
        reload=args.reload,
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="inventory-predict", description="Inventory prediction tools")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run batch predictions")
    run.add_argument("--delay-ms", type=int, default=None, help="Pause between products")
    run.add_argument("--count", type=int, default=None, help="Number of products (P001..)")
    run.add_argument("--output-dir", default="batch_results", help="Where result files go")
    run.set_defaults(handler=_cmd_run)

    analyze = sub.add_parser("analyze", help="Summarise stored predictions")
    analyze.set_defaults(handler=_cmd_analyze)

    init_db = sub.add_parser("init-db", help="Create database tables")
    init_db.set_defaults(handler=_cmd_init_db)

    serve = sub.add_parser("serve", help="Start the API server")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.add_argument("--reload", action="store_true")
    serve.set_defaults(handler=_cmd_serve)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return args.handler(args, settings)


if __name__ == "__main__":
    sys.exit(main())
