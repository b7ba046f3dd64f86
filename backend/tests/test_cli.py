r"""backend/tests/test_cli.py"""

from __future__ import annotations

import io
import json
from pathlib import Path

from backend.app import cli
from backend.app.models.schemas import PredictionInput, RiskLevel
from backend.app.services.batch_service import BatchOrchestrator
from backend.app.services.prediction_service import PredictionPipeline
from backend.app.services.predictor_client import PredictResult

from conftest import StubPredictor, make_settings


def test_run_writes_json_and_text(store, tmp_path) -> None:
    predictor = StubPredictor(responses={"P002": PredictResult.failure("timeout")})
    orchestrator = BatchOrchestrator(PredictionPipeline(predictor, store))
    ids = ["P001", "P002", "P003"]

    summary = cli.run_interruptible(orchestrator, ids, 5, 5, delay_ms=0)
    output_path, summary_path = cli.write_batch_outputs(summary, ids, str(tmp_path / "batch_results"))

    data = json.loads(Path(output_path).read_text(encoding="utf-8"))
    assert data["totalRequests"] == 3
    assert data["failedRequests"] == 1
    assert data["results"][1] == {
        "productId": "P002",
        "currentStock": 5,
        "success": False,
        "error": "timeout",
        "stockPredicted": None,
        "riskLevel": None,
        "comment": None,
        "data": None,
    }

    text = Path(summary_path).read_text(encoding="utf-8")
    assert "Success Rate: 66.67%" in text
    assert "Product Range: P001 to P003" in text


def test_print_analysis_sections(store) -> None:
    store.upsert(
        PredictionInput(
            product_id="P001", current_stock=12, stock_predicted=70, risk_level=RiskLevel.CRITICAL, success=True
        )
    )
    store.upsert(
        PredictionInput(product_id="P002", current_stock=90, stock_predicted=30, risk_level=RiskLevel.LOW, success=True)
    )
    out = io.StringIO()

    cli.print_analysis(store, out=out)

    report = out.getvalue()
    assert "Total Predictions: 2" in report
    assert "P001: 12 -> 70 units (need 58 more)" in report
    assert "1. P001: Need 58 more units (12 -> 70)" in report
    assert "P002: 90 units (surplus: 60)" in report


def test_parser_commands() -> None:
    parser = cli.build_parser()

    args = parser.parse_args(["run", "--delay-ms", "0", "--count", "5"])
    assert args.delay_ms == 0 and args.count == 5 and args.handler is cli._cmd_run
    assert parser.parse_args(["serve", "--port", "9000"]).port == 9000


def test_run_reports_unreachable_store(tmp_path) -> None:
    missing_dir = tmp_path / "missing" / "inventory.db"
    settings = make_settings(tmp_path, db_url=f"sqlite:///{missing_dir}")
    args = cli.build_parser().parse_args(["run", "--count", "1", "--output-dir", str(tmp_path / "out")])

    assert cli._cmd_run(args, settings) == 1
    assert not (tmp_path / "out").exists()
