"""
Command-line entry point.

    dcm-support evaluate --age 65 --sex M --mjoa 13 --duration-months 12 \\
        --t2-signal bright --levels 3 --canal-ratio "<50%"
    dcm-support batch cohort.csv --workers 4

Results are printed to stdout as JSON; logs go to stderr.  Validation
errors print a JSON error object to stderr and exit with status 2.
"""
import argparse
import json
import sys
from typing import List, Optional

from dcm_support.config import get_engine_config, get_settings
from dcm_support.core.clinical import BatchAggregator, DecisionEngine
from dcm_support.core.ingestion import BatchCSVLoader, PatientRecordParser
from dcm_support.utils import DecisionSupportError, get_logger, setup_logging

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_VALIDATION = 2


def _add_shared_options(parser: argparse.ArgumentParser, log_level=None, strict=False) -> None:
    parser.add_argument("--log-level", type=str, default=log_level, help="Override DCM_LOG_LEVEL")
    parser.add_argument("--strict", action="store_true", default=strict,
                        help="Reject invalid fields instead of falling back to defaults")


def build_parser() -> argparse.ArgumentParser:
    """
    --log-level and --strict are accepted before or after the subcommand.
    The subcommand copies use SUPPRESS so they only overwrite the top-level
    values when actually given.
    """
    parser = argparse.ArgumentParser(
        prog="dcm-support",
        description="DCM surgical decision support (deterministic rule engine)",
    )
    _add_shared_options(parser)

    shared = argparse.ArgumentParser(add_help=False)
    _add_shared_options(shared, log_level=argparse.SUPPRESS, strict=argparse.SUPPRESS)

    sub = parser.add_subparsers(dest="command", required=True)

    ev = sub.add_parser("evaluate", parents=[shared], help="Recommendation for a single patient")
    ev.add_argument("--age", type=str, default=None)
    ev.add_argument("--sex", type=str, default=None, help="M or F")
    ev.add_argument("--mjoa", type=str, default=None, help="mJOA score 0-18")
    ev.add_argument("--duration-months", type=str, default=None)
    ev.add_argument("--t2-signal", type=str, default=None, help="none / bright / multilevel")
    ev.add_argument("--levels", type=str, default=None, help="Planned operated levels")
    ev.add_argument("--canal-ratio", type=str, default=None, help="<50%%, 50-60%% or >60%%")
    ev.add_argument("--opll", action="store_true")
    ev.add_argument("--t1-hypo", action="store_true")
    ev.add_argument("--smoker", action="store_true")

    bt = sub.add_parser("batch", parents=[shared], help="Summary counts for a CSV of patients")
    bt.add_argument("path", type=str, help="CSV file with a header row")
    bt.add_argument("--workers", type=int, default=None, help="Parallel partitions")

    return parser


def _run_evaluate(args, parser: PatientRecordParser, engine: DecisionEngine) -> dict:
    raw = {
        "age": args.age,
        "sex": args.sex,
        "mjoa": args.mjoa,
        "duration_months": args.duration_months,
        "t2_signal": args.t2_signal,
        "levels": args.levels,
        "canal_ratio": args.canal_ratio,
        "opll": args.opll,
        "t1_hypo": args.t1_hypo,
        "smoker": args.smoker,
    }
    record, fallbacks = parser.parse(raw)
    result = engine.evaluate(record)
    return {
        "patient": record.to_dict(),
        "result": result.to_dict(),
        "fallbacks": [f.to_dict() for f in fallbacks],
    }


def _run_batch(args, parser: PatientRecordParser, aggregator: BatchAggregator, workers) -> dict:
    rows = BatchCSVLoader(parser).load_file(args.path)
    return aggregator.aggregate_rows(rows, max_workers=workers).to_dict()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
        setup_logging(args.log_level or settings.log_level, settings.log_file)

        policy = "strict" if args.strict else settings.fallback_policy
        record_parser = PatientRecordParser(policy=policy)
        config = get_engine_config()

        if args.command == "evaluate":
            output = _run_evaluate(args, record_parser, DecisionEngine(config))
        else:
            workers = args.workers if args.workers is not None else settings.batch_workers
            output = _run_batch(args, record_parser, BatchAggregator(config), workers)
    except DecisionSupportError as e:
        logger.error(f"{e.code}: {e.message}")
        print(json.dumps(e.to_dict(), ensure_ascii=False, default=str), file=sys.stderr)
        return EXIT_VALIDATION

    print(json.dumps(output, ensure_ascii=False, indent=2))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
