"""
Command line interface.

    bloodpassport abps samples.csv --parameters abps.json --output scored.csv
    bloodpassport off-score --hgb 146 --retp 0.48
    bloodpassport serve --port 8000
"""
import argparse
import sys
from typing import List, Optional

import numpy as np
import pandas as pd

from bloodpassport.config import get_settings
from bloodpassport.core.errors import BloodPassportError
from bloodpassport.core.inference import ABPSScorer, get_default_scorer, off_score
from bloodpassport.utils import get_logger, setup_logging

logger = get_logger("bloodpassport.cli")


def _score_table(args: argparse.Namespace) -> int:
    scorer = ABPSScorer.from_file(args.parameters) if args.parameters else get_default_scorer()
    table = pd.read_csv(args.input, sep=args.sep)
    logger.info(f"Read {len(table)} samples from {args.input}")

    results = scorer.score_detailed(table)
    table["BAYES"] = [r.bayes_score for r in results]
    table["SVM"] = [r.svm_score for r in results]
    table["ABPS"] = [r.abps for r in results]

    if args.output:
        table.to_csv(args.output, sep=args.sep, index=False)
        logger.info(f"Wrote scores to {args.output}")
    else:
        table.to_csv(sys.stdout, sep=args.sep, index=False)
    return 0


def _score_off(args: argparse.Namespace) -> int:
    scores = off_score(args.hgb, args.retp)
    for score in np.atleast_1d(scores):
        print(f"{score:.2f}")
    return 0


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "bloodpassport.main:app",
        host=args.host or settings.api_host,
        port=args.port or settings.api_port,
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bloodpassport",
        description="OFF-score and Abnormal Blood Profile Score computation",
    )
    parser.add_argument("--log-level", default=None,
                        help="Logging level (default: from settings)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_abps = sub.add_parser("abps", help="Score a CSV table of samples")
    p_abps.add_argument("input", help="CSV with RETP, HGB, HCT, RBC, MCV, MCH, MCHC columns")
    p_abps.add_argument("--parameters", default=None,
                        help="Parameter artifact (default: BLOODPASSPORT_PARAMETERS_PATH)")
    p_abps.add_argument("--output", default=None, help="Output CSV (default: stdout)")
    p_abps.add_argument("--sep", default=",", help="Column separator")
    p_abps.set_defaults(func=_score_table)

    p_off = sub.add_parser("off-score", help="Compute OFF-scores (HGB in g/L)")
    p_off.add_argument("--hgb", type=float, nargs="+", required=True)
    p_off.add_argument("--retp", type=float, nargs="+", required=True)
    p_off.set_defaults(func=_score_off)

    p_serve = sub.add_parser("serve", help="Run the HTTP API")
    p_serve.add_argument("--host", default=None)
    p_serve.add_argument("--port", type=int, default=None)
    p_serve.set_defaults(func=_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    # stdout may carry the scored table
    setup_logging(args.log_level or get_settings().log_level, stream=sys.stderr)
    try:
        return args.func(args)
    except BloodPassportError as e:
        logger.error(str(e))
        return 2


if __name__ == "__main__":
    sys.exit(main())
