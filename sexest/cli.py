"""
Command line sex estimation.

    sexest csg --container femur.json --data samples.csv --bone Femur --side Left --slots 1 2
    sexest vertebra --container vertebrae.json --population Greek --vertebra L1 --values 41.2 30.8 ...

Results are printed per sample and classifier slot and, with --save, appended
to the results log.
"""
import argparse
import sys
from typing import List, Optional

from sexest.config import settings
from sexest.core.errors import EstimationError
from sexest.services import EstimationService, load_container, load_csg_dataset
from sexest.utils import configure_logging, get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="sexest", description="Skeletal sex estimation")
    ap.add_argument("--log-level", default=settings.log_level)
    sub = ap.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--container", default=settings.container_path, required=settings.container_path is None,
                        help="Classifier container JSON")
    common.add_argument("--method", default=settings.default_method, help="LDA or RBF")
    common.add_argument("--save", action="store_true", help="Append results to the results log")
    common.add_argument("--results-file", default=settings.results_file)
    common.add_argument("--miss-policy", default=settings.pdf_miss_policy, choices=["raise", "clamp"],
                        help="RBF scores outside every posterior bin: fail or use the nearest bin")

    csg = sub.add_parser("csg", parents=[common], help="Estimate every sample of a CSG-Toolkit CSV")
    csg.add_argument("--data", required=True, help="CSV created with the CSG-Toolkit (47 columns)")
    csg.add_argument("--bone", required=True, choices=["Femur", "Tibia", "Humerus"])
    csg.add_argument("--side", required=True, choices=["Left", "Right"])
    csg.add_argument("--slots", type=int, nargs="+", default=[1], choices=[1, 2, 3])
    csg.add_argument("--sample", action="append", help="Only estimate these sample ids")

    vert = sub.add_parser("vertebra", parents=[common], help="Estimate one set of vertebral measurements")
    vert.add_argument("--sample-id", default="ANONYMOUS")
    vert.add_argument("--population", required=True)
    vert.add_argument("--vertebra", required=True)
    vert.add_argument("--values", type=float, nargs="+", required=True)
    return ap


def _print_response(response: dict) -> None:
    print(f"{response['sample_id']} ({response['skeletal_element']}, {response['method']}):")
    for r in response["results"]:
        print(f"  Classifier #{r['slot']}: {r['description']}")


def run_csg(args, service: EstimationService) -> int:
    records = load_csg_dataset(args.data)
    if args.sample:
        wanted = set(args.sample)
        records = [r for r in records if r.sample_id in wanted]
        if not records:
            print(f"error: none of {sorted(wanted)} found in {args.data}", file=sys.stderr)
            return 1
    for record in records:
        response = service.estimate_record(record, args.method, args.bone, args.side, args.slots, save=args.save)
        _print_response(response)
    return 0


def run_vertebra(args, service: EstimationService) -> int:
    response = service.estimate_vertebra(
        args.sample_id, args.method, args.population, args.vertebra, args.values, save=args.save
    )
    _print_response(response)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    try:
        container = load_container(args.container)
        service = EstimationService.from_container(
            container,
            results_file=args.results_file if args.save else None,
            miss_policy=args.miss_policy,
        )
        if args.command == "csg":
            return run_csg(args, service)
        return run_vertebra(args, service)
    except (EstimationError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
