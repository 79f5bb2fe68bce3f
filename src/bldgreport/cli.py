"""bldgreport CLI — look up a building or write its compliance report.

    bldgreport lookup "123 Main St"
    bldgreport report "123 Main St" -o report.docx
"""

import argparse
import logging
import sys
from pathlib import Path

from bldgreport.config import settings
from bldgreport.core.errors import ReportRenderError
from bldgreport.observability.tracing import init_tracing
from bldgreport.pipeline.render import ReportRenderer, format_value
from bldgreport.pipeline.report import build_report, prepare_report_values
from bldgreport.storage.dataset import DatasetStore


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--data", default=None, help=f"Spreadsheet path (default: {settings.data_path})")

    parser = argparse.ArgumentParser(prog="bldgreport", description=__doc__.splitlines()[0])
    sub = parser.add_subparsers(dest="command", required=True)

    lookup = sub.add_parser("lookup", parents=[common], help="Print compliance status and report fields for an address")
    lookup.add_argument("address", nargs="+")

    report = sub.add_parser("report", parents=[common], help="Write the compliance report (.docx) for an address")
    report.add_argument("address", nargs="+")
    report.add_argument("-o", "--output", default=settings.report_filename)
    report.add_argument("--template", default=None, help=f"Template path (default: {settings.template_path})")
    return parser


def _load(data_path: str) -> DatasetStore | None:
    store = DatasetStore()
    result = store.load(data_path)
    if not result.ok:
        print(f"Could not load data from {data_path}: {store.last_error}")
        return None
    return store


def _lookup(store: DatasetStore, address: str) -> int:
    row = store.find_by_address(address)
    if row is None:
        print(f"Address not found: {address}")
        return 1

    values = prepare_report_values(row, settings)
    print(f"\n{values['Address']}")
    print(f"{'=' * 50}")
    print(f"FISP Compliance: {values['FISP Compliance Status']}")
    print(f"{'─' * 50}")
    width = max(len(k) for k in values)
    for key, value in values.items():
        print(f"  {key:<{width}}  {format_value(value)}")
    return 0


def _report(store: DatasetStore, address: str, template: str, output: str) -> int:
    row = store.find_by_address(address)
    if row is None:
        print(f"Address not found: {address}")
        return 1

    renderer = ReportRenderer(template, strict=settings.strict_placeholders)
    try:
        document = build_report(row, renderer, settings)
    except ReportRenderError as e:
        print(f"Report generation failed: {e}")
        return 1

    Path(output).write_bytes(document)
    print(f"Report saved to: {output}")
    return 0


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    args = _build_parser().parse_args(argv)
    init_tracing(settings.mlflow_tracking_uri, settings.mlflow_experiment_name)

    store = _load(args.data or settings.data_path)
    if store is None:
        sys.exit(1)

    address = " ".join(args.address)
    if args.command == "lookup":
        code = _lookup(store, address)
    else:
        code = _report(store, address, args.template or settings.template_path, args.output)
    sys.exit(code)


if __name__ == "__main__":
    main()
