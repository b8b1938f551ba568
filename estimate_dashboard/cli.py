import argparse
import asyncio
import json
import logging
import random
import sys
from dataclasses import asdict, replace
from datetime import date
from typing import Sequence, TextIO

from estimate_dashboard import analytics, dashboard
from estimate_dashboard.config import AppSettings, UnknownSettingError, get_settings
from estimate_dashboard.config.display_settings import display_settings
from estimate_dashboard.errors import EstimateError, EstimateNotFoundError
from estimate_dashboard.models import Estimate, EstimateStatus, EstimateType
from estimate_dashboard.storage import FileBlobStore, LocalMirror
from estimate_dashboard.store import EstimateStore
from estimate_dashboard.sync import RemoteSync
from estimate_dashboard.utils import convert_time_input, format_time_to_ampm, parse_date

logger = logging.getLogger(__name__)


def build_store(settings: AppSettings) -> EstimateStore:
    mirror = LocalMirror(FileBlobStore(settings.storage.storage_path), key=settings.storage.key)
    return EstimateStore(mirror, RemoteSync.from_settings(settings.remote))


def _format_row(estimate: Estimate) -> str:
    amount = f"${estimate.amount_value:,.2f}" if estimate.estimate_amount not in (None, "") else "-"
    received = f"{estimate.date_received or ''} {format_time_to_ampm(estimate.time_received)}".strip()
    billed = " billed" if estimate.client_billed else ""
    return (
        f"{estimate.id}  {estimate.estimate_type:<7}  {estimate.status:<11}  "
        f"claim {estimate.claim_number}  {estimate.client_name}  task {estimate.task_number}  "
        f"received {received}  {amount}{billed}"
    )


def _write_json(out: TextIO, payload: object) -> None:
    out.write(json.dumps(payload, sort_keys=True, separators=(",", ":")) + "\n")


def _reference_date(value: str | None) -> date:
    parsed = parse_date(value) if value else None
    if value and parsed is None:
        raise EstimateError(f"Invalid date: {value}")
    return parsed or date.today()


async def _list(store: EstimateStore, args: argparse.Namespace, out: TextIO) -> int:
    if args.json:
        _write_json(out, [estimate.to_dict() for estimate in store.estimates])
        return 0
    for estimate in store.estimates:
        out.write(_format_row(estimate) + "\n")
    return 0


async def _add(store: EstimateStore, args: argparse.Namespace, out: TextIO) -> int:
    predicted_days = None
    if args.predict:
        prediction = analytics.predict_completion_time(args.type, dashboard.open_workload(store.estimates))
        predicted_days = prediction.days
        out.write(f"AI prediction: {prediction.days} days ({prediction.confidence}% confident)\n")

    estimate = dashboard.new_estimate(
        claim_number=args.claim,
        client_name=args.client,
        task_number=args.task,
        estimate_type=args.type,
        date_received=args.date,
        time_received=args.time,
        ai_predicted_days=predicted_days,
    )
    await store.add(estimate)
    out.write(f"Added estimate {estimate.id}\n")
    return 0


async def _update(store: EstimateStore, args: argparse.Namespace, out: TextIO) -> int:
    current = store.get(args.id)
    if current is None:
        raise EstimateNotFoundError(args.id)

    changes: dict[str, object] = {}
    if args.status is not None:
        changes["status"] = EstimateStatus(args.status)
    if args.date_returned is not None:
        changes["date_returned"] = args.date_returned
    if args.time_returned is not None:
        changes["time_returned"] = convert_time_input(args.time_returned)
    if args.amount is not None:
        changes["estimate_amount"] = args.amount

    await store.update(replace(current, **changes))
    out.write(f"Updated estimate {args.id}\n")
    return 0


async def _delete(store: EstimateStore, args: argparse.Namespace, out: TextIO) -> int:
    await store.delete(args.id)
    out.write(f"Deleted estimate {args.id}\n")
    return 0


async def _bill(store: EstimateStore, args: argparse.Namespace, out: TextIO) -> int:
    await store.mark_billed(args.id)
    out.write(f"Marked estimate {args.id} as billed\n")
    return 0


async def _queue(store: EstimateStore, args: argparse.Namespace, out: TextIO) -> int:
    rng = random.Random(args.seed) if args.seed is not None else None
    queue = dashboard.work_queue(store.estimates)
    anomalies = {anomaly.id: anomaly for anomaly in analytics.detect_anomalies(queue, rng)}

    if args.prioritize:
        for item in analytics.prioritize_work_queue(queue, rng):
            flag = "  !" + anomalies[item.estimate.id].message if item.estimate.id in anomalies else ""
            out.write(f"[{item.priority:<6}] {_format_row(item.estimate)}{flag}\n")
    else:
        for estimate in queue:
            flag = "  !" + anomalies[estimate.id].message if estimate.id in anomalies else ""
            out.write(f"{_format_row(estimate)}{flag}\n")
    out.write(f"{len(queue)} items in queue\n")
    return 0


async def _billing(store: EstimateStore, args: argparse.Namespace, out: TextIO) -> int:
    for estimate in dashboard.billing_queue(store.estimates):
        out.write(_format_row(estimate) + "\n")
    out.write(f"Total to bill: ${dashboard.billing_total(store.estimates):,.2f}\n")
    return 0


async def _daily(store: EstimateStore, args: argparse.Namespace, out: TextIO) -> int:
    day = _reference_date(args.date).isoformat()
    summary = dashboard.daily_summary(store.estimates, day)
    if args.json:
        _write_json(out, {**asdict(summary), "performance_message": summary.performance_message})
        return 0
    out.write(
        f"{day}: {summary.total_count} completed ({summary.initial_count} initial, {summary.final_count} final), "
        f"daily average {summary.average_daily:.1f}, {summary.performance_message}, "
        f"efficiency {summary.efficiency_percent}%\n"
    )
    return 0


async def _weekly(store: EstimateStore, args: argparse.Namespace, out: TextIO) -> int:
    report = dashboard.weekly_productivity(
        store.estimates, _reference_date(args.date), pto_hours=args.pto, ot_hours=args.ot
    )
    if args.json:
        _write_json(out, asdict(report))
        return 0
    out.write(f"Week {report.week_start} to {report.week_end}\n")
    for day_count in report.days:
        out.write(f"  {day_count.day} {day_count.date}: {day_count.count}\n")
    out.write(
        f"Total {report.total}, hours {report.available_hours:g}, rate {report.productivity_rate:.1f}, "
        f"revenue ${report.revenue:,.2f}, average ${report.average_value:,.2f}\n"
    )
    out.write(f"Trend {report.analysis.trend}, risk {report.analysis.risk_level}: {report.analysis.recommendation}\n")
    return 0


async def _summary(store: EstimateStore, args: argparse.Namespace, out: TextIO) -> int:
    summary = dashboard.summarize(store.estimates)
    out.write(
        f"Not Started {summary.not_started}, In Progress {summary.in_progress}, Completed {summary.done}, "
        f"Ready to Bill {summary.ready_to_bill}, Total Value ${summary.total_value:,.2f}\n"
    )
    return 0


async def _status(store: EstimateStore, args: argparse.Namespace, out: TextIO) -> int:
    _write_json(
        out,
        {
            "mode": "configured" if store.remote.configured else "unconfigured",
            "records": len(store.estimates),
            "storage_key": store.mirror.key,
        },
    )
    return 0


COMMANDS = {
    "list": _list,
    "add": _add,
    "update": _update,
    "delete": _delete,
    "bill": _bill,
    "queue": _queue,
    "billing": _billing,
    "daily": _daily,
    "weekly": _weekly,
    "summary": _summary,
    "status": _status,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="estimate-dashboard", description="Track insurance estimate work items.")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List every estimate.")
    list_parser.add_argument("--json", action="store_true")

    add_parser = subparsers.add_parser("add", help="Record a new estimate from intake.")
    add_parser.add_argument("--claim", required=True)
    add_parser.add_argument("--client", required=True)
    add_parser.add_argument("--task", required=True)
    add_parser.add_argument("--type", choices=[member.value for member in EstimateType], default=EstimateType.INITIAL.value)
    add_parser.add_argument("--date", help="Date received (YYYY-MM-DD), defaults to today.")
    add_parser.add_argument("--time", help="Time received, e.g. '2:30 pm' or '14:30'.")
    add_parser.add_argument("--predict", action="store_true", help="Store an AI completion-time prediction.")

    update_parser = subparsers.add_parser("update", help="Edit an estimate in the work queue.")
    update_parser.add_argument("id", type=int)
    update_parser.add_argument("--status", choices=[member.value for member in EstimateStatus])
    update_parser.add_argument("--date-returned")
    update_parser.add_argument("--time-returned")
    update_parser.add_argument("--amount")

    delete_parser = subparsers.add_parser("delete", help="Delete an estimate.")
    delete_parser.add_argument("id", type=int)

    bill_parser = subparsers.add_parser("bill", help="Mark an estimate as billed to the client.")
    bill_parser.add_argument("id", type=int)

    queue_parser = subparsers.add_parser("queue", help="Show the work queue.")
    queue_parser.add_argument("--prioritize", action="store_true", help="Order by AI priority.")
    queue_parser.add_argument("--seed", type=int, help="Seed for the heuristic scores.")

    subparsers.add_parser("billing", help="Show the billing queue.")

    daily_parser = subparsers.add_parser("daily", help="Daily completion tracker.")
    daily_parser.add_argument("--date")
    daily_parser.add_argument("--json", action="store_true")

    weekly_parser = subparsers.add_parser("weekly", help="Weekly productivity calculator.")
    weekly_parser.add_argument("--date", help="Any day in the week, defaults to today.")
    weekly_parser.add_argument("--pto", type=float, default=0)
    weekly_parser.add_argument("--ot", type=float, default=0)
    weekly_parser.add_argument("--json", action="store_true")

    subparsers.add_parser("summary", help="Totals by status and value.")
    subparsers.add_parser("status", help="Emit sync mode and record count as single-line JSON.")

    settings_parser = subparsers.add_parser("settings", help="Show or change configuration.")
    settings_parser.add_argument(
        "--set", action="append", default=[], metavar="SECTION__KEY=VALUE", help="e.g. remote__table=estimates"
    )
    return parser


def _parse_setting_value(settings: AppSettings, key: str, raw_value: str) -> object:
    """Convert `raw_value` to the type of the setting it replaces; text settings stay text."""
    section_name, _, field_name = key.partition("__")
    target = getattr(settings, section_name, None) if field_name else settings
    current = getattr(target, field_name or key, None)

    if isinstance(current, bool):
        lowered = raw_value.lower()
        if lowered not in {"true", "false"}:
            raise EstimateError(f"Expected true or false for {key}, got {raw_value}")
        return lowered == "true"
    if isinstance(current, (int, float)):
        try:
            return type(current)(raw_value)
        except ValueError as error:
            raise EstimateError(f"Expected a number for {key}, got {raw_value}") from error
    return raw_value


def _settings(settings: AppSettings, assignments: Sequence[str], out: TextIO) -> int:
    if assignments:
        updates = {}
        for assignment in assignments:
            key, separator, raw_value = assignment.partition("=")
            if not separator:
                raise EstimateError(f"Expected SECTION__KEY=VALUE, got {assignment}")
            key = key.strip()
            updates[key] = _parse_setting_value(settings, key, raw_value.strip())
        settings.update_and_save(**updates)
    _write_json(out, display_settings(settings))
    return 0


async def run(args: argparse.Namespace, settings: AppSettings, out: TextIO) -> int:
    store = build_store(settings)
    try:
        await store.hydrate()
        return await COMMANDS[args.command](store, args, out)
    finally:
        store.remote.close()


def main(argv: Sequence[str] | None = None, settings: AppSettings | None = None, out: TextIO | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = settings or get_settings()
    out = out or sys.stdout

    logging.basicConfig(
        level=logging.DEBUG if args.debug or settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "settings":
            return _settings(settings, args.set, out)
        return asyncio.run(run(args, settings, out))
    except (EstimateError, UnknownSettingError) as error:
        logger.error("%s", error)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
