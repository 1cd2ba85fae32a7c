"""
Command line entry point: plan from a stored profile, export the plan, and
log finished sessions back into the profile's history.
"""

from __future__ import annotations
import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional

from calendar_export import plans_to_ics
from commitments import WeeklyCommitments
from errors import ParseError
from models import DailyPlan, HistoricalRecord
from pdf_export import plans_to_pdf
from planner import PlanningResult, plan_stats
from record_store import ProfileRecordStore
from service import plan_for_store
from timeutils import format_hhmm, format_span, week_dates, weekday_name


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="study-scheduler", description="Plan study sessions around a weekly timetable.")
    parser.add_argument("--profile", default="default", help="Profile (user) to read and write")
    parser.add_argument("--data-dir", type=Path, default=None, help="Override the data directory")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    def add_plan_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("--from", dest="from_date", type=_parse_date, default=None,
                       help="First day to plan (default: today)")
        p.add_argument("--days", type=int, default=None, help="Planning horizon in days")

    p_plan = sub.add_parser("plan", help="Print the generated plan")
    add_plan_args(p_plan)

    p_ics = sub.add_parser("export-ics", help="Write the plan as an .ics file")
    add_plan_args(p_ics)
    p_ics.add_argument("output", type=Path)
    p_ics.add_argument("--tz", default=None, help="IANA timezone name")
    p_ics.add_argument("--no-breaks", action="store_true")

    p_pdf = sub.add_parser("export-pdf", help="Write the plan as a PDF")
    add_plan_args(p_pdf)
    p_pdf.add_argument("output", type=Path)

    sub.add_parser("timetable", help="Show school end times and weekly hours per subject")

    p_log = sub.add_parser("log-session", help="Record a finished or skipped session")
    p_log.add_argument("--subject", required=True, help="Subject id")
    p_log.add_argument("--planned", type=int, required=True, help="Planned minutes")
    p_log.add_argument("--actual", type=int, required=True, help="Actual minutes")
    p_log.add_argument("--productivity", type=int, default=None)
    p_log.add_argument("--difficulty", type=int, default=None)
    p_log.add_argument("--skipped", action="store_true")
    p_log.add_argument("--date", type=_parse_date, default=None)

    return parser


def format_plan(plans: List[DailyPlan]) -> str:
    lines = []
    for plan in plans:
        lines.append(f"{plan.day_name} {plan.date.isoformat()}  ({plan.total_study_minutes} min)")
        for entry in plan.sessions:
            span = format_span(entry.start_time, entry.duration_minutes)
            tag = f" [{entry.study_type}]" if entry.study_type else ""
            adapted = " *adapted*" if entry.is_adapted else ""
            lines.append(f"  {span}  {entry.title}{tag}{adapted}")
    return "\n".join(lines)


def _report(result: PlanningResult) -> None:
    if not result.plans:
        print("Nothing to plan: no upcoming exams or orals.")
        return
    print(format_plan(result.plans))
    stats = plan_stats(result.plans)
    print(f"\n{stats['total_days']} days, {stats['total_hours']} h total, "
          f"{stats['avg_minutes_per_day']} min/day on average")
    for s in result.shortfalls:
        print(f"Behind on {s.title} ({s.target_date.isoformat()}): {s.remaining_minutes} min missing. "
              f"Reduce scope or study about {s.suggested_extra_minutes_per_day} min more per day.")


def format_timetable(commitments: WeeklyCommitments) -> str:
    lines = []
    for day in week_dates(date(2024, 1, 1)):  # any Monday
        end = commitments.school_end(day)
        if end is not None:
            lines.append(f"{weekday_name(day):<10} school until {format_hhmm(end)}")
    if not lines:
        return "No school periods configured."
    for name, hours in sorted(commitments.school_hours().items()):
        lines.append(f"  {name}: {hours:g} h/week")
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    store = ProfileRecordStore(args.profile, args.data_dir)

    if args.command == "log-session":
        record = HistoricalRecord(
            subject_id=args.subject,
            date=args.date or date.today(),
            planned_minutes=args.planned,
            actual_minutes=0 if args.skipped else args.actual,
            productivity_rating=args.productivity,
            difficulty_rating=args.difficulty,
            completed=not args.skipped,
        )
        store.append_history(record)
        print(f"Recorded session for {record.subject_id} on {record.date.isoformat()}.")
        return 0

    if args.command == "timetable":
        try:
            print(format_timetable(store.commitments()))
        except ParseError as exc:
            print(f"Configuration error: {exc} Fix the timetable and try again.", file=sys.stderr)
            return 2
        return 0

    from_date = args.from_date or date.today()
    try:
        result = plan_for_store(store, from_date, args.days)
    except ParseError as exc:
        print(f"Configuration error: {exc} Fix the timetable and try again.", file=sys.stderr)
        return 2

    if args.command == "plan":
        _report(result)
    elif args.command == "export-ics":
        args.output.write_bytes(plans_to_ics(result.plans, args.tz, include_breaks=not args.no_breaks))
        print(f"Saved calendar to: {args.output}")
    elif args.command == "export-pdf":
        args.output.write_bytes(plans_to_pdf(result.plans, result.shortfalls))
        print(f"Saved PDF to: {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
