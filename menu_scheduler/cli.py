"""Command-line interface for the menu schedule engine."""

from __future__ import annotations

import argparse
import logging
from datetime import datetime
from uuid import UUID

from menu_scheduler.auth import create_default_admin
from menu_scheduler.config import SchedulerConfig, load_config
from menu_scheduler.domain.errors import StoreError
from menu_scheduler.domain.models import MenuSchedule, as_utc
from menu_scheduler.domain.repositories import PresetRepository, ScheduleRepository
from menu_scheduler.domain.store import DEFAULT_FILENAMES, EntityStore
from menu_scheduler.engine import ScheduleEngine
from menu_scheduler.io.export_csv import export_menu_items_csv, export_schedules_csv
from menu_scheduler.io.import_csv import import_menu_items_csv
from menu_scheduler.services.validation import check_schedule_conflicts


def _configure_logging(cfg: SchedulerConfig, verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else getattr(logging, cfg.logging.level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=cfg.logging.format)


def _open_store(cfg: SchedulerConfig, args: argparse.Namespace) -> EntityStore:
    data_dir = args.data_dir or cfg.storage.data_dir
    return EntityStore(data_dir, filenames=cfg.storage.filenames())


def _parse_time(value: str) -> datetime:
    try:
        return as_utc(datetime.fromisoformat(value))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid ISO datetime: {value!r}") from exc


def _cmd_init(args: argparse.Namespace, cfg: SchedulerConfig) -> None:
    """Create the snapshot files and the default admin account."""
    store = _open_store(cfg, args)
    user = create_default_admin(store, cfg.admin.default_username, cfg.admin.default_password)
    if user is not None:
        print(f"[OK] Default admin user created: {user.username}")
    print(f"[OK] Store initialized: {store.data_dir}")


def _cmd_run(args: argparse.Namespace, cfg: SchedulerConfig) -> None:
    """Run the schedule engine until interrupted."""
    store = _open_store(cfg, args)
    create_default_admin(store, cfg.admin.default_username, cfg.admin.default_password)
    interval = args.interval or cfg.engine.tick_interval_seconds
    engine = ScheduleEngine(store, interval_seconds=interval)
    engine.start()
    print(f"[INFO] Schedule engine running (interval={interval}s), Ctrl+C to stop")
    try:
        while engine.is_running:
            engine.join(timeout=1.0)
    except KeyboardInterrupt:
        print("[INFO] Stopping schedule engine...")
    finally:
        engine.stop()


def _cmd_tick(args: argparse.Namespace, cfg: SchedulerConfig) -> None:
    """Evaluate all schedules once."""
    store = _open_store(cfg, args)
    engine = ScheduleEngine(store, interval_seconds=cfg.engine.tick_interval_seconds)
    report = engine.tick(now=args.now)
    print(f"[OK] Tick at {report.now.isoformat()}: {report.summary()}")


def _cmd_import_csv(args: argparse.Namespace, cfg: SchedulerConfig) -> None:
    """Import menu items from CSV."""
    store = _open_store(cfg, args)
    try:
        count = import_menu_items_csv(store, args.items)
        print(f"[OK] Imported {count} menu items")
    except StoreError as e:
        print(f"[ERROR] Import failed: {e}")
        raise


def _cmd_export(args: argparse.Namespace, cfg: SchedulerConfig) -> None:
    """Export store data to CSV."""
    store = _open_store(cfg, args)
    if args.items:
        count = export_menu_items_csv(store, args.items)
        print(f"[OK] Exported {count} menu items to {args.items}")
    if args.schedules:
        count = export_schedules_csv(store, args.schedules)
        print(f"[OK] Exported {count} schedules to {args.schedules}")


def _cmd_validate_schedule(args: argparse.Namespace, cfg: SchedulerConfig) -> None:
    """Check a proposed schedule window against existing schedules."""
    store = _open_store(cfg, args)
    try:
        preset = PresetRepository.get_by_id(store, args.preset)
        candidate = MenuSchedule(
            preset_id=preset.id,
            name=args.name,
            start_time=args.start,
            end_time=args.end,
        )
    except (StoreError, ValueError) as e:
        print(f"[ERROR] Invalid schedule: {e}")
        raise SystemExit(1)

    conflicts = check_schedule_conflicts(store, candidate)
    if conflicts:
        for other in conflicts:
            print(f"[WARN] Conflicts with schedule '{other.name}' ({other.id}) "
                  f"{other.start_time.isoformat()} - {other.end_time.isoformat()}")
        raise SystemExit(1)
    print("[OK] No conflicts")


def _cmd_upcoming(args: argparse.Namespace, cfg: SchedulerConfig) -> None:
    """List pending schedules that have not started yet."""
    store = _open_store(cfg, args)
    schedules = ScheduleRepository.get_upcoming(store, limit=args.limit)
    if not schedules:
        print("[INFO] No upcoming schedules")
    for schedule in schedules:
        print(f"{schedule.start_time.isoformat()}  {schedule.recurrence.value:<8} {schedule.name} ({schedule.id})")


def _cmd_stats(args: argparse.Namespace, cfg: SchedulerConfig) -> None:
    """Report record counts in the snapshot files."""
    store = _open_store(cfg, args)
    targets = [store.collection(args.collection)] if args.collection else store.collections()
    for collection in targets:
        print(f"[OK] {collection.name}: {len(collection)} records")


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="menu-scheduler",
        description="Menu preset scheduling engine",
    )

    # Global options
    parser.add_argument("--config", help="Path to JSON or YAML config file")
    parser.add_argument("--data-dir", help="Snapshot directory (overrides config)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    init = sub.add_parser("init", help="Create data files and the default admin user")
    init.set_defaults(func=_cmd_init)

    run = sub.add_parser("run", help="Run the schedule engine in the foreground")
    run.add_argument("--interval", type=float, help="Seconds between ticks")
    run.set_defaults(func=_cmd_run)

    tick = sub.add_parser("tick", help="Evaluate all schedules once")
    tick.add_argument("--now", type=_parse_time, help="Evaluate as of this ISO datetime")
    tick.set_defaults(func=_cmd_tick)

    imp = sub.add_parser("import-csv", help="Import menu items from CSV")
    imp.add_argument("--items", required=True, help="Path to menu items CSV")
    imp.set_defaults(func=_cmd_import_csv)

    exp = sub.add_parser("export", help="Export data to CSV")
    exp.add_argument("--items", help="Path to export menu items CSV")
    exp.add_argument("--schedules", help="Path to export schedules CSV")
    exp.set_defaults(func=_cmd_export)

    val = sub.add_parser("validate-schedule", help="Check a schedule window for conflicts")
    val.add_argument("--preset", required=True, type=UUID, help="Preset id")
    val.add_argument("--start", required=True, type=_parse_time, help="ISO start time")
    val.add_argument("--end", required=True, type=_parse_time, help="ISO end time")
    val.add_argument("--name", default="candidate", help="Schedule name")
    val.set_defaults(func=_cmd_validate_schedule)

    up = sub.add_parser("upcoming", help="List upcoming schedules")
    up.add_argument("--limit", type=int, help="Maximum number to list")
    up.set_defaults(func=_cmd_upcoming)

    stats = sub.add_parser("stats", help="Report record counts per snapshot file")
    stats.add_argument(
        "--collection",
        choices=list(DEFAULT_FILENAMES),
        help="Report only this collection",
    )
    stats.set_defaults(func=_cmd_stats)

    args = parser.parse_args(argv)
    cfg = load_config(args.config)
    _configure_logging(cfg, args.verbose)
    args.func(args, cfg)


if __name__ == "__main__":
    main()
