#!/usr/bin/env python3
"""
CLC Captación CLI — spreadsheet ingestion, snapshot sync, remote push, API server.

USAGE:
  python -m captacion.cli ingest clientes.xlsx                 # Append a spreadsheet to the store
  python -m captacion.cli ingest clientes.xlsx --replace       # Replace the store with it
  python -m captacion.cli ingest clientes.csv --preview        # Show normalized rows only

  python -m captacion.cli add --ci 1234567 --contacto "Ana" --rubro salud --agente ana
  python -m captacion.cli list

  python -m captacion.cli export                               # BASE_MAESTRA_<date>.json
  python -m captacion.cli import BASE_MAESTRA_2024-03-10.json  # Replace store (last import wins)
  python -m captacion.cli sync --role agent                    # Refresh, or prompt for a snapshot

  python -m captacion.cli plan 3                               # Quota plan amounts
  python -m captacion.cli collection-date 2024-03-10
  python -m captacion.cli summary --excel

  python -m captacion.cli push relational                      # Push stored records
  python -m captacion.cli push sheets

  python -m captacion.cli serve --port 8000                    # Start API server
"""
from __future__ import annotations

import argparse
import datetime as dt
import os
import sys
from pathlib import Path

from captacion.config import EXPORTS_FOLDER, MISSING_PLACEHOLDER, REPORTS_FOLDER
from captacion.data.coerce import format_currency
from captacion.data.loader import build_entry_record, ingest_file
from captacion.data.schemas import Role, SyncAction
from captacion.data.store import SnapshotStore
from captacion.errors import CaptacionError, NetworkFailure
from captacion.logging_setup import configure_logging
from captacion.remote.relational import push_to_relational
from captacion.remote.sheets import push_to_sheets, require_settings
from captacion.reports import capture_report
from captacion.rules.installments import PLANS, compute_collection_date, lookup_plan

LIST_COLUMNS = ["date", "client_id", "client_name", "category", "agent"]


def _banner(title: str):
    print("\n" + "=" * 70)
    print(f"  CLC CAPTACIÓN — {title}")
    print("=" * 70)


def _print_records(rows: list[dict], limit: int | None = None):
    shown = rows if limit is None else rows[:limit]
    for i, r in enumerate(shown):
        cells = "  ".join(f"{str(r.get(c, MISSING_PLACEHOLDER)):<14}" for c in LIST_COLUMNS)
        print(f"  {i:>4}  {cells}")
    if limit is not None and len(rows) > limit:
        print(f"  ... {len(rows) - limit} more")


def cmd_ingest(args):
    """Ingest a spreadsheet into the store."""
    _banner("INGEST")
    records = ingest_file(args.file)
    rows = [r.to_display() for r in records]
    print(f"\n  {len(records)} rows read from {Path(args.file).name}\n")
    _print_records(rows, limit=args.limit)

    store = SnapshotStore()
    if args.preview:
        print("\n  Preview only — store not modified.")
    elif args.replace:
        store.replace_all(records)
        print(f"\n  Store replaced: {store.count()} records")
    else:
        store.append(records)
        print(f"\n  Appended: store now has {store.count()} records")
    print("=" * 70 + "\n")


def cmd_add(args):
    """Add one client from the manual entry fields."""
    try:
        record = build_entry_record(args.ci, args.contacto, args.rubro, args.agente, fecha=args.fecha)
    except ValueError as exc:
        print(f"\n  {exc}\n")
        sys.exit(2)

    # configuration is checked before the record is stored
    settings = require_settings() if args.push else None

    store = SnapshotStore()
    store.append([record])
    print(f"\n  Added {record.client_id} ({record.category}, {record.agent}) — "
          f"{store.count()} records stored")
    if settings is not None:
        try:
            receipt = push_to_sheets([record], settings)
        except NetworkFailure as exc:
            print(f"  Sheets: failed, record kept locally ({exc})")
            if exc.detail:
                print(f"  {exc.detail}")
        else:
            print(f"  Sheets: {receipt.status.value}")
    print()


def cmd_list(args):
    """List stored records."""
    rows = [r.to_display() for r in SnapshotStore().records()]
    _banner(f"STORE ({len(rows)} records)")
    _print_records(rows, limit=args.limit)
    print()


def cmd_export(args):
    """Write the current dataset to a snapshot file."""
    snap = SnapshotStore().export_snapshot()
    out_dir = Path(args.output) if args.output else EXPORTS_FOLDER
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / snap.filename
    out_path.write_bytes(snap.content)
    print(f"\n  Snapshot saved: {out_path}\n")


def cmd_import(args):
    """Replace the dataset with a snapshot file."""
    data = SnapshotStore().import_snapshot(Path(args.file).read_bytes())
    print(f"\n  Imported {len(data)} records from {Path(args.file).name}\n")


def _prompt_for_snapshot() -> bytes | None:
    answer = input("  Store is empty. Path to a BASE_MAESTRA snapshot (blank to cancel): ").strip()
    if not answer:
        return None
    return Path(answer).expanduser().read_bytes()


def cmd_sync(args):
    """Refresh the view; an empty agent device imports a snapshot."""
    result = SnapshotStore().sync(Role(args.role), choose_file=_prompt_for_snapshot)
    if result.action is SyncAction.CANCELLED:
        print("\n  Sync cancelled.\n")
        return
    print(f"\n  Sync {result.action.value}: {len(result.records)} records\n")


def cmd_plan(args):
    """Show quota plans."""
    if args.quotas is None:
        plans = list(PLANS.items())
    else:
        plan = lookup_plan(args.quotas)
        if plan is None:
            print(f"\n  No plan for {args.quotas!r} quotas (valid: {', '.join(PLANS)})\n")
            sys.exit(2)
        plans = [(args.quotas.strip(), plan)]
    print()
    for quotas, plan in plans:
        print(f"  {quotas} cuota(s): {format_currency(plan.monthly_amount):>14} / mes   "
              f"total {format_currency(plan.total_amount):>14}")
    print()


def cmd_collection_date(args):
    """Collection date for a diligence date."""
    d = dt.date.fromisoformat(args.date)
    print(f"\n  Diligence {d.isoformat()} → collection {compute_collection_date(d).isoformat()}\n")


def cmd_summary(args):
    """Capture statistics, optionally written to Excel."""
    store = SnapshotStore()
    data = capture_report.generate_json(store)
    _banner("CAPTURE SUMMARY")
    print(f"\n  Clients:       {data['total_clients']:,}")
    print(f"  Load days:     {data['unique_dates']:,}")
    print(f"  Daily average: {data['daily_average']:.2f}")
    print(f"  Date range:    {data['date_range']}")
    if data["by_category"]:
        print("\n  By category:")
        for c in data["by_category"]:
            print(f"    {c['name']:<24} {c['count']:>6}  ({c['share']:.1f}%)")
    if args.excel:
        out_path = capture_report.generate_excel(store, REPORTS_FOLDER / "Captacion_Report.xlsx")
        print(f"\n  Excel saved: {out_path}")
    print("=" * 70 + "\n")


def cmd_push(args):
    """Push stored records to a remote collaborator."""
    records = SnapshotStore().records()
    push = push_to_relational if args.target == "relational" else push_to_sheets
    receipt = push(records)
    print(f"\n  {receipt.target}: {receipt.status.value} ({receipt.records} records)")
    if receipt.detail:
        print(f"  {receipt.detail}")
    print()


def cmd_serve(args):
    """Start the API server."""
    import uvicorn
    print(f"\nStarting CLC Captación API on port {args.port}...")
    uvicorn.run("captacion.main:app", host="0.0.0.0", port=args.port, reload=args.reload,
                timeout_keep_alive=65)


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        description="CLC Captación — client capture, snapshot sync, remote push",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING (default: CAPTACION_LOG_LEVEL)")
    subparsers = parser.add_subparsers(dest="command", help="Command")

    ingest_parser = subparsers.add_parser("ingest", help="Ingest a .xlsx/.csv spreadsheet")
    ingest_parser.add_argument("file", help="Spreadsheet path")
    mode = ingest_parser.add_mutually_exclusive_group()
    mode.add_argument("--replace", action="store_true", help="Replace the store instead of appending")
    mode.add_argument("--preview", action="store_true", help="Only show the normalized rows")
    ingest_parser.add_argument("--limit", type=int, default=20, help="Rows to print (default 20)")
    ingest_parser.set_defaults(func=cmd_ingest)

    add_parser = subparsers.add_parser("add", help="Add one client manually")
    add_parser.add_argument("--ci", required=True, help="Client ID (cédula)")
    add_parser.add_argument("--contacto", required=True, help="Client name / contact")
    add_parser.add_argument("--rubro", required=True, help="Category")
    add_parser.add_argument("--agente", required=True, help="Agent")
    add_parser.add_argument("--fecha", help="Load date YYYY-MM-DD (default today)")
    add_parser.add_argument("--push", action="store_true", help="Also push to the sheets backend")
    add_parser.set_defaults(func=cmd_add)

    list_parser = subparsers.add_parser("list", help="List stored records")
    list_parser.add_argument("--limit", type=int, default=None, help="Max rows to print")
    list_parser.set_defaults(func=cmd_list)

    export_parser = subparsers.add_parser("export", help="Export a snapshot file")
    export_parser.add_argument("--output", help="Output directory (default: exports folder)")
    export_parser.set_defaults(func=cmd_export)

    import_parser = subparsers.add_parser("import", help="Import a snapshot file (replaces the store)")
    import_parser.add_argument("file", help="Snapshot .json path")
    import_parser.set_defaults(func=cmd_import)

    sync_parser = subparsers.add_parser("sync", help="Refresh from the local store")
    sync_parser.add_argument("--role", choices=[r.value for r in Role], default=Role.AGENT.value)
    sync_parser.set_defaults(func=cmd_sync)

    plan_parser = subparsers.add_parser("plan", help="Show quota plans")
    plan_parser.add_argument("quotas", nargs="?", help="Quota count 1-6 (default: all)")
    plan_parser.set_defaults(func=cmd_plan)

    cd_parser = subparsers.add_parser("collection-date", help="Collection date for a diligence date")
    cd_parser.add_argument("date", help="Diligence date YYYY-MM-DD")
    cd_parser.set_defaults(func=cmd_collection_date)

    summary_parser = subparsers.add_parser("summary", help="Capture statistics")
    summary_parser.add_argument("--excel", action="store_true", help="Also write the Excel report")
    summary_parser.set_defaults(func=cmd_summary)

    push_parser = subparsers.add_parser("push", help="Push stored records to a remote")
    push_parser.add_argument("target", choices=["relational", "sheets"])
    push_parser.set_defaults(func=cmd_push)

    serve_parser = subparsers.add_parser("serve", help="Start API server")
    serve_parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", "8000")), help="Port (default 8000)")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return

    configure_logging(args.log_level)
    try:
        args.func(args)
    except NetworkFailure as exc:
        print(f"\n  ERROR: {exc}")
        if exc.detail:
            print(f"  {exc.detail}")
        sys.exit(1)
    except CaptacionError as exc:
        print(f"\n  ERROR: {exc}\n")
        sys.exit(1)
    except OSError as exc:
        print(f"\n  ERROR: {exc.strerror or exc}: {exc.filename or ''}\n")
        sys.exit(1)
    except ValueError as exc:
        print(f"\n  ERROR: invalid value — {exc}\n")
        sys.exit(2)


if __name__ == "__main__":
    main()
