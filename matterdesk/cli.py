#!/usr/bin/env python3
"""
MatterDesk command line client
"""

import argparse
import getpass
import logging
import sys
from typing import List, Optional

import pydantic
import requests

from matterdesk.config import Settings, get_settings
from matterdesk.dates import format_date_label, format_relative_time_from_now
from matterdesk.exceptions import MatterDeskError
from matterdesk.helpers import get_greeting_message
from matterdesk.http_client import ApiClient
from matterdesk.invoices.utils import filter_invoices, format_currency, get_status_meta
from matterdesk.roles import get_default_route_for_role, get_role_label, resolve_privileged_path
from matterdesk.services.auth_service import AuthService
from matterdesk.services.invoice_service import InvoiceService
from matterdesk.services.matter_service import MatterService
from matterdesk.services.notice_service import NoticeService
from matterdesk.services.report_service import ReportService
from matterdesk.services.task_service import TaskService
from matterdesk.session import UserSession
from matterdesk.tasks.progress import calculate_task_completion
from matterdesk.token_storage import build_token_storage

logger = logging.getLogger(__name__)


class CliContext:
    def __init__(self, client: ApiClient):
        self.client = client
        self.session = UserSession(client)


def create_context(settings: Settings) -> CliContext:
    token_storage = build_token_storage(settings.token_file)
    client = ApiClient(
        base_url=settings.base_url,
        token_storage=token_storage,
        timeout=settings.timeout_seconds,
    )
    return CliContext(client)


def _require_user(ctx: CliContext):
    user = ctx.session.initialize()
    if not user:
        raise MatterDeskError("Not logged in. Run `matterdesk login EMAIL` first.")
    return user


def cmd_login(args, ctx: CliContext) -> int:
    password = args.password or getpass.getpass("Password: ")
    user = AuthService(ctx.session).login(args.email, password, remember_me=args.remember)

    print(f"\n✅ {get_greeting_message()}, {user.name or user.email}!")
    print(f"👤 Role: {get_role_label(user.role) or user.role}")
    print(f"🧭 Home: {get_default_route_for_role(user.role)}")
    if user.must_change_password:
        print("⚠️  Your password must be changed before continuing.")
    return 0


def cmd_logout(args, ctx: CliContext) -> int:
    ctx.session.clear_user()
    print("👋 Logged out")
    return 0


def cmd_whoami(args, ctx: CliContext) -> int:
    user = _require_user(ctx)

    print(f"\n👤 {user.name} <{user.email}>")
    print(f"   Role: {get_role_label(user.role) or user.role or 'Unknown'}")
    print(f"   Home: {get_default_route_for_role(user.role)}")
    print(f"   Invoices: {resolve_privileged_path('/admin/invoices', user.role)}")
    if user.office_location:
        print(f"   Office: {user.office_location}")
    return 0


def cmd_tasks(args, ctx: CliContext) -> int:
    _require_user(ctx)
    listing = TaskService(ctx.client).list_tasks(
        status_filter=args.status,
        scope=args.scope,
        include_priority_sort=args.priority_sort,
    )

    print("\n" + "  ".join(f"{tab.label} ({tab.count})" for tab in listing.tabs))
    print("=" * 80)

    for i, task in enumerate(listing.tasks, 1):
        completion = calculate_task_completion(task.progress, task.completed_todo_count, task.todo_checklist)
        print(f"\n{i}. 📝 {task.title or 'Untitled task'}")
        print(f"   Status: {task.status}   Priority: {task.priority}   Done: {completion:.0f}%")
        print(f"   📅 Due: {format_date_label(task.due_date)}")
        print("-" * 80)
    return 0


def cmd_invoices(args, ctx: CliContext) -> int:
    user = _require_user(ctx)
    service = InvoiceService(ctx.client)

    if args.derive:
        listing = service.derive_from_matters(user.role, user.id)
    else:
        listing = service.list_invoices(user.role, user.id)

    invoices = filter_invoices(listing.invoices, args.search, args.status)
    summary = listing.summary

    print(f"\n🧾 Invoices: {summary.total_invoices}")
    print(f"💰 Billed: {format_currency(summary.total_billed)}   Collected: {format_currency(summary.total_collected)}")
    print(f"📉 Outstanding: {format_currency(summary.outstanding_balance)}   Collection rate: {summary.collection_rate}%")
    print(f"⏰ Overdue: {summary.overdue_count}   Due soon: {summary.due_soon_count}   Paid: {summary.paid_count}")
    print("=" * 80)

    for i, invoice in enumerate(invoices, 1):
        print(f"\n{i}. {invoice.invoice_number} · {invoice.matter_title}")
        print(f"   Client: {invoice.client.name or 'Unassigned'}")
        print(f"   Total: {format_currency(invoice.total_amount)}   Balance: {format_currency(invoice.balance_due)}")
        print(f"   Status: {get_status_meta(invoice.status)['label']}   📅 Due: {invoice.due_date_label}")
        print("-" * 80)
    return 0


def cmd_matters(args, ctx: CliContext) -> int:
    _require_user(ctx)
    matters = MatterService(ctx.client).list_matters()

    print(f"\n📁 Matters: {len(matters)}")
    print("=" * 80)
    for i, matter in enumerate(matters, 1):
        number = f" ({matter.matter_number})" if matter.matter_number else ""
        print(f"\n{i}. {matter.title or 'Untitled Matter'}{number}")
        print(f"   Status: {matter.status or 'N/A'}   Practice area: {matter.practice_area or 'N/A'}")
        print(f"   Open tasks: {matter.stats.open_task_count}   Closed tasks: {matter.stats.closed_task_count}")
        print("-" * 80)
    return 0


def cmd_notices(args, ctx: CliContext) -> int:
    _require_user(ctx)
    service = NoticeService(ctx.client)
    notices = service.get_active() if args.active else service.list_all()

    if not notices:
        print("📭 No notices")
        return 0

    for notice in notices:
        print(f"📢 {notice.message}  ({format_relative_time_from_now(notice.created_at or notice.starts_at)})")
    return 0


def cmd_export(args, ctx: CliContext) -> int:
    _require_user(ctx)
    service = ReportService(ctx.client)
    if args.report == "tasks":
        path = service.export_tasks(args.output)
    else:
        path = service.export_users(args.output)
    print(f"✅ Report saved to {path}")
    return 0


COMMANDS = {
    "login": cmd_login,
    "logout": cmd_logout,
    "whoami": cmd_whoami,
    "tasks": cmd_tasks,
    "invoices": cmd_invoices,
    "matters": cmd_matters,
    "notices": cmd_notices,
    "export": cmd_export,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="MatterDesk API CLI Tool")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Login command
    login_parser = subparsers.add_parser("login", help="Log in and store the session token")
    login_parser.add_argument("email", help="Account email")
    login_parser.add_argument("--password", help="Password (prompted when omitted)")
    login_parser.add_argument(
        "--remember",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Keep the token on disk between runs",
    )

    subparsers.add_parser("logout", help="Clear the stored session")
    subparsers.add_parser("whoami", help="Show the current user")

    # Tasks command
    tasks_parser = subparsers.add_parser("tasks", help="List tasks")
    tasks_parser.add_argument("--status", default="All", help="Pending, In Progress, Completed or All")
    tasks_parser.add_argument("--scope", choices=["all", "my"], help="Task scope")
    tasks_parser.add_argument("--priority-sort", action="store_true", help="Order by priority before due date")

    # Invoices command
    invoices_parser = subparsers.add_parser("invoices", help="List invoices")
    invoices_parser.add_argument("--search", default="", help="Filter by number, matter or client")
    invoices_parser.add_argument("--status", default="all", help="Filter by invoice status")
    invoices_parser.add_argument("--derive", action="store_true", help="Estimate invoices from matters")

    subparsers.add_parser("matters", help="List matters")

    notices_parser = subparsers.add_parser("notices", help="List notices")
    notices_parser.add_argument("--active", action="store_true", help="Only active notices")

    # Export command
    export_parser = subparsers.add_parser("export", help="Download a report")
    export_parser.add_argument("report", choices=["tasks", "users"], help="Report to export")
    export_parser.add_argument("output", nargs="?", help="Output file")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(level=getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO))

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    try:
        return handler(args, create_context(settings))
    except MatterDeskError as e:
        print(f"❌ {e}")
        return 1
    except requests.exceptions.RequestException as e:
        print(f"❌ Request failed: {e}")
        return 1
    except pydantic.ValidationError as e:
        print(f"❌ Unexpected response from the API: {e.error_count()} invalid field(s)")
        logger.debug(f"Response validation failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
