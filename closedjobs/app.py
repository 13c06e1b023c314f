import argparse
import getpass
from pathlib import Path

from . import __version__
from .auth import Authenticator, Credentials, StaticCredentialAuthenticator
from .controller import VALIDATION_ERROR, JobListController
from .env import get_settings, load_env
from .export import format_value, render_table, write_csv
from .logger import get_logger
from .storage import open_store

# argparse dest -> job field
FIELD_ARGS = {
    "job_number": "jobNumber",
    "client_name": "clientName",
    "date_invoiced": "dateInvoiced",
    "invoice_number": "invoiceNumber",
    "amount": "amount",
    "job_closed": "jobClosed",
}


def login(args: argparse.Namespace, authenticator: Authenticator) -> None:
    username = args.username if args.username is not None else input("Username: ")
    password = args.password if args.password is not None else getpass.getpass("Password: ")
    if not authenticator.authenticate(Credentials(username, password)):
        get_logger().warning("Login rejected", username=username)
        raise SystemExit("Invalid username or password")


def apply_field_args(controller: JobListController, args: argparse.Namespace) -> None:
    """Copy every field option given on the command line into the draft."""
    for dest, field_name in FIELD_ARGS.items():
        value = getattr(args, dest, None)
        if value is None:
            continue
        try:
            controller.set_draft_field(field_name, value)
        except ValueError as e:
            print(str(e))
            raise SystemExit(2)


def _report(controller: JobListController, ok: bool) -> int:
    print(controller.state.message)
    if ok:
        return 0
    return 2 if controller.state.error == VALIDATION_ERROR else 1


def cmd_list(args: argparse.Namespace, controller: JobListController) -> int:
    if not controller.load_all():
        return _report(controller, False)
    jobs = controller.jobs
    if not jobs:
        print("No jobs in store.")
        return 0
    print(f"Found {len(jobs)} jobs:\n")
    for job in jobs:
        print(f"ID: {job.get('id')}")
        print(f"  Job Number: {format_value('jobNumber', job.get('jobNumber'))}")
        print(f"  Client: {format_value('clientName', job.get('clientName'))}")
        print(f"  Date Invoiced: {format_value('dateInvoiced', job.get('dateInvoiced'))}")
        print(f"  Invoice Number: {format_value('invoiceNumber', job.get('invoiceNumber'))}")
        print(f"  Amount: {format_value('amount', job.get('amount'))}")
        print(f"  Closed: {format_value('jobClosed', job.get('jobClosed'))}")
        print()
    return 0


def cmd_add(args: argparse.Namespace, controller: JobListController) -> int:
    if not controller.load_all():
        return _report(controller, False)
    apply_field_args(controller, args)
    return _report(controller, controller.submit())


def _load_and_find(args: argparse.Namespace, controller: JobListController):
    if not controller.load_all():
        return None, _report(controller, False)
    record = controller.find(args.id)
    if record is None:
        print(f"Job not found: {args.id}")
        return None, 1
    return record, 0


def cmd_edit(args: argparse.Namespace, controller: JobListController) -> int:
    record, code = _load_and_find(args, controller)
    if record is None:
        return code
    controller.begin_edit(record)
    apply_field_args(controller, args)
    return _report(controller, controller.submit())


def cmd_delete(args: argparse.Namespace, controller: JobListController) -> int:
    record, code = _load_and_find(args, controller)
    if record is None:
        return code
    return _report(controller, controller.delete_one(record["id"]))


def cmd_delete_all(args: argparse.Namespace, controller: JobListController) -> int:
    if not args.yes:
        answer = input("Delete ALL jobs? This cannot be undone. [y/N] ")
        if answer.strip().lower() not in ("y", "yes"):
            print("Aborted.")
            return 0
    if not controller.load_all():
        return _report(controller, False)
    return _report(controller, controller.delete_all())


def cmd_print(args: argparse.Namespace, controller: JobListController) -> int:
    if not controller.load_all():
        return _report(controller, False)
    print(render_table(controller.jobs), end="")
    if args.csv:
        count = write_csv(controller.jobs, Path(args.csv))
        print(f"Wrote {count} jobs to {args.csv}")
    return 0


def _add_field_options(sub: argparse.ArgumentParser, required: bool) -> None:
    sub.add_argument("--job-number", required=required, help="Job number")
    sub.add_argument("--client-name", required=required, help="Client name")
    sub.add_argument("--date-invoiced", help="Invoice date (YYYY-MM-DD)")
    sub.add_argument("--invoice-number", help="Invoice number")
    sub.add_argument("--amount", help="Invoiced amount")
    closed = sub.add_mutually_exclusive_group()
    closed.add_argument("--closed", dest="job_closed", action="store_const", const=True, help="Mark the job closed")
    closed.add_argument("--open", dest="job_closed", action="store_const", const=False, help="Mark the job open")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="closedjobs", description="Closed jobs tracker")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--username", help="Login username (prompted if omitted)")
    parser.add_argument("--password", help="Login password (prompted if omitted)")
    parser.add_argument("--log-level", type=str.upper, choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], help="Console log level (default: CLOSEDJOBS_LOG_LEVEL or INFO)")

    subparsers = parser.add_subparsers(dest="command")
    lst = subparsers.add_parser("list", help="Fetch and list all jobs")
    lst.set_defaults(func=cmd_list)

    add = subparsers.add_parser("add", help="Add a closed job")
    _add_field_options(add, required=True)
    add.set_defaults(func=cmd_add)

    edit = subparsers.add_parser("edit", help="Edit fields of an existing job")
    edit.add_argument("--id", required=True, help="Job id")
    _add_field_options(edit, required=False)
    edit.set_defaults(func=cmd_edit)

    dele = subparsers.add_parser("delete", help="Delete one job")
    dele.add_argument("--id", required=True, help="Job id")
    dele.set_defaults(func=cmd_delete)

    dall = subparsers.add_parser("delete-all", help="Delete every job in the table")
    dall.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")
    dall.set_defaults(func=cmd_delete_all)

    prt = subparsers.add_parser("print", help="Print the job list as a table")
    prt.add_argument("--csv", help="Also write the list to this CSV file")
    prt.set_defaults(func=cmd_print)
    return parser


def main(argv=None, authenticator: Authenticator = None):
    # Load .env if present (SUPABASE_URL, SUPABASE_KEY, credentials, etc.)
    load_env()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if not hasattr(args, "func"):
        parser.print_help()
        return

    try:
        settings = get_settings()
    except ValueError as e:
        raise SystemExit(str(e))

    logger = get_logger()
    logger.set_level(args.log_level or settings.log_level)

    login(args, authenticator or StaticCredentialAuthenticator.from_env())

    try:
        store = open_store(settings)
    except ValueError as e:
        raise SystemExit(str(e))

    controller = JobListController(store, batch_size=settings.batch_size)
    try:
        code = args.func(args, controller)
    finally:
        store.close()
        logger.log_metrics_summary()

    if code:
        raise SystemExit(code)


if __name__ == "__main__":
    main()
