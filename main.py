#!/usr/bin/env python3
"""
Jobly -- administration CLI.

Usage:
  python main.py create-user admin --first Ada --last Lovelace --email ada@example.com --admin
  python main.py add-job "Staff Engineer" acme --salary 180000 --equity 0.01
  python main.py serve --port 8000

Commands run with shell access to the database, so they act as a built-in
admin identity and go through the same validation as the HTTP API.

Environment variables:
  DATABASE_URL       SQLAlchemy URL for users and applications (default: sqlite jobly.db)
  JOBS_DATABASE_URL  SQLAlchemy URL for the job catalog (default: DATABASE_URL)
  SECRET_KEY         JWT signing key, at least 32 chars (or set DEBUG=true)
"""

import argparse
import getpass
import sys

from auth.models import CallerIdentity
from core.config import get_settings
from core.errors import JoblyError
from jobs.catalog import JobCatalog
from jobs.models import Job
from users.directory import UserDirectory
from users.store import UserStore
from users.tracker import ApplicationTracker

SYSTEM_CALLER = CallerIdentity(username="system", is_admin=True)


def _prompt_for_password() -> str:
    for _ in range(3):
        password = getpass.getpass("Password: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Passwords do not match. Try again.", file=sys.stderr)
            continue
        return password
    raise SystemExit("Failed to set password after three attempts.")


def _create_user(args: argparse.Namespace) -> int:
    settings = get_settings()
    store = UserStore(settings.database_url)
    catalog = JobCatalog(settings.jobs_database_url)
    directory = UserDirectory(store, ApplicationTracker(store, catalog))
    payload = {
        "username": args.username,
        "firstName": args.first,
        "lastName": args.last,
        "email": args.email,
        "password": _prompt_for_password(),
        "isAdmin": args.admin,
    }
    try:
        user, token = directory.create_user(payload, caller=SYSTEM_CALLER)
    except JoblyError as exc:
        print(f"Error: {exc.message}" + (f" ({exc.detail})" if exc.detail else ""), file=sys.stderr)
        return 1
    finally:
        store.close()
        catalog.close()

    role = "admin" if user.is_admin else "user"
    print(f"Created {role} {user.username} <{user.email}>")
    print(f"Token: {token}")
    return 0


def _add_job(args: argparse.Namespace) -> int:
    catalog = JobCatalog(get_settings().jobs_database_url)
    try:
        job_id = catalog.create_job(
            Job(title=args.title, company_handle=args.company, salary=args.salary, equity=args.equity)
        )
    finally:
        catalog.close()
    print(f"Created job #{job_id}: {args.title} at {args.company}")
    return 0


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(
        prog="jobly",
        description="Jobly user and job application service.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create-user", help="Create a user account (prompts for the password)")
    create.add_argument("username")
    create.add_argument("--first", required=True, help="First name")
    create.add_argument("--last", required=True, help="Last name")
    create.add_argument("--email", required=True)
    create.add_argument("--admin", action="store_true", help="Grant admin rights")
    create.set_defaults(func=_create_user)

    job = sub.add_parser("add-job", help="Add a job to the catalog")
    job.add_argument("title")
    job.add_argument("company", help="Company handle")
    job.add_argument("--salary", type=int, default=None)
    job.add_argument("--equity", default=None, help="Equity as a decimal fraction, e.g. 0.05")
    job.set_defaults(func=_add_job)

    serve = sub.add_parser("serve", help="Run the API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")
    serve.set_defaults(func=_serve)

    args = parser.parse_args()
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
