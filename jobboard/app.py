import argparse
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

from . import __version__
from .api_client import ApiClient
from .applications import ApplicationForm, quick_apply, submit_application
from .config import Settings
from .env import load_env
from .filters import ALL, DEFAULT_SALARY_MAX, DEFAULT_SALARY_MIN, FilterSpec, JobListView
from .logger import get_logger
from .models import JOB_TYPES, JobPosting, parse_job_id
from .postings import PostingForm, create_posting
from .schema import ValidationError
from .storage import load_snapshot, save_snapshot
from .store import JobStore


def _open_store(args: argparse.Namespace) -> JobStore:
    cached = load_snapshot(Path(args.cache))
    # Nothing saved yet: start from the sample postings.
    return JobStore(jobs=cached)


def _save_store(store: JobStore, args: argparse.Namespace) -> None:
    save_snapshot(Path(args.cache), store.jobs)


def _client(args: argparse.Namespace) -> ApiClient:
    settings: Settings = args.settings
    client = ApiClient.from_settings(settings)
    if getattr(args, "api_url", None):
        client.base_url = args.api_url.rstrip("/")
    return client


def _job_id(raw: str):
    try:
        return parse_job_id(raw)
    except ValueError as e:
        raise SystemExit(str(e))


def _format_row(job: JobPosting) -> str:
    liked = "*" if job.is_liked else " "
    return (
        f"{liked} {job.id}  {job.title} | {job.company} | {job.location} | "
        f"{job.salary} | {job.job_type} | {job.posted_time}"
    )


def _print_job(job: JobPosting) -> None:
    print(f"ID: {job.id}")
    print(f"  Title: {job.title}")
    print(f"  Company: {job.company}")
    print(f"  Location: {job.location}")
    print(f"  Experience: {job.experience}")
    print(f"  Type: {job.job_type}")
    print(f"  Salary: {job.salary}")
    print(f"  Status: {job.status}")
    print(f"  Posted: {job.posted_time}")
    if job.application_deadline:
        print(f"  Apply by: {job.application_deadline.date().isoformat()}")
    print(f"  Likes: {job.likes_count}{' (liked)' if job.is_liked else ''}")
    if job.description:
        print(f"  Description: {job.description}")
    if job.requirements:
        print(f"  Requirements: {job.requirements}")
    if job.responsibilities:
        print(f"  Responsibilities: {job.responsibilities}")


def _parse_deadline(raw):
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        raise SystemExit(f"Invalid value for deadline: {raw}")


def _parse_patch(pairs: List[str]) -> Dict[str, Any]:
    patch: Dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep:
            raise SystemExit(f"Expected key=value, got: {pair}")
        key = key.strip()
        try:
            if key == "salary_value":
                patch[key] = float(value)
            elif key == "likes_count":
                patch[key] = int(value)
            elif key == "is_liked":
                patch[key] = value.strip().lower() in {"1", "true", "yes"}
            elif key == "application_deadline":
                patch[key] = datetime.fromisoformat(value)
            else:
                patch[key] = value
        except ValueError:
            raise SystemExit(f"Invalid value for {key}: {value}")
    return patch


def cmd_list(args: argparse.Namespace) -> None:
    store = _open_store(args)
    try:
        criteria = FilterSpec(
            search=args.search,
            location=args.location,
            job_type=args.type,
            salary_min=args.min_salary,
            salary_max=args.max_salary,
        )
    except ValidationError as e:
        raise SystemExit(str(e))
    view = JobListView(store)
    results = view.results(criteria)
    print(view.summary(criteria))
    for job in results:
        print(_format_row(job))


def cmd_show(args: argparse.Namespace) -> None:
    store = _open_store(args)
    job = store.get(_job_id(args.id))
    if job is None:
        raise SystemExit(f"Job not found: {args.id}")
    _print_job(job)


def cmd_post(args: argparse.Namespace) -> None:
    store = _open_store(args)
    form = PostingForm(
        title=args.title or "",
        company=args.company or "",
        description=args.description or "",
        location=args.location or "",
        job_type=args.type or "",
        salary_max=args.salary_max,
        experience=args.experience or "",
        requirements=args.requirements,
        responsibilities=args.responsibilities,
        application_deadline=_parse_deadline(args.deadline),
    )
    client = _client(args) if args.sync else None
    outcome = create_posting(store, form, publish=args.publish, client=client)
    if outcome["status"] == "validation_error":
        print("Invalid:")
        for e in outcome["errors"]:
            print(f" - {e}")
        raise SystemExit(2)
    _save_store(store, args)
    job = outcome["job"]
    print(f"{'Published' if args.publish else 'Draft saved'}: {job.id} {job.title}")
    if "sync_error" in outcome:
        print(f"[warn] kept locally, backend sync failed: {outcome['sync_error']}")


def cmd_update(args: argparse.Namespace) -> None:
    store = _open_store(args)
    patch = _parse_patch(args.set or [])
    if not patch:
        raise SystemExit("Nothing to update. Use --set key=value")
    try:
        found = store.update(_job_id(args.id), patch)
    except ValidationError as e:
        print("Invalid:")
        for err in e.errors:
            print(f" - {err}")
        raise SystemExit(2)
    if not found:
        print(f"Job not found: {args.id} (nothing changed)")
        return
    _save_store(store, args)
    print(f"Updated: {args.id}")


def cmd_delete(args: argparse.Namespace) -> None:
    store = _open_store(args)
    if not store.delete(_job_id(args.id)):
        print(f"Job not found: {args.id} (nothing changed)")
        return
    _save_store(store, args)
    print(f"Deleted: {args.id}")


def cmd_like(args: argparse.Namespace) -> None:
    store = _open_store(args)
    job_id = _job_id(args.id)
    if args.sync:
        result = store.sync_like(_client(args), job_id)
        if not result.ok:
            print(f"[error] {result.error}")
        _save_store(store, args)
        print(f"{job_id}: liked={result.is_liked} likes={result.likes_count}")
        return
    if not store.toggle_like(job_id):
        print(f"Job not found: {args.id} (nothing changed)")
        return
    _save_store(store, args)
    job = store.get(job_id)
    print(f"{job_id}: liked={job.is_liked} likes={job.likes_count}")


def cmd_load(args: argparse.Namespace) -> None:
    store = _open_store(args)
    result = store.load(_client(args), page=args.page, limit=args.limit or args.settings.page_size, merge=args.merge)
    _save_store(store, args)
    if result.ok:
        print(f"Loaded {result.loaded} jobs (page {result.page}/{result.total_pages}, total {result.total})")
        return
    hint = " Try again later." if result.retryable else ""
    print(f"[error] Failed to load jobs: {result.error}.{hint}")
    print(f"Showing {'sample' if result.fallback == 'sample' else 'previously loaded'} jobs instead ({len(store)}).")


def cmd_apply(args: argparse.Namespace) -> None:
    store = _open_store(args)
    job = store.get(_job_id(args.id))
    if job is None:
        raise SystemExit(f"Job not found: {args.id}")
    form = ApplicationForm(
        full_name=args.name or "",
        email=args.email or "",
        resume_path=Path(args.resume) if args.resume else None,
        phone=args.phone or "",
        cover_letter=args.cover_letter or "",
        experience=args.experience or "",
        current_company=args.current_company or "",
        current_role=args.current_role or "",
        notice_period=args.notice_period or "",
        expected_salary=args.expected_salary or "",
        why_interested=args.why_interested or "",
        available_for_interview=args.available or "",
    )
    client = _client(args)
    outcome = submit_application(client, job, form) if args.full else quick_apply(client, job, form)
    if outcome["status"] == "validation_error":
        print("Invalid:")
        for e in outcome["errors"]:
            print(f" - {e}")
        raise SystemExit(2)
    if outcome["status"] == "failed":
        print(f"[error] Application failed: {outcome['message']}")
        return
    print(outcome["message"])


def cmd_health(args: argparse.Namespace) -> None:
    client = _client(args)
    if client.health_check():
        print(f"Backend reachable at {client.base_url}")
    else:
        print(f"Cannot connect to backend at {client.base_url}")


def _add_cache(p: argparse.ArgumentParser, settings: Settings) -> None:
    p.add_argument("--cache", default=str(settings.cache_path), help=f"Path to SQLite job cache (default: {settings.cache_path})")


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jobboard", description="Job board client")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--api-url", help=f"Backend base URL (default: {settings.api_url})")
    parser.set_defaults(settings=settings)

    subparsers = parser.add_subparsers(dest="command")

    lst = subparsers.add_parser("list", help="List published jobs matching the filters")
    lst.add_argument("--search", default="", help="Match title or company (case-insensitive)")
    lst.add_argument("--location", default=ALL, help="Location filter, e.g. remote, hybrid, bangalore (default: all)")
    lst.add_argument("--type", default=ALL, choices=[ALL] + JOB_TYPES, help="Job type (default: all)")
    lst.add_argument("--min-salary", type=float, default=DEFAULT_SALARY_MIN, help="Minimum salary in LPA")
    lst.add_argument("--max-salary", type=float, default=DEFAULT_SALARY_MAX, help="Maximum salary in LPA")
    _add_cache(lst, settings)
    lst.set_defaults(func=cmd_list)

    shw = subparsers.add_parser("show", help="Show one job")
    shw.add_argument("--id", required=True, help="Job id (local:<n>, remote:<id> or bare id)")
    _add_cache(shw, settings)
    shw.set_defaults(func=cmd_show)

    pst = subparsers.add_parser("post", help="Create a job posting (draft unless --publish)")
    pst.add_argument("--title")
    pst.add_argument("--company")
    pst.add_argument("--description")
    pst.add_argument("--location")
    pst.add_argument("--type", choices=JOB_TYPES)
    pst.add_argument("--salary-max", type=float, help="Maximum annual salary in rupees")
    pst.add_argument("--experience", help="Experience band, e.g. '2-4 yr Exp'")
    pst.add_argument("--requirements")
    pst.add_argument("--responsibilities")
    pst.add_argument("--deadline", help="Application deadline YYYY-MM-DD")
    pst.add_argument("--publish", action="store_true", help="Publish instead of saving a draft")
    pst.add_argument("--sync", action="store_true", help="Create the job on the backend as well")
    _add_cache(pst, settings)
    pst.set_defaults(func=cmd_post)

    upd = subparsers.add_parser("update", help="Update fields of a job")
    upd.add_argument("--id", required=True)
    upd.add_argument("--set", action="append", metavar="KEY=VALUE", help="Field to change (repeatable)")
    _add_cache(upd, settings)
    upd.set_defaults(func=cmd_update)

    dlt = subparsers.add_parser("delete", help="Delete a job")
    dlt.add_argument("--id", required=True)
    _add_cache(dlt, settings)
    dlt.set_defaults(func=cmd_delete)

    lk = subparsers.add_parser("like", help="Toggle like on a job")
    lk.add_argument("--id", required=True)
    lk.add_argument("--sync", action="store_true", help="Send the like to the backend")
    _add_cache(lk, settings)
    lk.set_defaults(func=cmd_like)

    ld = subparsers.add_parser("load", help="Load jobs from the backend")
    ld.add_argument("--page", type=int, default=1)
    ld.add_argument("--limit", type=int, help=f"Page size (default: {settings.page_size})")
    ld.add_argument("--merge", action="store_true", help="Add to the current jobs instead of replacing them")
    _add_cache(ld, settings)
    ld.set_defaults(func=cmd_load)

    app = subparsers.add_parser("apply", help="Apply to a job")
    app.add_argument("--id", required=True)
    app.add_argument("--name")
    app.add_argument("--email")
    app.add_argument("--resume", help="Path to resume (.pdf, .doc, .docx, max 5MB)")
    app.add_argument("--phone")
    app.add_argument("--cover-letter")
    app.add_argument("--full", action="store_true", help="Submit the full application form (uploads the resume)")
    app.add_argument("--experience")
    app.add_argument("--current-company")
    app.add_argument("--current-role")
    app.add_argument("--notice-period")
    app.add_argument("--expected-salary")
    app.add_argument("--why-interested")
    app.add_argument("--available", help="Interview availability")
    _add_cache(app, settings)
    app.set_defaults(func=cmd_apply)

    hc = subparsers.add_parser("health", help="Check backend connectivity")
    hc.set_defaults(func=cmd_health)

    return parser


def main(argv=None):
    load_env()
    settings = Settings.from_env()
    logger = get_logger(level=settings.log_level, log_dir=settings.log_dir, enable_console=False)
    parser = build_parser(settings)
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        args.func(args)
        logger.log_metrics_summary()
        return

    parser.print_help()


if __name__ == "__main__":
    main()
