import argparse
import json
from pathlib import Path

from . import __version__
from .database import init_database
from .env import get_settings, load_env
from .fingerprint import compute_resume_hash
from .logger import get_logger
from .reconcile import STRATEGIES
from .resolver import ReferenceNotFound
from .retry import RetryError
from .schema import validate_submission
from .service import ResumeService
from .translator import TranslationFailure


def _service(args: argparse.Namespace) -> ResumeService:
    return ResumeService(
        Path(args.db),
        strict_translation=args.strict,
        reconcile_strategy=args.settings.reconcile_strategy,
    )


def _print_record(record: dict) -> None:
    print(f"ID: {record['id']}")
    print(f"  Hash: {record['hash']}")
    print(f"  Job: {record['job_id']}")
    print(f"  Owner: {record['owner_id']}")
    print(f"  Created: {record['created_at']}")
    print(f"  Updated: {record['updated_at']}")
    result = record["canonical_result"]
    print(f"  Result: {json.dumps(result, ensure_ascii=False) if result is not None else '(none)'}")


def cmd_init_db(args: argparse.Namespace) -> None:
    db_path = Path(args.db)
    init_database(db_path)
    print(f"Initialized database at {db_path}")


def cmd_submit(args: argparse.Namespace) -> None:
    if args.file:
        file_path = Path(args.file)
        if not file_path.exists():
            raise SystemExit(f"Resume file not found: {file_path}")
        resume_hash = compute_resume_hash(file_path.read_bytes())
    elif args.hash:
        resume_hash = args.hash
    else:
        raise SystemExit("Provide --hash or --file")

    raw_result = args.result
    if args.result_file:
        result_path = Path(args.result_file)
        if not result_path.exists():
            raise SystemExit(f"Result file not found: {result_path}")
        raw_result = result_path.read_text(encoding="utf-8")

    try:
        record = _service(args).submit(resume_hash, raw_result, args.job, args.owner)
    except (ReferenceNotFound, TranslationFailure, RetryError) as e:
        raise SystemExit(str(e))
    _print_record(record)


def cmd_import(args: argparse.Namespace) -> None:
    input_path = Path(args.input)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    with input_path.open("r", encoding="utf-8") as f:
        try:
            submissions = json.load(f)
        except json.JSONDecodeError as e:
            raise SystemExit(f"Invalid JSON in {input_path}: {e}")
    if not isinstance(submissions, list):
        raise SystemExit("Input must be a JSON list of submissions")

    service = _service(args)
    ok = invalid = failed = 0
    for i, submission in enumerate(submissions, 1):
        errors = validate_submission(submission) if isinstance(submission, dict) else ["Submission must be an object"]
        if errors:
            print(f"[invalid] #{i} - {errors}")
            invalid += 1
            continue
        try:
            record = service.submit(
                submission["hash"], submission.get("raw_result"), submission["job_id"], submission["owner_id"]
            )
        except (ReferenceNotFound, TranslationFailure, RetryError) as e:
            print(f"[error] #{i} {submission['hash']} -> {e}")
            failed += 1
            continue
        print(f"[ok] #{i} {record['hash']} -> id {record['id']}")
        ok += 1
    print(f"Done. total={len(submissions)} ok={ok} invalid={invalid} failed={failed}")


def cmd_show(args: argparse.Namespace) -> None:
    record = _service(args).get(args.hash)
    if record is None:
        raise SystemExit(f"No record for hash: {args.hash}")
    _print_record(record)


def cmd_list(args: argparse.Namespace) -> None:
    records = _service(args).list_records(job_id=args.job, owner_id=args.owner)
    if not records:
        print("No records found.")
        return
    print(f"Found {len(records)} records:\n")
    for record in records:
        _print_record(record)
        print()


def cmd_reconcile(args: argparse.Namespace) -> None:
    strategy = args.strategy or args.settings.reconcile_strategy
    if strategy not in STRATEGIES:
        raise SystemExit(f"Unknown reconciliation strategy: {strategy} (expected one of {', '.join(STRATEGIES)})")
    summary = _service(args).reconcile(strategy=strategy)
    print(f"Processed: {summary['processed']}")
    print(f"Removed:   {summary['removed']}")
    print(f"Pairs affected: {summary['affected_groups']}")
    for job_id, owner_id, removed in summary["details"]:
        print(f"  job={job_id} owner={owner_id} removed={removed}")


def main():
    # Load .env if present (RESUMESTORE_DB_PATH, RESUMESTORE_LOG_LEVEL, etc.)
    load_env()
    settings = get_settings()
    get_logger(level=settings.log_level, log_dir=settings.log_dir)

    parser = argparse.ArgumentParser(prog="resumestore", description="Resume evaluation store")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--db", default=str(settings.db_path), help=f"Path to SQLite database (default: {settings.db_path})")
    parser.add_argument(
        "--strict",
        action="store_true",
        default=settings.strict_translation,
        help="Reject malformed result payloads instead of storing an empty result",
    )
    parser.set_defaults(settings=settings)

    subparsers = parser.add_subparsers(dest="command")
    ini = subparsers.add_parser("init-db", help="Create the database and tables")
    ini.set_defaults(func=cmd_init_db)

    sub = subparsers.add_parser("submit", help="Store or update the evaluation for one resume")
    sub.add_argument("--hash", help="Resume content hash")
    sub.add_argument("--file", help="Resume file; its SHA-256 is used as the hash")
    sub.add_argument("--result", help="Evaluation payload in the analysis service's notation")
    sub.add_argument("--result-file", help="File containing the evaluation payload")
    sub.add_argument("--job", type=int, required=True, help="Job ID")
    sub.add_argument("--owner", type=int, required=True, help="Applicant ID")
    sub.set_defaults(func=cmd_submit)

    imp = subparsers.add_parser("import", help="Submit a JSON list of {hash, raw_result, job_id, owner_id}")
    imp.add_argument("--input", required=True, help="Path to submissions JSON")
    imp.set_defaults(func=cmd_import)

    shw = subparsers.add_parser("show", help="Show the record for a hash")
    shw.add_argument("--hash", required=True, help="Resume content hash")
    shw.set_defaults(func=cmd_show)

    lst = subparsers.add_parser("list", help="List records, optionally by job and/or owner")
    lst.add_argument("--job", type=int, help="Filter by job ID")
    lst.add_argument("--owner", type=int, help="Filter by applicant ID")
    lst.set_defaults(func=cmd_list)

    rec = subparsers.add_parser("reconcile", help="Remove duplicate records per (job, owner) pair")
    rec.add_argument("--strategy", choices=list(STRATEGIES), help=f"Sweep strategy (default: {settings.reconcile_strategy})")
    rec.set_defaults(func=cmd_reconcile)

    args = parser.parse_args()

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        args.func(args)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
