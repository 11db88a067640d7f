"""Command-line entry point for inspecting and uploading projects.

The repository is in-memory only, so the CLI operates on whatever the
repository is seeded with (``--sample-data`` or ``sync.sample_data``).
The sample projects are all SYNCED, so ``upload`` reports "Nothing to
upload." and issues no remote calls.  Pushing real edits requires saving
them through ``ProjectRepository`` from Python code.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from dotenv import load_dotenv

from . import __version__
from .analytics import create_analytics
from .config import Config, load_config
from .config_loader import discover_config_files, load_hierarchical_config
from .config_schema import UnifiedConfig, build_config, to_yaml_fallbacks
from .core.client import RestApiClient
from .errors import InspectionSyncError
from .logger import setup_logging
from .sync import (
    ProjectRepository,
    format_project_tree,
    format_upload_report,
    pending_changes,
    project_to_json,
    report_to_json,
)

logger = logging.getLogger(__name__)


class _OfflineClient:
    """Stand-in remote client for commands that never upload."""

    def __getattr__(self, name: str) -> Any:
        raise InspectionSyncError(
            "No API URL configured. Set INSPECTION_API_URL or pass --url."
        )


def bootstrap(overrides: dict[str, Any]) -> tuple[Config, UnifiedConfig]:
    """Resolve configuration from .env, YAML files, env vars and CLI args."""
    load_dotenv()

    unified = build_config(load_hierarchical_config())
    config = load_config(
        url=overrides.get("url"),
        token=overrides.get("token"),
        insecure=overrides.get("insecure", False),
        debug=overrides.get("debug", False),
        sample_data=overrides.get("sample_data", False),
        yaml_fallbacks=to_yaml_fallbacks(unified),
    )
    return config, unified


def build_repository(config: Config) -> ProjectRepository:
    client = RestApiClient(config) if config.api_url else _OfflineClient()
    return ProjectRepository(
        client,
        create_analytics(config.analytics),
        serialize_uploads=config.serialize_uploads,
        sample_data=config.sample_data,
    )


def cmd_list(repo: ProjectRepository, args: argparse.Namespace) -> int:
    projects = repo.projects.value
    if args.json:
        print(
            json.dumps(
                [
                    {
                        "id": p.id,
                        "name": p.name,
                        "sync_state": p.sync_state.value,
                        "pending_changes": pending_changes(p),
                    }
                    for p in projects
                ],
                indent=2,
            )
        )
        return 0
    if not projects:
        print("No projects.")
        return 0
    for p in projects:
        print(
            f"{p.id}  {p.name}  [{p.sync_state.value}]  "
            f"{pending_changes(p)} pending"
        )
    return 0


def cmd_show(repo: ProjectRepository, args: argparse.Namespace) -> int:
    project = repo.require(args.project_id)
    if args.json:
        print(json.dumps(project_to_json(project), indent=2))
    else:
        print(format_project_tree(project))
    return 0


def cmd_upload(repo: ProjectRepository, args: argparse.Namespace) -> int:
    repo.require(args.project_id)
    report = asyncio.run(repo.upload_project(args.project_id))
    if args.json:
        print(json.dumps(report_to_json(report), indent=2))
    else:
        print(format_upload_report(report))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="inspection-sync",
        description="Inspect local inspection projects and upload them to the remote service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List the sample projects
  inspection-sync --sample-data list

  # Show one project as a tree
  inspection-sync --sample-data show sample-project-1

  # Upload against a local service
  inspection-sync --url http://localhost:8000/api --sample-data upload sample-project-1
        """,
    )
    parser.add_argument(
        "--url",
        help="Override remote service URL (takes precedence over INSPECTION_API_URL and config files)",
    )
    parser.add_argument(
        "--token",
        help="Override bearer token (visible in process list -- prefer INSPECTION_API_TOKEN)",
    )
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Skip SSL certificate verification (use only for development)",
    )
    parser.add_argument(
        "--sample-data",
        action="store_true",
        help="Seed the repository with sample projects",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging"
    )
    parser.add_argument("--log-file", help="Also write logs to this file")
    parser.add_argument(
        "--version",
        action="version",
        version=f"inspection-sync version {__version__}",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="List projects with pending changes")
    p_list.add_argument("--json", action="store_true", help="Output JSON")
    p_list.set_defaults(handler=cmd_list)

    p_show = sub.add_parser("show", help="Show one project as a tree")
    p_show.add_argument("project_id")
    p_show.add_argument("--json", action="store_true", help="Output JSON")
    p_show.set_defaults(handler=cmd_show)

    p_upload = sub.add_parser(
        "upload",
        help="Upload one project (seeded projects are already synced, so this sends nothing)",
    )
    p_upload.add_argument("project_id")
    p_upload.add_argument("--json", action="store_true", help="Output JSON")
    p_upload.set_defaults(handler=cmd_upload)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    overrides: dict[str, Any] = {}
    if args.url:
        overrides["url"] = args.url
    if args.token:
        overrides["token"] = args.token
    if args.insecure:
        overrides["insecure"] = True
    if args.debug:
        overrides["debug"] = True
    if args.sample_data:
        overrides["sample_data"] = True

    try:
        config, unified = bootstrap(overrides)
    except ValueError as e:
        print(f"ERROR: Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(
        debug=config.debug,
        log_file=args.log_file or unified.logging.file,
        debug_format=unified.logging.format,
        level=unified.logging.level,
    )
    config_files = discover_config_files()
    if config_files:
        logger.debug("Configuration file: %s", config_files[0])

    if args.command == "upload" and not config.api_url:
        print(
            "ERROR: No API URL configured. Set INSPECTION_API_URL or pass --url.",
            file=sys.stderr,
        )
        return 1

    repo = build_repository(config)
    try:
        return args.handler(repo, args)
    except InspectionSyncError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


def run() -> None:
    """Console-script entry point."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    run()
