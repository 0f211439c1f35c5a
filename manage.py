"""Local User Manager — admin command line.

Usage:
    python manage.py [--config PATH] <command> [args]

Commands:
    list                         List non-admin users
    create USERNAME PASSWORD     Create a user
    delete USERNAME              Delete a user and their activity log
    activities USERNAME          Show a user's activity log
    export USERNAME [--format]   Export a user's activity log (csv or json)
    usage                        Show storage usage
    reset                        Erase everything and recreate the admin
"""

import sys
import os
import argparse

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from src.utils.config_manager import ConfigManager
from src.utils.logger import (
    setup_logging, print_section, print_success, print_info, print_warning, print_error
)
from src.utils.activity_exporter import ActivityExporter
from src.core.user_record_store import UserRecordStore


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Local User Manager — admin tools")
    parser.add_argument("--config", type=str, default=None, help="Config YAML path")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List non-admin users")

    create = sub.add_parser("create", help="Create a user")
    create.add_argument("username")
    create.add_argument("password")

    delete = sub.add_parser("delete", help="Delete a user and their activity log")
    delete.add_argument("username")

    activities = sub.add_parser("activities", help="Show a user's activity log")
    activities.add_argument("username")

    export = sub.add_parser("export", help="Export a user's activity log")
    export.add_argument("username")
    export.add_argument("--format", choices=["csv", "json"], default="csv")
    export.add_argument("--output-dir", type=str, default=None)

    sub.add_parser("usage", help="Show storage usage")

    reset = sub.add_parser("reset", help="Erase all data and recreate the admin")
    reset.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    return parser.parse_args(argv)


def main(argv=None, store: UserRecordStore = None) -> bool:
    args = parse_args(argv)

    cfg = ConfigManager(args.config)
    log_cfg = cfg.get_logging_config()
    setup_logging('src', log_dir=log_cfg.get('log_dir'), level=log_cfg.get('level', 'INFO'))

    if store is None:
        store = UserRecordStore.from_config(cfg)
    store.initialize()

    if args.command == "list":
        users = store.list_users()
        print_section(f"USERS ({len(users)})")
        if not users:
            print_info("No users yet.")
        for user in users:
            print(f"  {user.username:<20} {user.role:<6} created {user.created_at}")
        return True

    if args.command == "create":
        result = store.create_user_result(args.username, args.password)
        if not result:
            print_error(result.message)
            return False
        print_success(result.message)
        return True

    if args.command == "delete":
        result = store.delete_user_result(args.username)
        if not result:
            print_error(result.message)
            return False
        print_success(result.message)
        return True

    if args.command == "activities":
        entries = store.get_activities_for(args.username)
        print_section(f"ACTIVITY LOG: {args.username}")
        if not entries:
            print_info("No activities recorded.")
        for entry in entries:
            print(f"  {entry.timestamp:<25} {entry.description}")
        return True

    if args.command == "export":
        exporter = ActivityExporter(cfg.get_export_config().get('output_dir', 'data/exports'))
        entries = store.get_activities_for(args.username)
        if not entries:
            print_warning(f"No activities recorded for {args.username}; exporting an empty log")
        path = exporter.export(entries, args.username, fmt=args.format, output_dir=args.output_dir)
        print_success(f"Exported {len(entries)} entries to {path}")
        return True

    if args.command == "usage":
        usage = store.storage_usage()
        print_section("STORAGE USAGE")
        print(f"""  Users:       {usage.user_count:>6}  ({usage.user_bytes} bytes)
  Activities:  {usage.activity_count:>6}  ({usage.activity_bytes} bytes)
  Total:               {usage.total_bytes} bytes""")
        return True

    if args.command == "reset":
        if not args.yes:
            answer = input("This erases every user and activity. Continue? [y/N] ")
            if answer.strip().lower() != "y":
                print_info("Reset cancelled.")
                return False
        if not store.clear_all():
            print_error("Could not clear data.")
            return False
        print_success("All data cleared; admin account recreated.")
        return True

    return False


if __name__ == '__main__':
    try:
        success = main()
        sys.exit(0 if success else 1)
    except Exception as e:
        print_error(f"Command failed: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
