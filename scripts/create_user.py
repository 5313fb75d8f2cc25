import argparse
import getpass
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dcnexus.auth import AuthError, AuthService
from dcnexus.store import JSONRecordStore, StorageUnavailable, resolve_store_path


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Register a DC Nexus user from the shell")
    parser.add_argument("full_name", help="Display name for the user")
    parser.add_argument("email", help="Unique email address for login")
    parser.add_argument(
        "--users-file",
        dest="users_path",
        default=None,
        help="Path to the users file (defaults to DCNEXUS_USERS_PATH or database/users.json)",
    )
    return parser.parse_args()


def prompt_for_password() -> str:
    for _ in range(3):
        password = getpass.getpass("Password: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Passwords do not match. Try again.", file=sys.stderr)
            continue
        return password
    raise SystemExit("Failed to set password after three attempts.")


def main() -> int:
    args = parse_args()
    password = prompt_for_password()

    users_path = resolve_store_path(args.users_path or os.getenv("DCNEXUS_USERS_PATH"))
    service = AuthService(JSONRecordStore(users_path))

    try:
        user = service.register(args.full_name, args.email.strip(), password)
    except AuthError as exc:  # format rules, duplicates
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1
    except StorageUnavailable as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Created user #{user['id']}: {user['fullName']} <{user['email']}>")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
