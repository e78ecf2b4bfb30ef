#!/usr/bin/env python3
"""
Issue a bearer token for the Clinic Directory API.

The token is signed with the SECRET_KEY the API reads from its
environment, so run this with the same environment as the server.

Usage:
    python create_token.py --sub ops@example.com --role admin --days 365
"""

import argparse
import sys

from clinic_directory_api.app.core.roles import ROLES
from clinic_directory_api.app.core.security import create_access_token


def main() -> None:
    ap = argparse.ArgumentParser(description="Create a signed API token.")
    ap.add_argument("--sub", required=True, help="Subject recorded in the token (e.g. an e-mail)")
    ap.add_argument("--role", choices=ROLES, default="user", help="Role granted by the token")
    ap.add_argument("--days", type=int, default=365, help="Lifetime in days")
    args = ap.parse_args()

    if args.days < 1:
        print("[!] --days must be at least 1", file=sys.stderr)
        sys.exit(1)

    print(create_access_token(args.sub, args.role, expires_delta=args.days * 24 * 60 * 60))


if __name__ == "__main__":
    main()
