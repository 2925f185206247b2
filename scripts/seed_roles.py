#!/usr/bin/env python3
"""Seed script for the Role Directory.

Adds the initial Admin entries so someone can sign in and manage the
directory. Emails already present are skipped.

Usage:
    python scripts/seed_roles.py --admin alice@college.edu --admin bob@college.edu
    python scripts/seed_roles.py --list
"""

import argparse
import sys

from teamhub.services.database import db
from teamhub.services.directory import list_members, seed_roles


def seed(admin_emails):
    """Insert an Admin role for each email"""
    entries = [{"email": email, "role": "Admin"} for email in admin_emails]
    try:
        created = seed_roles(entries)
    except Exception as e:
        print(f"Error seeding roles: {e}")
        sys.exit(1)
    print(f"Seeded {created} role(s), skipped {len(entries) - created}")


def list_roles():
    members = list_members()
    if not members:
        print("No roles found.")
        return

    print("\nRole Directory:")
    print("-" * 60)
    for m in members:
        print(f"  [{m['role']}] {m['email']} ({m['year']})")
    print("-" * 60)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Manage the Role Directory")
    parser.add_argument(
        "--admin", "-a",
        action="append",
        default=[],
        metavar="EMAIL",
        help="Email to add as Admin (repeatable)"
    )
    parser.add_argument(
        "--list", "-l",
        action="store_true",
        help="List all roles"
    )

    args = parser.parse_args()
    db.initialize()

    if args.admin:
        seed(args.admin)
    if args.list or not args.admin:
        list_roles()

    db.close()
