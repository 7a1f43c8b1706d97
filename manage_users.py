#!/usr/bin/env python3
"""
User administration script.

Commands:
- list: all users with their tier and usage counts
- show: one user's profile and usage
- set-tier: move a user to another membership tier
- reset-usage: clear a user's accessed articles and videos
- purge-sessions: delete expired sessions, or every session of one user
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from config_manager import ConfigManager
from membership_service.document_store import JsonDocumentStore
from membership_service.membership import MembershipLimits, MembershipType
from portal.auth.sessions import SessionRepository
from portal.errors import UserNotFoundError
from portal.quota.factory import create_quota_module
from portal.user_management.models import UserRecord
from portal.user_management.repository import UserRepository
from portal.user_management.services import UserService

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


class UserAdmin:
    """Administrative operations over the user, usage and session stores."""

    def __init__(self, store: JsonDocumentStore, limits: MembershipLimits):
        self.user_repository = UserRepository(store)
        self.quota_manager = create_quota_module(store, self.user_repository, limits)["manager"]
        self.user_service = UserService(self.user_repository, self.quota_manager)
        self.session_repository = SessionRepository(store)

    def resolve_user(self, user_ref: str) -> UserRecord:
        """Find a user by id or email."""
        user = self.user_repository.find_by_id(user_ref) if JsonDocumentStore.is_valid_id(user_ref) else None
        if user is None:
            user = self.user_repository.find_by_email(user_ref.strip().lower())
        if user is None:
            raise UserNotFoundError(f"No user matches {user_ref!r}")
        return user

    def describe(self, user: UserRecord) -> Dict[str, Any]:
        return {
            "profile": user.to_public().to_dict(),
            "usage": self.quota_manager.get_usage_stats(user.id).to_dict(),
            "createdAt": user.created_at.isoformat(),
        }

    def list_users(self) -> List[Dict[str, Any]]:
        rows = []
        for user in self.user_repository.list_all():
            counts = self.quota_manager.usage_store.get_counts(user.id)
            rows.append({
                "id": user.id,
                "email": user.email,
                "membershipType": user.membership_type.value,
                "articles": counts["articles"],
                "videos": counts["videos"],
            })
        return rows

    def set_tier(self, user_ref: str, tier: str) -> Dict[str, Any]:
        user = self.resolve_user(user_ref)
        return self.user_service.set_membership(user.id, tier).to_dict()

    def reset_usage(self, user_ref: str) -> Dict[str, Any]:
        user = self.resolve_user(user_ref)
        self.quota_manager.reset_usage(user.id)
        return self.quota_manager.get_usage_stats(user.id).to_dict()

    def purge_sessions(self, user_ref: Optional[str] = None) -> Dict[str, Any]:
        if user_ref:
            user = self.resolve_user(user_ref)
            return {"userId": user.id, "deleted": self.session_repository.delete_user_sessions(user.id)}
        return {"expiredDeleted": self.session_repository.delete_expired()}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="User administration script")
    parser.add_argument("--config", default="web_app_config.json",
                        help="Path to the JSON config file")
    parser.add_argument("--data-dir", type=Path,
                        help="Data directory (defaults to the configured one)")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List all users")

    show = sub.add_parser("show", help="Show a user's profile and usage")
    show.add_argument("user", help="User id or email")

    set_tier = sub.add_parser("set-tier", help="Change a user's membership tier")
    set_tier.add_argument("user", help="User id or email")
    set_tier.add_argument("tier", choices=[t.value for t in MembershipType],
                          help="New membership tier")

    reset = sub.add_parser("reset-usage", help="Clear a user's accessed content")
    reset.add_argument("user", help="User id or email")

    purge = sub.add_parser("purge-sessions", help="Delete expired sessions")
    purge.add_argument("--user", help="Delete every session of this user instead")

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    config_manager = ConfigManager(args.config)
    data_dir = args.data_dir or Path(config_manager.get_paths_config().data_dir)
    admin = UserAdmin(JsonDocumentStore(data_dir), config_manager.get_membership_limits())

    try:
        if args.command == "list":
            result = admin.list_users()
        elif args.command == "show":
            result = admin.describe(admin.resolve_user(args.user))
        elif args.command == "set-tier":
            result = admin.set_tier(args.user, args.tier)
        elif args.command == "reset-usage":
            result = admin.reset_usage(args.user)
        else:
            result = admin.purge_sessions(args.user)
    except UserNotFoundError as e:
        logger.error(e.message)
        return 1

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
