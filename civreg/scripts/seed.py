"""
Seed default roles, the head-office branch and the first administrator. Run from project root:
  python -m civreg.scripts.seed [--username admin] [--password 12345678] [--branch nbtc]
Existing rows are left untouched, so the command can be re-run safely.
"""
import argparse
import logging
import sys

from sqlalchemy import select
from sqlalchemy.orm import Session

from civreg.core.config import settings
from civreg.core.database import SessionLocal
from civreg.core.logging_config import configure_logging
from civreg.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN, USERNAME_MAX_LEN, hash_password
from civreg.models import Branch, Role, User

logger = logging.getLogger(__name__)

DEFAULT_ROLES = {
    "SystemAdmin": "Full access; bypasses every role check",
    "Admin": "Administers users, roles and content",
    "Manager": "Manages a branch",
    "Staff": "Edits content, events and hero sliders",
    "Viewer": "Read-only access",
    "User": "Regular account",
}
DEFAULT_BRANCH = "nbtc"
DEFAULT_PASSWORD = "12345678"


def seed_roles(db: Session, super_role: str) -> dict[str, Role]:
    wanted = dict(DEFAULT_ROLES)
    wanted.setdefault(super_role, DEFAULT_ROLES["SystemAdmin"])
    existing = {role.name: role for role in db.scalars(select(Role))}
    for name, description in wanted.items():
        if name not in existing:
            role = Role(name=name, description=description, is_active=True)
            db.add(role)
            existing[name] = role
            logger.info("Created role %s", name)
    return existing


def seed_branch(db: Session, name: str) -> Branch:
    branch = db.scalars(select(Branch).where(Branch.name == name)).first()
    if branch is None:
        branch = Branch(name=name, is_active=True)
        db.add(branch)
        logger.info("Created branch %s", name)
    return branch


def seed_admin(db: Session, username: str, password: str, role: Role, branch: Branch) -> User | None:
    if db.scalars(select(User).where(User.username == username)).first() is not None:
        logger.info("User %s already exists; skipped", username)
        return None
    user = User(
        username=username,
        full_name="System Administrator",
        password_hash=hash_password(password),
        is_active=True,
        roles=[role],
        branch=branch,
    )
    db.add(user)
    return user


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed roles, a branch and the first SystemAdmin user.")
    parser.add_argument("--username", default="admin", help=f"Administrator username (<= {USERNAME_MAX_LEN} chars)")
    parser.add_argument(
        "--password",
        default=DEFAULT_PASSWORD,
        help=f"Administrator password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)",
    )
    parser.add_argument("--branch", default=DEFAULT_BRANCH, help="Name of the branch to create")
    args = parser.parse_args()
    configure_logging(settings)

    username = args.username.strip()
    if not username or len(username) > USERNAME_MAX_LEN:
        print("Invalid username length.", file=sys.stderr)
        return 1
    if not PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN:
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        roles = seed_roles(db, settings.SUPER_ROLE)
        branch = seed_branch(db, args.branch.strip())
        user = seed_admin(db, username, args.password, roles[settings.SUPER_ROLE], branch)
        db.commit()
        if user is not None:
            print(f"Created user '{username}' with role '{settings.SUPER_ROLE}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
