import os
import sys
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from werkzeug.security import generate_password_hash

# Ensure repo root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.careerforge.constants import ROLE_TAGS
from app.careerforge.models import User, UserRole


@contextmanager
def _seed_session(db_url: str):
    # Own engine so release can seed without building the Flask app.
    engine = create_engine(db_url, future=True, pool_pre_ping=True)
    s = Session(bind=engine, autoflush=False, expire_on_commit=False, future=True)
    try:
        yield s
        s.commit()
    except Exception:
        s.rollback()
        raise
    finally:
        s.close()
        engine.dispose()


def _ensure_admin(s: Session, email: str, password: str) -> User:
    user = s.query(User).filter(User.email == email).one_or_none()
    if not user:
        user = User(
            email=email,
            password_hash=generate_password_hash(password),
            full_name="Administrator",
            is_active=True,
        )
        s.add(user)
        s.flush()

    held = {r.role for r in user.roles}
    for role in ROLE_TAGS:
        if role not in held:
            user.roles.append(UserRole(role=role))
    return user


def seed_only(*, database_url: str | None = None) -> None:
    """
    Seed the admin account in an idempotent way.
    The admin holds every role tag so all management views are reachable.
    Does NOT overwrite an existing admin user's password.
    """
    admin_email = (os.environ.get("ADMIN_EMAIL") or "admin@careerforge.local").strip().lower()
    admin_password = os.environ.get("ADMIN_PASSWORD") or "change-me"

    db_url = (database_url or os.environ.get("DATABASE_URL") or "sqlite:///careerforge.db").strip()

    with _seed_session(db_url) as s:
        _ensure_admin(s, admin_email, admin_password)

    print("Initialized database (seed_only).")
    print(f"Admin email: {admin_email}")
    print("Admin password: (from ADMIN_PASSWORD)")


def main() -> None:
    seed_only(database_url=None)


if __name__ == "__main__":
    main()
