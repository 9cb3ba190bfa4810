"""
Create a user account

Usage:
  python create_user.py --name "Ada Admin" --username admin --password secret --role Administrator
"""
import argparse

from quotedesk.db import Base, SessionLocal, engine
from quotedesk.crud import UserRepository
from quotedesk.policy import Role
from quotedesk.schemas import UserCreate


def create_user(db, name: str, username: str, password: str, role: str):
    users = UserRepository(db)
    existing = users.get_by_username(username)
    if existing:
        return existing, False
    return users.add(UserCreate(name=name, username=username, password=password, role=role)), True


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--name", required=True, help="Display name")
    parser.add_argument("--username", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--role", default=Role.CLIENT.value, choices=[r.value for r in Role])
    args = parser.parse_args()

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        user, created = create_user(db, args.name, args.username, args.password, args.role)
    finally:
        db.close()
    if created:
        print(f"Created user: {user.username} (ID: {user.id}, role: {user.role})")
    else:
        print(f"User already exists: {user.username} (ID: {user.id})")


if __name__ == "__main__":
    main()
