# scripts/seed_demo.py
import os, sys
# If running script directly, ensure repo root is on path
sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from dotenv import load_dotenv
load_dotenv()

from tooleval.db import Base, engine, session_scope
from tooleval.snapshots import seed_demo_tools


def ensure_tables():
    Base.metadata.create_all(bind=engine)


if __name__ == "__main__":
    ensure_tables()
    with session_scope() as db:
        n = seed_demo_tools(db)
    print(f"Seeded {n} demo tool(s).")
