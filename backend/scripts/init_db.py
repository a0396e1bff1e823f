"""Initialize the database - creates content/history tables and adds missing columns."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.database import engine, Base
import app.models  # noqa: F401 - registers all models
from app.utils.schema_sync import sync_missing_schema_objects


def init_db():
    print("Creating content hub tables...")
    Base.metadata.create_all(bind=engine)
    sync_missing_schema_objects(engine, Base.metadata)
    print(f"Database initialized: {len(Base.metadata.sorted_tables)} tables.")


if __name__ == "__main__":
    init_db()
