"""Seed the database with an admin account and sample portfolio content."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.database import SessionLocal, engine, Base
import app.models  # noqa: F401

from app.models.user import User
from app.models.article import Article, Update
from app.models.project import Project
from app.models.career import Skill, LifePeriod


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if db.query(User).count() > 0:
            print("Database already seeded. Skipping.")
            return

        db.add_all([
            User(emp_id="admin001", name="Site Admin", role="admin", email="admin@example.com"),
            User(emp_id="editor001", name="Guest Editor", role="editor", email="editor@example.com"),
        ])

        db.add_all([
            Article(title="On Slow Software", slug="on-slow-software", category="philosophy",
                    excerpt="Notes on building things that last.", tags=["craft", "software"], published=True,
                    review_status="published"),
            Article(title="Draft: Reading Interfaces", slug="reading-interfaces", category="ux_review",
                    review_status="draft"),
        ])
        db.add(Update(title="Site relaunch", slug="site-relaunch", content="<p>New look.</p>", published=True))

        db.add_all([
            Project(title="Halftone Studio", slug="halftone-studio", status="completed", published=True,
                    description="A pop-art image filter playground.", tech_stack=["TypeScript", "Canvas"]),
            Project(title="Garden Tracker", slug="garden-tracker", status="in_progress",
                    description="Tracking seedlings with cheap sensors."),
        ])

        db.add_all([
            Skill(name="Python", category="Languages", proficiency=85),
            Skill(name="Illustration", category="Art", proficiency=70),
        ])
        db.add(LifePeriod(title="Art School", start_date="2012-09-01", end_date="2016-06-01",
                          themes=["drawing", "printmaking"]))

        db.commit()
        print("Seed data created successfully.")
        print("Login emp_id: admin001 (admin), editor001 (editor)")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
