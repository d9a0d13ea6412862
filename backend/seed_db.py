"""
JobBoard Database Seeder

Creates:
- A verified admin account
- A verified ordinary user with a CV
- Two companies with a few job postings
"""

from jobboard.core.security import get_password_hash
from jobboard.db.base import Base, utcnow
from jobboard.db.session import SessionLocal, engine
from jobboard.models import CV, Company, Job, Role, User


def seed_database():
    """Seed the database with test data."""

    # Create all tables
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()

    try:
        # Check if already seeded
        existing_admin = db.query(User).filter(User.email == "admin@jobboard.local").first()
        if existing_admin:
            print("Database already seeded. Skipping...")
            return

        print("Seeding database...")

        # 1. Admin account
        admin = User(
            name="Admin",
            email="admin@jobboard.local",
            hashed_password=get_password_hash("admin123"),
            role=Role.ADMIN,
            active=True,
            verified_email=True,
            date_inscription=utcnow(),
        )
        db.add(admin)

        # 2. Ordinary user with a CV
        amira = User(
            name="Amira Ben Salah",
            email="amira@example.com",
            hashed_password=get_password_hash("user123"),
            motivation_letter="Backend developer looking for a remote position.",
            role=Role.ORDINARY,
            active=True,
            verified_email=True,
            date_inscription=utcnow(),
        )
        db.add(amira)
        db.flush()  # Get IDs

        db.add(
            CV(
                user_id=amira.id,
                nom="Ben Salah",
                prenom="Amira",
                localisation="Tunis",
                work_experience="Backend developer, Fintech startup",
                work_experience_duree="3 years",
                education="Software Engineering degree",
                education_duree="5 years",
                skills="Python, FastAPI, PostgreSQL, Docker",
                languages="Arabic, French, English",
                profession="Software Engineer",
                country="Tunisia",
                linkedin="https://www.linkedin.com/in/amira-example",
            )
        )

        # 3. Companies and postings
        acme = Company(name="Acme Corp")
        globex = Company(name="Globex")
        db.add_all([acme, globex])
        db.flush()

        jobs = [
            Job(
                titles="Python Backend Developer",
                mail="jobs@acme.example",
                num="+216 70 000 000",
                speciality="Backend",
                description="Build and maintain REST APIs.",
                company_id=acme.id,
                user_id=admin.id,
                date=utcnow(),
            ),
            Job(
                titles="Data Analyst",
                mail="careers@globex.example",
                num="+216 71 000 000",
                speciality="Data",
                description="Reporting and dashboards for the sales team.",
                company_id=globex.id,
                user_id=admin.id,
                date=utcnow(),
            ),
        ]
        db.add_all(jobs)

        db.commit()

        print("Database seeded successfully!")
        print("")
        print("Test Accounts:")
        print("  Admin: admin@jobboard.local / admin123")
        print("  User:  amira@example.com / user123")

    except Exception as e:
        print(f"Error seeding database: {e}")
        db.rollback()
        raise

    finally:
        db.close()


if __name__ == "__main__":
    seed_database()
