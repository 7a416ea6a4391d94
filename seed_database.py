#!/usr/bin/env python
"""
Seed the database with demo buildings for the dashboard.

Each building gets the default RTM milestones and is then walked forward
to a different point in the process, so the overview, deadline and
evidence views all have something to show.
"""

from datetime import date

from leasekeeper.db import create_all
from leasekeeper.store_db import DBRepository
from leasekeeper.timeline import TimelineService

# building id -> completion dates for the first N milestones
SAMPLE_BUILDINGS = {
    "harbour-house": [],
    "mill-court": [date(2024, 1, 8)],
    "station-mansions": [date(2024, 1, 8), date(2024, 1, 22)],
    "queens-terrace": [date(2023, 11, 1), date(2023, 11, 20), date(2024, 1, 15)],
    "the-maltings": [date(2023, 6, 1), date(2023, 6, 20), date(2023, 7, 3), date(2023, 8, 2), date(2023, 10, 1)],
}


def seed_database():
    """Initialise every sample building and complete its milestones."""
    with DBRepository() as repo:
        svc = TimelineService(repo)
        for building_id, completed in SAMPLE_BUILDINGS.items():
            result = svc.initialize(building_id, "seed")
            if not result.success:
                print(f"⛔ {building_id}: {result.error}")
                continue
            if not result.data["created"]:
                print(f"Skipped: {building_id} (already seeded)")
                continue

            milestones = svc.get_milestones(building_id).data
            for ms, done_on in zip(milestones, completed):
                svc.complete_milestone(ms.id, done_on, notes="seeded")

            progress = repo.progress.get(building_id)
            print(f"Added: {building_id} ({progress.overall_status}, {progress.progress_percentage:.0f}%)")

    print(f"\nSeeded {len(SAMPLE_BUILDINGS)} buildings!")


if __name__ == "__main__":
    print("Ensuring database tables exist...")
    create_all()

    print("Seeding database with sample buildings...")
    seed_database()

    print("\nDone! You can now run the API server with:")
    print("python -m leasekeeper.cli serve --reload")
