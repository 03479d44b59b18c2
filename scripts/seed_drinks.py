from kiosk.core.database import SessionLocal
from kiosk.services.catalog import seed_default_drinks


def main():
    db = SessionLocal()
    try:
        added = seed_default_drinks(db)
        print(f"Seeded {added} drink(s).")
    finally:
        db.close()


if __name__ == "__main__":
    main()
