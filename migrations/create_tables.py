import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
from eventease import create_app
from eventease.extensions import db


def create_tables():
    load_dotenv()
    app = create_app()
    with app.app_context():
        # Users, events, registrations and the attendance ledger
        db.create_all()
        print("Created all database tables successfully!")


if __name__ == "__main__":
    create_tables()
