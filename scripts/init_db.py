# scripts/init_db.py
# Create the tables and the LeadingReceivers view in DATABASE_URL.
import logging

from nfl_wins.db import engine
from nfl_wins.db.views import create_schema

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    create_schema(engine)
