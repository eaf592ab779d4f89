#!/usr/bin/env python3
"""
Seed a local SQLite database with the "test-data" sample for Quarry development.
Usage (from the repository root):
    python scripts/seed_demo_db.py
Creates: scripts/demo.db — register it with POST /api/database {"engine": "sqlite", ...}
"""
import sqlite3
import random
from datetime import datetime, timedelta
from pathlib import Path

DB_PATH = Path(__file__).parent / "demo.db"

DDL = [
    """
    CREATE TABLE IF NOT EXISTS categories (
        id      INTEGER PRIMARY KEY AUTOINCREMENT,
        name    TEXT NOT NULL
    )""",
    """
    CREATE TABLE IF NOT EXISTS venues (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        name        TEXT NOT NULL,
        category_id INTEGER REFERENCES categories(id),
        latitude    REAL,
        longitude   REAL,
        price       INTEGER
    )""",
    """
    CREATE TABLE IF NOT EXISTS users (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        name        TEXT NOT NULL,
        last_login  TIMESTAMP,
        password    TEXT
    )""",
    """
    CREATE TABLE IF NOT EXISTS checkins (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        date        DATE,
        user_id     INTEGER REFERENCES users(id),
        venue_id    INTEGER REFERENCES venues(id)
    )""",
]

CATEGORIES = ["African", "American", "Artisan", "Asian", "BBQ", "Bakery", "Bar", "Beer Garden",
              "Breakfast / Brunch", "Brewery", "Burger", "Café", "Caribbean", "Chinese", "Coffee Shop"]
USERS = ["Plato Yeshua", "Felipinho Asklepios", "Kaneonuskatew Eiran", "Simcha Yan", "Quentin Sören",
         "Shad Ferdynand", "Conchúr Tihomir", "Szymon Theutrich", "Nils Gotam", "Frans Hevel",
         "Spiros Teofil", "Kfir Caj", "Dwight Gresham", "Broen Olujimi", "Rüstem Hebel"]


def seed():
    conn = sqlite3.connect(DB_PATH)
    cur  = conn.cursor()

    for stmt in DDL:
        cur.execute(stmt)

    for c in CATEGORIES:
        cur.execute("INSERT INTO categories(name) VALUES (?)", (c,))

    # venues (100)
    for i in range(1, 101):
        cur.execute("INSERT INTO venues(name,category_id,latitude,longitude,price) VALUES (?,?,?,?,?)",
                    (f"Venue {i}", random.randint(1, len(CATEGORIES)),
                     round(random.uniform(10.0, 40.8), 4), round(random.uniform(-165.4, -73.9), 4),
                     random.randint(1, 4)))

    for name in USERS:
        cur.execute("INSERT INTO users(name,last_login,password) VALUES (?,?,?)",
                    (name, datetime(2014, 1, 1) + timedelta(days=random.randint(0, 365)),
                     f"{random.getrandbits(64):016x}"))

    # checkins (1000)
    for _ in range(1000):
        cur.execute("INSERT INTO checkins(date,user_id,venue_id) VALUES (?,?,?)",
                    ((datetime(2013, 1, 1) + timedelta(days=random.randint(0, 730))).date().isoformat(),
                     random.randint(1, len(USERS)), random.randint(1, 100)))

    conn.commit()
    conn.close()
    print(f"Demo database seeded: {DB_PATH}")
    print("   Tables: categories, venues, users, checkins")

if __name__ == "__main__":
    seed()
