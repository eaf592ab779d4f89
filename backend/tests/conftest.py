import os
import sys

# Add the parent directory (backend) to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
import sqlite3
import tempfile
from types import SimpleNamespace
from fastapi.testclient import TestClient

from main import app
from core.repository import repository
from models.connection import ConnectionRequest
from models.fingerprint import DateTimeFingerprint, NumberFingerprint, TextFingerprint


@pytest.fixture(scope="session")
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(autouse=True)
def repo():
    repository.reset()
    yield repository
    repository.reset()


@pytest.fixture
def sample(repo):
    """A small already-synced "test-data" database built straight into the repository."""
    db = repo.add_database(ConnectionRequest(engine="sqlite", name="test-data", file_path="/tmp/test-data.db"))

    categories = repo.create_table(db_id=db.id, name="CATEGORIES", schema_name="PUBLIC",
                                   display_name="Categories", rows=4)
    cat_id = repo.create_field(table_id=categories.id, name="ID", display_name="ID",
                               base_type="type/BigInteger", special_type="type/PK", position=0,
                               fingerprint=NumberFingerprint(distinct_count=4, min=1, max=4), fingerprint_version=1)
    cat_name = repo.create_field(table_id=categories.id, name="NAME", display_name="Name",
                                 base_type="type/Text", special_type="type/Name", position=1,
                                 fingerprint=TextFingerprint(distinct_count=4, average_length=5.5), fingerprint_version=1)
    repo.set_field_values(cat_name.id, ["Bar", "Bakery", "Asian", "African"])

    venues = repo.create_table(db_id=db.id, name="VENUES", schema_name="PUBLIC", display_name="Venues", rows=100)
    venue_id = repo.create_field(table_id=venues.id, name="ID", display_name="ID",
                                 base_type="type/BigInteger", special_type="type/PK", position=0,
                                 fingerprint=NumberFingerprint(distinct_count=100, min=1, max=100), fingerprint_version=1)
    category_id = repo.create_field(table_id=venues.id, name="CATEGORY_ID", display_name="Category ID",
                                    base_type="type/Integer", special_type="type/Category", position=1,
                                    fk_target_field_id=cat_id.id,
                                    fingerprint=NumberFingerprint(distinct_count=4, min=1, max=4), fingerprint_version=1)
    repo.set_field_values(category_id.id, [3, 1, 4, 2])
    latitude = repo.create_field(table_id=venues.id, name="LATITUDE", display_name="Latitude",
                                 base_type="type/Float", special_type="type/Latitude", position=2,
                                 fingerprint=NumberFingerprint(distinct_count=94, min=10.0646, max=40.7794),
                                 fingerprint_version=1)
    price = repo.create_field(table_id=venues.id, name="PRICE", display_name="Price",
                              base_type="type/Integer", special_type="type/Category", position=3,
                              fingerprint=NumberFingerprint(distinct_count=4, min=1, max=4, avg=2.03), fingerprint_version=1)
    repo.set_field_values(price.id, [4, 2, 3, 1])

    users = repo.create_table(db_id=db.id, name="USERS", schema_name="PUBLIC", display_name="Users", rows=3)
    user_id = repo.create_field(table_id=users.id, name="ID", display_name="ID", base_type="type/BigInteger",
                                special_type="type/PK", position=0,
                                fingerprint=NumberFingerprint(distinct_count=3, min=1, max=3), fingerprint_version=1)
    last_login = repo.create_field(table_id=users.id, name="LAST_LOGIN", display_name="Last Login",
                                   base_type="type/DateTime", position=0,
                                   fingerprint=DateTimeFingerprint(distinct_count=3), fingerprint_version=1)
    user_name = repo.create_field(table_id=users.id, name="NAME", display_name="Name", base_type="type/Text",
                                  special_type="type/Name", position=0,
                                  fingerprint=TextFingerprint(distinct_count=3), fingerprint_version=1)
    repo.set_field_values(user_name.id, ["Simcha Yan", "Broen Olujimi", "Kfir Caj"])
    password = repo.create_field(table_id=users.id, name="PASSWORD", display_name="Password",
                                 base_type="type/Text", special_type="type/Category", position=0,
                                 visibility_type="sensitive",
                                 fingerprint=TextFingerprint(distinct_count=3), fingerprint_version=1)
    repo.set_field_values(password.id, ["hunter2", "letmein", "swordfish"])

    return SimpleNamespace(
        db=db, categories=categories, venues=venues, users=users,
        cat_id=cat_id, cat_name=cat_name, venue_id=venue_id, category_id=category_id,
        latitude=latitude, price=price, user_id=user_id, last_login=last_login,
        user_name=user_name, password=password,
    )


@pytest.fixture
def temp_sqlite_db():
    fd, path = tempfile.mkstemp(suffix=".db")
    try:
        conn = sqlite3.connect(path)
        cur = conn.cursor()
        cur.execute("CREATE TABLE categories (id INTEGER PRIMARY KEY, name TEXT NOT NULL);")
        cur.execute("CREATE TABLE venues (id INTEGER PRIMARY KEY, name TEXT, "
                    "category_id INTEGER REFERENCES categories(id), latitude REAL, price INTEGER);")
        cur.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT, last_login TIMESTAMP, "
                    "email TEXT, password TEXT);")
        cur.executemany("INSERT INTO categories (id, name) VALUES (?, ?);",
                        [(1, "African"), (2, "American"), (3, "Asian"), (4, "Bar")])
        cur.executemany("INSERT INTO venues (name, category_id, latitude, price) VALUES (?, ?, ?, ?);", [
            ("Red Medicine", 4, 10.0646, 3),
            ("Stout Burgers & Beers", 2, 34.0996, 2),
            ("The Apple Pan", 2, 34.0406, 2),
            ("Wurstküche", 1, 33.9997, 2),
            ("Brite Spot", 3, 34.0778, 1),
            ("Marlowe", 4, 40.7794, 4),
        ])
        cur.executemany("INSERT INTO users (name, last_login, email, password) VALUES (?, ?, ?, ?);", [
            ("Plato Yeshua", "2014-04-01 08:30:00", "plato@example.com", "a1"),
            ("Felipinho Asklepios", "2014-12-05 15:15:00", "felipinho@example.com", "b2"),
            ("Kaneonuskatew Eiran", "2014-11-06 16:15:00", "kaneonuskatew@example.com", "c3"),
        ])
        conn.commit()
        conn.close()
        yield path
    finally:
        os.close(fd)
        os.remove(path)
