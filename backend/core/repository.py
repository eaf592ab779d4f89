"""
In-memory metadata repository.
Holds databases, tables, fields, dimensions, field values and cards, and cuts
immutable TableSnapshots for the metadata assembler.
"""
import itertools
import logging
import threading
from typing import Any, Optional

from config import settings
from core.exceptions import CardNotFound, DatabaseNotFound, FieldNotFound, TableNotFound
from models.connection import ConnectionRequest, Database
from models.dimension import Dimension, FieldValues
from models.snapshot import TableSnapshot
from models.table import Card, Field, ResultColumn, Table

logger = logging.getLogger(__name__)


def features_for_engine(engine: str) -> list[str]:
    features = ["foreign-keys", "nested-queries"]
    if engine.lower() in settings.binning_engine_list:
        features.append("binning")
    return sorted(features)


class MetadataRepository:
    def __init__(self):
        self._lock = threading.RLock()
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self._ids = itertools.count(1)
            self._databases: dict[int, Database] = {}
            self._connections: dict[int, ConnectionRequest] = {}
            self._tables: dict[int, Table] = {}
            self._fields: dict[int, Field] = {}
            self._dimensions: dict[int, Dimension] = {}         # field_id → dimension
            self._field_values: dict[int, FieldValues] = {}     # field_id → values
            self._cards: dict[int, Card] = {}

    def _next_id(self) -> int:
        return next(self._ids)

    # ── Databases ─────────────────────────────────────────────────────────────

    def add_database(self, req: ConnectionRequest) -> Database:
        with self._lock:
            db = Database(
                id=self._next_id(),
                name=req.name,
                engine=req.engine,
                details=req.public_details(),
                is_full_sync=req.is_full_sync,
                features=features_for_engine(req.engine),
                metadata_sync_schedule=req.metadata_sync_schedule,
                cache_field_values_schedule=req.cache_field_values_schedule,
            )
            self._databases[db.id] = db
            self._connections[db.id] = req
            logger.info("Registered database %d (%s, %s)", db.id, db.name, db.engine)
            return db

    def get_database(self, db_id: int) -> Database:
        with self._lock:
            if db_id not in self._databases:
                raise DatabaseNotFound(db_id)
            return self._databases[db_id]

    def get_connection(self, db_id: int) -> ConnectionRequest:
        with self._lock:
            if db_id not in self._connections:
                raise DatabaseNotFound(db_id)
            return self._connections[db_id]

    def list_databases(self) -> list[Database]:
        with self._lock:
            return sorted(self._databases.values(), key=lambda d: (d.name, d.id))

    def delete_database(self, db_id: int) -> None:
        with self._lock:
            self.get_database(db_id)
            table_ids = {t.id for t in self._tables.values() if t.db_id == db_id}
            field_ids = {f.id for f in self._fields.values() if f.table_id in table_ids}
            for fid in field_ids:
                self._fields.pop(fid, None)
                self._dimensions.pop(fid, None)
                self._field_values.pop(fid, None)
            for tid in table_ids:
                self._tables.pop(tid, None)
            card_ids = [c.id for c in self._cards.values() if c.database_id == db_id]
            for cid in card_ids:
                del self._cards[cid]
            del self._databases[db_id]
            del self._connections[db_id]
            logger.info("Deleted database %d with %d tables and %d cards", db_id, len(table_ids), len(card_ids))

    # ── Tables ────────────────────────────────────────────────────────────────

    def create_table(self, **attrs: Any) -> Table:
        with self._lock:
            self.get_database(attrs["db_id"])
            table = Table(id=self._next_id(), **attrs)
            self._tables[table.id] = table
            return table

    def find_table(self, db_id: int, schema: Optional[str], name: str) -> Optional[Table]:
        with self._lock:
            for t in self._tables.values():
                if t.db_id == db_id and t.schema_name == schema and t.name == name:
                    return t
            return None

    def get_table(self, table_id: int) -> Table:
        with self._lock:
            if table_id not in self._tables:
                raise TableNotFound(table_id)
            return self._tables[table_id]

    def update_table(self, table_id: int, **changes: Any) -> Table:
        with self._lock:
            data = self.get_table(table_id).model_dump()
            data.update(changes)
            table = Table.model_validate(data)
            self._tables[table_id] = table
            return table

    def list_tables(self, db_id: Optional[int] = None) -> list[Table]:
        with self._lock:
            tables = [t for t in self._tables.values() if db_id is None or t.db_id == db_id]
            return sorted(tables, key=lambda t: (t.display_name.lower(), t.id))

    # ── Fields ────────────────────────────────────────────────────────────────

    def create_field(self, **attrs: Any) -> Field:
        with self._lock:
            self.get_table(attrs["table_id"])
            field = Field(id=self._next_id(), **attrs)
            self._fields[field.id] = field
            return field

    def find_field(self, table_id: int, name: str) -> Optional[Field]:
        with self._lock:
            for f in self._fields.values():
                if f.table_id == table_id and f.name == name:
                    return f
            return None

    def get_field(self, field_id: int) -> Field:
        with self._lock:
            if field_id not in self._fields:
                raise FieldNotFound(field_id)
            return self._fields[field_id]

    def update_field(self, field_id: int, **changes: Any) -> Field:
        with self._lock:
            # Re-validate so fingerprints passed as dicts become the proper variant
            data = self.get_field(field_id).model_dump()
            data.update(changes)
            field = Field.model_validate(data)
            self._fields[field_id] = field
            return field

    def table_fields(self, table_id: int) -> list[Field]:
        with self._lock:
            return sorted(
                (f for f in self._fields.values() if f.table_id == table_id),
                key=lambda f: (f.position, f.name, f.id),
            )

    # ── Field values & dimensions ─────────────────────────────────────────────

    def set_field_values(self, field_id: int, values: list, human_readable_values: Optional[list[str]] = None) -> FieldValues:
        with self._lock:
            self.get_field(field_id)
            if human_readable_values is None:
                existing = self._field_values.get(field_id)
                # Keep labels only while the value list they were written for is unchanged
                human_readable_values = (
                    existing.human_readable_values if existing and existing.values == values else []
                )
            fv = FieldValues(field_id=field_id, values=values, human_readable_values=human_readable_values)
            self._field_values[field_id] = fv
            return fv

    def get_field_values(self, field_id: int) -> Optional[FieldValues]:
        with self._lock:
            self.get_field(field_id)
            return self._field_values.get(field_id)

    def set_dimension(self, field_id: int, name: str, type: str, human_readable_field_id: Optional[int] = None) -> Dimension:
        with self._lock:
            self.get_field(field_id)
            if human_readable_field_id is not None:
                self.get_field(human_readable_field_id)
            existing = self._dimensions.get(field_id)
            dimension = Dimension(
                id=existing.id if existing else self._next_id(),
                field_id=field_id,
                name=name,
                type=type,
                human_readable_field_id=human_readable_field_id,
            )
            self._dimensions[field_id] = dimension
            return dimension

    def delete_dimension(self, field_id: int) -> None:
        with self._lock:
            self.get_field(field_id)
            self._dimensions.pop(field_id, None)

    # ── Cards ─────────────────────────────────────────────────────────────────

    def add_card(self, name: str, database_id: int, result_metadata: list[ResultColumn],
                 description: Optional[str] = None) -> Card:
        with self._lock:
            self.get_database(database_id)
            card = Card(
                id=self._next_id(),
                name=name,
                database_id=database_id,
                description=description,
                result_metadata=result_metadata,
            )
            self._cards[card.id] = card
            return card

    def get_card(self, card_id: int) -> Card:
        with self._lock:
            if card_id not in self._cards:
                raise CardNotFound(card_id)
            return self._cards[card_id]

    # ── Snapshots ─────────────────────────────────────────────────────────────

    def snapshot(self, table_id: int) -> TableSnapshot:
        """Everything the assembler needs for one table, frozen at call time."""
        with self._lock:
            table = self.get_table(table_id)
            database = self.get_database(table.db_id)
            fields = self.table_fields(table_id)
            own_ids = {f.id for f in fields}
            db_tables = {t.id: t for t in self._tables.values() if t.db_id == table.db_id}

            related_ids = set()
            for f in fields:
                if f.fk_target_field_id is not None:
                    related_ids.add(f.fk_target_field_id)
                dim = self._dimensions.get(f.id)
                if dim is not None and dim.human_readable_field_id is not None:
                    related_ids.add(dim.human_readable_field_id)
            for f in self._fields.values():
                if f.table_id in db_tables and f.fk_target_field_id in own_ids:
                    related_ids.add(f.id)

            related_fields = {fid: self._fields[fid] for fid in related_ids if fid in self._fields}
            related_tables = {
                f.table_id: db_tables[f.table_id]
                for f in related_fields.values() if f.table_id in db_tables
            }
            return TableSnapshot(
                database=database,
                table=table,
                fields=tuple(fields),
                dimensions={fid: self._dimensions[fid] for fid in own_ids if fid in self._dimensions},
                field_values={fid: self._field_values[fid] for fid in own_ids if fid in self._field_values},
                related_fields=related_fields,
                related_tables=related_tables,
            )


repository = MetadataRepository()


def get_repository() -> MetadataRepository:
    return repository
