from models.connection import ConnectionRequest, Database, SyncResponse  # noqa: F401
from models.table import Table, Field, Card, ResultColumn  # noqa: F401
from models.fingerprint import Fingerprint, NumberFingerprint, TextFingerprint, DateTimeFingerprint  # noqa: F401
from models.dimension import Dimension, FieldValues, DimensionRequest  # noqa: F401
from models.snapshot import TableSnapshot, TargetResolution, TargetState  # noqa: F401
from models.metadata import TableQueryMetadata, FieldMetadata, VirtualTableMetadata, FkRelationship  # noqa: F401
