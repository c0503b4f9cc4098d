from .db import engine, SessionLocal, Base, create_session_factory, init_db
from .models import SnapshotDB, PayrollRecordDB
from .repository import SnapshotRepository
from .serialization import changes_from_json, from_json, snapshot_from_dict, snapshot_to_dict, to_json

__all__ = [
    'engine',
    'SessionLocal',
    'Base',
    'create_session_factory',
    'init_db',
    'SnapshotDB',
    'PayrollRecordDB',
    'SnapshotRepository',
    'changes_from_json',
    'from_json',
    'snapshot_from_dict',
    'snapshot_to_dict',
    'to_json',
]
