import json
import logging
from typing import List, Optional

from sqlalchemy import and_
from sqlalchemy.orm import Session

from ..models.payroll import PayrollRecord, PayrollStatus
from ..models.snapshot import Snapshot
from ..utils.formatters import round_money
from .models import PayrollRecordDB, SnapshotDB
from .serialization import snapshot_from_dict, snapshot_to_dict

logger = logging.getLogger(__name__)

DEFAULT_KEY = "employee_state"


class SnapshotRepository:
    """SQL-backed persistence collaborator for the state store"""

    def __init__(self, db_session: Session, key: str = DEFAULT_KEY):
        self.db = db_session
        self.key = key

    # ========== Snapshot Operations ==========

    def load(self) -> Optional[Snapshot]:
        """Load the last saved snapshot, or None when nothing usable is stored"""
        row = self.db.query(SnapshotDB).filter_by(key=self.key).first()
        if row is None:
            return None
        try:
            data = json.loads(row.data_json)
        except json.JSONDecodeError as e:
            logger.error("Saved state %s is not valid JSON: %s", self.key, e)
            return None
        return snapshot_from_dict(data)

    def save(self, snapshot: Snapshot) -> None:
        """Save the snapshot and mirror its payroll records"""
        data_json = json.dumps(snapshot_to_dict(snapshot), ensure_ascii=False)
        try:
            row = self.db.query(SnapshotDB).filter_by(key=self.key).first()
            if row is None:
                row = SnapshotDB(key=self.key, data_json=data_json, version=1)
                self.db.add(row)
            else:
                row.data_json = data_json
                row.version = (row.version or 0) + 1

            for record in snapshot.payroll_records:
                self.db.merge(self._to_row(record))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.debug("Saved state %s (version %s)", self.key, row.version)

    # ========== Payroll Record Operations ==========

    def get_payroll_record(self, record_id: str) -> Optional[PayrollRecordDB]:
        """Get specific payroll record"""
        return self.db.query(PayrollRecordDB).filter_by(id=record_id).first()

    def get_payroll_records(self, year: Optional[int] = None, month: Optional[int] = None,
                            employee_id: Optional[str] = None) -> List[PayrollRecordDB]:
        """Get payroll records, optionally filtered by period and employee"""
        query = self.db.query(PayrollRecordDB)
        if year:
            query = query.filter_by(year=year)
        if month:
            query = query.filter_by(month=month)
        if employee_id:
            query = query.filter_by(employee_id=employee_id)
        return query.order_by(PayrollRecordDB.year, PayrollRecordDB.month, PayrollRecordDB.employee_name).all()

    def get_monthly_records(self, year: int, month: int) -> List[PayrollRecordDB]:
        """Get all payroll records for a specific month"""
        return self.db.query(PayrollRecordDB).filter(
            and_(
                PayrollRecordDB.year == year,
                PayrollRecordDB.month == month
            )
        ).all()

    # ========== Helper Methods ==========

    def _to_row(self, record: PayrollRecord) -> PayrollRecordDB:
        return PayrollRecordDB(
            id=record.id,
            employee_id=record.employee_id,
            employee_name=record.employee_name,
            year=record.year,
            month=record.month,
            basic_salary=round_money(record.basic_salary),
            total_salary=round_money(record.total_salary),
            total_deductions=round_money(record.total_deductions),
            net_salary=round_money(record.net_salary),
            income_tax=round_money(record.income_tax),
            social_insurance=round_money(record.social_insurance),
            health_insurance=round_money(record.health_insurance),
            status=PayrollStatus(record.status).value,
            processed_at=record.processed_at,
            processed_by=record.processed_by,
            paid_at=record.paid_at,
            paid_by=record.paid_by,
        )
