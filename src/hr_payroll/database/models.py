from sqlalchemy import Column, Integer, String, Numeric, Text, DateTime
from datetime import datetime
from .db import Base


class SnapshotDB(Base):
    """Serialized application state, one row per storage key"""
    __tablename__ = "state_snapshots"

    key = Column(String(50), primary_key=True)
    data_json = Column(Text, nullable=False)
    version = Column(Integer, nullable=False, default=1)

    # Metadata
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Snapshot(key={self.key}, version={self.version})>"


class PayrollRecordDB(Base):
    """Payroll register row mirrored from the snapshot for period queries"""
    __tablename__ = "payroll_records"

    id = Column(String, primary_key=True)
    employee_id = Column(String, nullable=False, index=True)
    employee_name = Column(String, nullable=False)

    # Period information
    year = Column(Integer, nullable=False, index=True)
    month = Column(Integer, nullable=False, index=True)

    # Financial totals
    basic_salary = Column(Numeric(12, 2), nullable=False)
    total_salary = Column(Numeric(12, 2), nullable=False)
    total_deductions = Column(Numeric(12, 2), nullable=False)
    net_salary = Column(Numeric(12, 2), nullable=False)
    income_tax = Column(Numeric(12, 2), default=0)
    social_insurance = Column(Numeric(12, 2), default=0)
    health_insurance = Column(Numeric(12, 2), default=0)

    # Workflow
    status = Column(String(20), nullable=False, default='pending')  # 'pending', 'processed', 'paid'
    processed_at = Column(DateTime)
    processed_by = Column(String)
    paid_at = Column(DateTime)
    paid_by = Column(String)

    # Metadata
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<PayrollRecord(id={self.id}, employee={self.employee_id}, period={self.year}-{self.month:02d})>"
