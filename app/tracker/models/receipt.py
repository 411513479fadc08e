"""
SQLAlchemy model for receipt persistence.
"""
from sqlalchemy import Column, DateTime, Integer, String, Text

from app.tracker.database import Base


class ReceiptModel(Base):
    __tablename__ = "receipts"

    # insertion sequence, breaks uploaded_at ties when listing
    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(32), unique=True, index=True, nullable=False)
    image_src = Column(Text, nullable=False)
    extracted_text = Column(Text, nullable=False)
    order_date = Column(String(10), nullable=False, default="N/A")
    days_passed = Column(Integer, nullable=False, default=0)
    days_left = Column(Integer, nullable=False, default=18)
    status = Column(String, nullable=False, default="Pending", index=True)
    note = Column(Text, nullable=False, default="")
    file_name = Column(String, nullable=False)
    uploaded_at = Column(DateTime(timezone=True), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)
    updated_by = Column(String, nullable=False, default="system")
