"""Single-row counters for receipt serial allocation."""

from sqlalchemy import Column, Integer, String

from app.db.session import Base


class ReceiptSerialCounter(Base):
    """last_value is the highest serial handed out; advanced by compare-and-swap."""

    __tablename__ = "receipt_serial_counters"

    name = Column(String(50), primary_key=True)
    last_value = Column(Integer, nullable=False, default=0)
