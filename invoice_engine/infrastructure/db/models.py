# invoice_engine/infrastructure/db/models.py
import uuid

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    Date,
    DateTime,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    text,
)

from invoice_engine.infrastructure.db.base import Base


class InvoiceCounter(Base):
    """One row per numbering scope; ``sequence`` only ever goes up."""

    __tablename__ = "invoice_counters"
    scope_key = Column(String(100), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    sequence = Column(BigInteger, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))


class Invoice(Base):
    __tablename__ = "invoices"
    __table_args__ = (
        UniqueConstraint("user_id", "invoice_number", name="uq_invoices_user_number"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), nullable=False, index=True)
    invoice_number = Column(String(40), nullable=False, index=True)
    invoice_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=True)
    customer_json = Column(JSON, nullable=False)
    items_json = Column(JSON, nullable=False)
    seller_region = Column(String(64), nullable=True)
    is_inter_state = Column(Boolean, nullable=False, default=False)
    subtotal = Column(Numeric(14, 2), nullable=False)
    total_discount = Column(Numeric(14, 2), nullable=False)
    taxable_amount = Column(Numeric(14, 2), nullable=False)
    total_cgst = Column(Numeric(14, 2), nullable=False)
    total_sgst = Column(Numeric(14, 2), nullable=False)
    total_igst = Column(Numeric(14, 2), nullable=False)
    total_tax = Column(Numeric(14, 2), nullable=False)
    grand_total = Column(Numeric(14, 2), nullable=False)
    notes = Column(Text, nullable=True)
    terms = Column(Text, nullable=True)
    integrity_hash = Column(String(64), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))
