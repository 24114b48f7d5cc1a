# invoice_engine/infrastructure/db/repositories/invoice_repository.py
from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from invoice_engine.domain.models.finalized_invoice import FinalizedInvoice
from invoice_engine.domain.services.invoice_integrity import (
    canonical_customer,
    canonical_item,
    ensure_integrity,
    verify_hash,
)
from invoice_engine.infrastructure.db.models import Invoice


class InvoiceRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # ---------- writes ----------

    async def save_finalized(self, invoice: FinalizedInvoice) -> Invoice:
        """
        Persist a FinalizedInvoice. Customer and items are stored in their
        canonical (hashed) form so the row can be re-verified later.
        """
        totals = invoice.calculation.totals
        row = Invoice(
            id=uuid.uuid4(),
            user_id=invoice.user_id,
            invoice_number=invoice.invoice_number,
            invoice_date=invoice.invoice_date,
            due_date=invoice.due_date,
            customer_json=canonical_customer(invoice.customer),
            items_json=[canonical_item(i) for i in invoice.items],
            seller_region=invoice.seller_region,
            is_inter_state=invoice.calculation.is_inter_state,
            subtotal=totals.subtotal,
            total_discount=totals.total_discount,
            taxable_amount=totals.taxable_amount,
            total_cgst=totals.total_cgst,
            total_sgst=totals.total_sgst,
            total_igst=totals.total_igst,
            total_tax=totals.total_tax,
            grand_total=totals.grand_total,
            notes=invoice.notes,
            terms=invoice.terms,
            integrity_hash=invoice.integrity_hash,
        )
        self.db.add(row)
        await self.db.commit()
        await self.db.refresh(row)
        return row

    async def replace_finalized(self, row: Invoice, invoice: FinalizedInvoice) -> Invoice:
        """
        Overwrite an existing row with an edited FinalizedInvoice.

        The stored hash is checked first; a row that was already tampered
        with raises IntegrityError instead of being silently re-hashed.
        """
        ensure_integrity(row)
        if invoice.invoice_number != row.invoice_number or invoice.user_id != row.user_id:
            raise ValueError("invoice_number and user_id cannot change on update")

        totals = invoice.calculation.totals
        row.invoice_date = invoice.invoice_date
        row.due_date = invoice.due_date
        row.customer_json = canonical_customer(invoice.customer)
        row.items_json = [canonical_item(i) for i in invoice.items]
        row.seller_region = invoice.seller_region
        row.is_inter_state = invoice.calculation.is_inter_state
        row.subtotal = totals.subtotal
        row.total_discount = totals.total_discount
        row.taxable_amount = totals.taxable_amount
        row.total_cgst = totals.total_cgst
        row.total_sgst = totals.total_sgst
        row.total_igst = totals.total_igst
        row.total_tax = totals.total_tax
        row.grand_total = totals.grand_total
        row.notes = invoice.notes
        row.terms = invoice.terms
        row.integrity_hash = invoice.integrity_hash
        await self.db.commit()
        await self.db.refresh(row)
        return row

    # ---------- reads ----------

    async def get_by_number(self, user_id: str, invoice_number: str) -> Invoice | None:
        stmt = select(Invoice).where(
            and_(
                Invoice.user_id == user_id,
                Invoice.invoice_number == invoice_number,
            )
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_invoice_numbers(self, user_id: str, prefix: str) -> list[str]:
        """Invoice numbers for ``user_id`` starting with ``prefix`` (scan fallback)."""
        stmt = (
            select(Invoice.invoice_number)
            .where(
                and_(
                    Invoice.user_id == user_id,
                    Invoice.invoice_number.startswith(prefix, autoescape=True),
                )
            )
            .order_by(Invoice.invoice_number.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def find_tampered(self, user_id: str, limit: int = 500) -> list[dict[str, Any]]:
        """Rows for ``user_id`` whose stored hash no longer matches their contents."""
        stmt = (
            select(Invoice)
            .where(Invoice.user_id == user_id)
            .order_by(Invoice.invoice_date.desc())
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return [
            {"id": str(row.id), "invoice_number": row.invoice_number}
            for row in result.scalars().all()
            if not verify_hash(row)
        ]
