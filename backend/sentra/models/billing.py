from __future__ import annotations

from ..extensions import db
from sentra.ids import new_id
from sentra.time_utils import to_utc_z


INVOICE_STATUSES = ("Pending", "Partial", "Paid", "Overdue")
PAYMENT_STATUSES = ("Paid", "Pending", "Failed", "Refunded")


class Invoice(db.Model):
    """
    Package invoice issued to a client.

    paid and due are maintained incrementally as payments are recorded
    (due = amount - paid, floored at zero).
    """
    __tablename__ = "invoices"

    id = db.Column(db.String(32), primary_key=True, default=lambda: new_id("INV"))
    client_id = db.Column(db.Integer, db.ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)

    package_name = db.Column(db.String(255), nullable=False)
    amount = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False)
    paid = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    due = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    status = db.Column(db.String(16), nullable=False, default="Pending", index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "client_id": self.client_id,
            "package_name": self.package_name,
            "amount": self.amount,
            "paid": self.paid or 0,
            "due": self.due or 0,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Payment(db.Model):
    """Money received against one invoice of one client."""
    __tablename__ = "payments"

    id = db.Column(db.String(32), primary_key=True, default=lambda: new_id("PAY"))
    client_id = db.Column(db.Integer, db.ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    invoice_id = db.Column(db.String(32), db.ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)

    amount = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False)
    payment_source = db.Column(db.String(128), nullable=False, default="Online Transfer")
    status = db.Column(db.String(16), nullable=False, default="Paid")
    paid_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    receipt_file_url = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "client_id": self.client_id,
            "invoice_id": self.invoice_id,
            "amount": self.amount,
            "payment_source": self.payment_source,
            "status": self.status,
            "paid_at": to_utc_z(self.paid_at),
            "receipt_file_url": self.receipt_file_url,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
