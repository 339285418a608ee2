"""Database models."""
from datetime import datetime
from bleprinter import db


class Setting(db.Model):
    """Key/value application setting (e.g. the last selected printer)."""
    __tablename__ = "settings"

    key = db.Column(db.String(100), primary_key=True)
    value = db.Column(db.Text, nullable=True)

    def __repr__(self):
        return f"<Setting {self.key}>"


class PrintHistory(db.Model):
    """Print history model."""
    __tablename__ = "print_history"

    id = db.Column(db.Integer, primary_key=True)
    order_number = db.Column(db.String(100), nullable=False)
    rendered_preview = db.Column(db.Text, nullable=True)  # Text preview of what was printed
    device_name = db.Column(db.String(100), nullable=True)
    status = db.Column(db.String(20), nullable=False)  # success, failed
    error_kind = db.Column(db.String(40), nullable=True)
    error_message = db.Column(db.Text, nullable=True)
    printed_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "order_number": self.order_number,
            "rendered_preview": self.rendered_preview,
            "device_name": self.device_name,
            "status": self.status,
            "error_kind": self.error_kind,
            "error_message": self.error_message,
            "printed_at": self.printed_at.isoformat() if self.printed_at else None,
        }

    def __repr__(self):
        return f"<PrintHistory {self.id} ({self.status})>"
