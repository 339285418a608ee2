"""Persistence of the last selected printer.

The stored identity is advisory: it is shown to the user but never implies a
live connection.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

DEVICE_ID_KEY = "printer.last_device_id"
DEVICE_NAME_KEY = "printer.last_device_name"


@dataclass(frozen=True)
class PrinterHandle:
    """Identity of a paired printer."""
    id: str
    name: str

    def to_dict(self):
        return {"id": self.id, "name": self.name}


class DeviceStore(ABC):
    """Abstract key/value store for the persisted printer identity."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        pass

    def load(self) -> Optional[PrinterHandle]:
        """Return the saved handle, or None if nothing is saved."""
        device_id = self.get(DEVICE_ID_KEY)
        if not device_id:
            return None
        return PrinterHandle(id=device_id, name=self.get(DEVICE_NAME_KEY) or "")

    def save(self, handle: PrinterHandle) -> None:
        self.set(DEVICE_ID_KEY, handle.id)
        self.set(DEVICE_NAME_KEY, handle.name)

    def clear(self) -> None:
        self.delete(DEVICE_ID_KEY)
        self.delete(DEVICE_NAME_KEY)


class MemoryDeviceStore(DeviceStore):
    """In-process store, used when no database is configured."""

    def __init__(self):
        self._values = {}

    def get(self, key):
        return self._values.get(key)

    def set(self, key, value):
        self._values[key] = value

    def delete(self, key):
        self._values.pop(key, None)


class SettingsDeviceStore(DeviceStore):
    """Store backed by the ``settings`` table.

    Runs inside its own application context, since it is called from the
    printer runtime thread rather than from a request.
    """

    def __init__(self, app):
        self.app = app

    def get(self, key):
        from bleprinter import db
        from bleprinter.models import Setting
        with self.app.app_context():
            setting = db.session.get(Setting, key)
            return setting.value if setting else None

    def set(self, key, value):
        from bleprinter import db
        from bleprinter.models import Setting
        with self.app.app_context():
            setting = db.session.get(Setting, key)
            if setting is None:
                setting = Setting(key=key)
                db.session.add(setting)
            setting.value = value
            db.session.commit()

    def delete(self, key):
        from bleprinter import db
        from bleprinter.models import Setting
        with self.app.app_context():
            setting = db.session.get(Setting, key)
            if setting is not None:
                db.session.delete(setting)
                db.session.commit()
