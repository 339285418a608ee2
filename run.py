#!/usr/bin/env python3
"""Entry point for the BLE Receipt Printer service."""
import os
from bleprinter import create_app

app = create_app(os.environ.get("FLASK_ENV", "default"))

if __name__ == "__main__":
    # Get host and port from environment or use defaults
    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", 5000))
    debug = os.environ.get("FLASK_ENV", "default") == "development"

    print(f"Starting BLE Receipt Printer on http://{host}:{port}")
    # The reloader would start a second process competing for the printer
    app.run(host=host, port=port, debug=debug, use_reloader=False)
