"""Main entry point for the Inventory Sync Service."""

import uvicorn

from inventory_sync_service.server import app

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8002)
