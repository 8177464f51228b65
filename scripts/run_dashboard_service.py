"""
Dashboard Service Launcher

Starts the registry dashboard web boundary.

This service provides:
- JSON snapshot of the mirrored service registry (/api/state)
- User intents: register, deregister, heartbeat, rate limit, virtual domain
- Optional auto refresh (background thread, toggled from the UI)

Architecture:
-------------
- Flask web server (port 5000)
- In-memory mirror rebuilt from the registry on startup
- Registry REST API at REGISTRY_BASE_URL

Usage:
------
python scripts/run_dashboard_service.py

Environment Variables:
----------------------
REGISTRY_BASE_URL: Registry HTTP API base URL (default: http://127.0.0.1:8080)
DASHBOARD_PORT: Flask server port (default: 5000)
DASHBOARD_BIND_HOST: Flask bind address (default: 0.0.0.0)
DASHBOARD_DEBUG: Enable Flask debug mode (default: false)
DASHBOARD_REFRESH_INTERVAL_MS: Auto refresh interval (default: 5000)
LOG_LEVEL / DASHBOARD_LOG_FILE: Logging level and optional log file
"""

import atexit
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dashboard import config
from dashboard.service import create_app
from dashboard.state import AppState
from shared.logging_config import setup_logging


def main():
    """Main entrypoint for the dashboard service."""
    logger = setup_logging("dashboard", level=config.LOG_LEVEL, log_file=config.LOG_FILE)
    
    logger.info(f"Registry API: {config.REGISTRY_BASE_URL}")
    logger.info(f"Bind Address: {config.DASHBOARD_BIND_HOST}:{config.DASHBOARD_PORT}")
    logger.info(f"Auto refresh interval: {config.REFRESH_INTERVAL_MS}ms")
    
    state = AppState()
    # Scheduler thread, notification timer and HTTP session are released on exit
    atexit.register(state.unmount)
    app = create_app(state)
    
    try:
        app.run(
            host=config.DASHBOARD_BIND_HOST,
            port=config.DASHBOARD_PORT,
            debug=config.DASHBOARD_DEBUG,
            use_reloader=False  # Avoid a second state/scheduler in the reloader child
        )
    except KeyboardInterrupt:
        logger.info("Shutting down dashboard service...")
    except Exception as e:
        logger.error(f"Error running dashboard service: {e}", exc_info=True)
        return 1
    finally:
        state.unmount()
    return 0


if __name__ == "__main__":
    sys.exit(main())
