import logging

from .config.settings import DEBUG, LOG_LEVEL
from .database import SessionLocal, SnapshotRepository, init_db
from .store import StateStore
from .utils.clock import SystemClock

logger = logging.getLogger(__name__)


def configure_logging():
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def build_store() -> StateStore:
    """Initialize the database and load the saved state"""
    logger.info("Initializing database...")
    init_db()
    store = StateStore(persistence=SnapshotRepository(SessionLocal()), clock=SystemClock())
    store.load()
    store.tick()
    return store


def main():
    """Main entry point for the HR payroll service"""
    configure_logging()
    logger.info("Starting HR Payroll System")

    from .api import create_app
    app = create_app(build_store())

    print("=" * 60)
    print("HR Payroll System v0.1.0")
    print("=" * 60)
    print("Open: http://localhost:5000/api/state")
    print("=" * 60)
    app.run(debug=DEBUG, host='0.0.0.0', port=5000)


if __name__ == "__main__":
    main()
