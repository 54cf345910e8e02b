from waterdesk.cli.app import main_menu
from waterdesk.db import close_connection, initialize_db
from waterdesk.logging import configure_logging, reconfigure


def main() -> None:
    configure_logging()
    initialize_db()
    # Alembic's fileConfig replaces the root handlers.
    reconfigure()
    try:
        main_menu()
    finally:
        close_connection()


if __name__ == "__main__":
    main()
