from tokfox.db.session import Database

async def check_db(database: Database) -> bool:
    """Simple DB connectivity check.
    Returns False while the database is closed or when ``SELECT 1`` fails.
    """
    if not database.is_open:
        return False
    return await database.ping()
