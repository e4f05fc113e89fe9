# Re-export primary service layer entry points for convenience.
from .account import (
    create_account,
    account_exists,
    get_account,
    update_account,
    add_invitation,
    remove_invitation,
    get_by_invitation,
)
from .health import check_db

__all__ = [
    # account
    "create_account",
    "account_exists",
    "get_account",
    "update_account",
    # invitation
    "add_invitation",
    "remove_invitation",
    "get_by_invitation",
    # health
    "check_db",
]
