from .account import Account, AccountAlias, AliasType, Invitation, PushEndpoint

__all__ = ["Account", "AccountAlias", "AliasType", "Invitation", "PushEndpoint"]
