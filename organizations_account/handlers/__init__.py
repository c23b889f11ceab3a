from organizations_account.handlers.create import CreateHandler
from organizations_account.handlers.read import ReadHandler

__all__ = ["CreateHandler", "ReadHandler"]
