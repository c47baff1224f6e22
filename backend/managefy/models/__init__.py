from .identity import User, UserValidation
from .tenancy import Business, UserRole
from .catalog import Client, Supplier, Product
from .sales import Sale, SaleLine
from .communications import Notification
from .error_logs import ErrorLog

__all__ = [
    'User', 'UserValidation',
    'Business', 'UserRole',
    'Client', 'Supplier', 'Product',
    'Sale', 'SaleLine',
    'Notification',
    'ErrorLog',
]
