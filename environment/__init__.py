"""Platform environment lookups for exporter identity and credentials"""
from .cloudfoundry import (
    DEFAULT_SERVICE_NAME,
    ConfigurationError,
    ServiceCredentials,
    get_app_guid,
    get_credentials,
    get_instance_guid,
    get_instance_index,
)

__all__ = [
    'DEFAULT_SERVICE_NAME',
    'ConfigurationError',
    'ServiceCredentials',
    'get_app_guid',
    'get_credentials',
    'get_instance_guid',
    'get_instance_index',
]
