"""Cloud Foundry platform lookups for exporter identity and credentials"""
import json
import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional


DEFAULT_SERVICE_NAME = "metrics-forwarder"


class ConfigurationError(Exception):
    """A platform lookup failed or returned malformed data"""


@dataclass(frozen=True)
class ServiceCredentials:
    """Credentials of a bound metrics forwarder service"""
    access_token: str
    url: str


def _environ(environ: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return os.environ if environ is None else environ


def _load_json(environ: Mapping[str, str], variable: str) -> Any:
    raw = environ.get(variable)
    if not raw:
        raise ConfigurationError(f"{variable} is not set")
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"{variable} is not valid JSON: {e}") from e


def get_instance_index(environ: Optional[Mapping[str, str]] = None) -> str:
    return _environ(environ).get("INSTANCE_INDEX", "")


def get_instance_guid(environ: Optional[Mapping[str, str]] = None) -> str:
    return _environ(environ).get("INSTANCE_GUID", "")


def get_app_guid(environ: Optional[Mapping[str, str]] = None) -> str:
    """Application id from the VCAP_APPLICATION descriptor"""
    application = _load_json(_environ(environ), "VCAP_APPLICATION")
    if not isinstance(application, dict):
        raise ConfigurationError("VCAP_APPLICATION is not a JSON object")

    app_guid = application.get("application_id")
    if not isinstance(app_guid, str):
        raise ConfigurationError("VCAP_APPLICATION has no application_id")
    return app_guid


def get_credentials(service_name: str = DEFAULT_SERVICE_NAME,
                    environ: Optional[Mapping[str, str]] = None) -> ServiceCredentials:
    """Access key and hostname of the first binding of ``service_name`` in VCAP_SERVICES"""
    services = _load_json(_environ(environ), "VCAP_SERVICES")
    if not isinstance(services, dict):
        raise ConfigurationError("VCAP_SERVICES is not a JSON object")

    bindings = services.get(service_name)
    if not bindings:
        raise ConfigurationError(f"{service_name} service not found")

    try:
        credentials = bindings[0]["credentials"]
        return ServiceCredentials(
            access_token=credentials.get("access_key", ""),
            url=credentials.get("hostname", ""),
        )
    except (KeyError, IndexError, TypeError, AttributeError) as e:
        raise ConfigurationError(f"Malformed credentials for {service_name}: {e}") from e
