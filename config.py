"""Exporter configuration: optional overrides and the resolved export settings"""
from pathlib import Path
from typing import Literal, Mapping, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from environment import (
    DEFAULT_SERVICE_NAME,
    ConfigurationError,
    get_app_guid,
    get_credentials,
    get_instance_guid,
    get_instance_index,
)
from metrics.units import parse_time_unit, resolve_time_unit
from logging_config import get_logger


logger = get_logger(__name__)

DEFAULT_FREQUENCY = 60.0


class Options(BaseSettings):
    """Exporter options - every field is optional and individually overridable.

    Unset fields are filled from the platform by ``resolve_config``.
    """

    # Export settings
    frequency: Optional[float] = Field(default=None, ge=0, description="Export frequency in seconds (default 60)")
    time_unit: Optional[int] = Field(default=None, description="Duration unit for timers, in nanoseconds or by name")

    # Identity
    instance_id: Optional[str] = Field(default=None, description="Instance id (default INSTANCE_GUID)")
    instance_index: Optional[str] = Field(default=None, description="Instance index (default INSTANCE_INDEX)")
    app_guid: Optional[str] = Field(default=None, description="Application id (default from VCAP_APPLICATION)")

    # Metric forwarder endpoint
    token: Optional[str] = Field(default=None, description="Authorization token (default from VCAP_SERVICES)")
    url: Optional[str] = Field(default=None, description="Metric forwarder URL (default from VCAP_SERVICES)")
    service_name: str = Field(default=DEFAULT_SERVICE_NAME, description="Bound service holding the credentials")
    skip_ssl_verification: bool = Field(default=False, description="Skip TLS certificate verification")
    timeout: Optional[float] = Field(default=None, gt=0, description="HTTP timeout in seconds (client default when unset)")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO", description="Log level")
    log_file: Optional[Path] = Field(default=None, description="Optional log file")

    model_config = SettingsConfigDict(env_prefix="METRICS_FORWARDER_", case_sensitive=False)

    @field_validator('time_unit', mode='before')
    @classmethod
    def parse_unit(cls, v):
        """Accept a nanosecond magnitude, a timedelta or a unit name such as 'ms'"""
        if v is None or v == "":
            return None
        return parse_time_unit(v)

    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_log_level(cls, v):
        return v.upper() if isinstance(v, str) else v


class ExportConfig(BaseModel):
    """Resolved export settings, read-only for the lifetime of the exporter"""

    model_config = ConfigDict(frozen=True)

    url: str = ""
    token: str = ""
    app_guid: str = ""
    instance_id: str = ""
    instance_index: str = ""
    frequency: float = DEFAULT_FREQUENCY
    time_unit: int = Field(default_factory=lambda: resolve_time_unit(None).nanoseconds)
    service_name: str = DEFAULT_SERVICE_NAME
    skip_ssl_verification: bool = False
    timeout: Optional[float] = None


def resolve_config(options: Optional[Options] = None,
                   environ: Optional[Mapping[str, str]] = None) -> ExportConfig:
    """Fill unset options from the platform environment.

    Lookup failures are logged and leave the affected fields empty; the
    caller decides what an empty URL means.
    """
    options = options if options is not None else Options()

    token = options.token or ""
    url = options.url or ""
    if not token or not url:
        try:
            credentials = get_credentials(options.service_name, environ)
        except ConfigurationError as e:
            logger.error(
                "Could not get metrics forwarder credentials",
                service_name=options.service_name,
                error=str(e),
                event_type="config_error"
            )
        else:
            token = token or credentials.access_token
            url = url or credentials.url

    app_guid = options.app_guid or ""
    if not app_guid:
        try:
            app_guid = get_app_guid(environ)
        except ConfigurationError as e:
            logger.error("Could not get app guid", error=str(e), event_type="config_error")

    instance_id = options.instance_id if options.instance_id is not None else get_instance_guid(environ)
    instance_index = options.instance_index if options.instance_index is not None else get_instance_index(environ)

    return ExportConfig(
        url=url,
        token=token,
        app_guid=app_guid,
        instance_id=instance_id,
        instance_index=instance_index,
        frequency=options.frequency or DEFAULT_FREQUENCY,
        time_unit=resolve_time_unit(options.time_unit).nanoseconds,
        service_name=options.service_name,
        skip_ssl_verification=options.skip_ssl_verification,
        timeout=options.timeout,
    )
