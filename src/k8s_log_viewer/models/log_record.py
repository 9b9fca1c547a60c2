"""
Data models for structured application log records.
"""

from typing import Any, Dict, Optional, Set, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class _RecordPart(BaseModel):
    """Base for every part of a log record.

    Unknown keys are kept in ``model_extra`` and emitted again on dump.
    JSON ``null`` for a declared field is treated as a missing value.
    """

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    @classmethod
    def _declared_keys(cls) -> Set[str]:
        """Field names and every key accepted for them on input."""
        keys = set()
        for name, field in cls.model_fields.items():
            keys.add(name)
            if field.alias:
                keys.add(field.alias)
            alias = field.validation_alias
            if isinstance(alias, AliasChoices):
                keys.update(choice for choice in alias.choices if isinstance(choice, str))
            elif isinstance(alias, str):
                keys.add(alias)
        return keys

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # Nulls under unknown keys are kept.
        if isinstance(data, dict):
            declared = cls._declared_keys()
            return {k: v for k, v in data.items() if v is not None or k not in declared}
        return data

    def is_empty(self) -> bool:
        """True when no field carries a value and there are no extra keys."""
        if self.model_extra:
            return False
        for name in type(self).model_fields:
            value = getattr(self, name)
            if isinstance(value, _RecordPart):
                if not value.is_empty():
                    return False
            elif isinstance(value, str):
                if value.strip():
                    return False
            elif value is not None:
                return False
        return True


class EnvInfo(_RecordPart):
    """Where the emitting application runs."""

    arch: str = ""
    cluster: str = ""
    pool: str = ""
    server: str = ""
    version: str = ""


class LevelMetaRequest(_RecordPart):
    """Request that triggered the event."""

    command_name: str = Field("", alias="commandName")
    host: str = ""
    url: str = ""


class LevelMetaUser(_RecordPart):
    """User acting in the request."""

    name: str = ""


class LevelMeta(_RecordPart):
    """Context attached to the log level."""

    request: LevelMetaRequest = Field(default_factory=LevelMetaRequest)
    user: Optional[LevelMetaUser] = None


class Geo(_RecordPart):
    """Client geo-location resolved by the edge."""

    addr: str = ""
    city: str = ""
    country: str = ""
    dma: str = ""
    location_info: Any = Field(None, alias="locationInfo")
    postal_code: str = Field("", alias="postalCode")
    region: str = ""
    time_zone: str = Field("", alias="timeZone")


def _metadata_field(name: str, *aliases: str) -> Any:
    return Field(
        "",
        validation_alias=AliasChoices(name, *aliases),
        serialization_alias=name,
    )


class Metadata(_RecordPart):
    """Request/response telemetry of an access log entry."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    client_ip: str = _metadata_field("client-ip", "clientIp", "client_ip")
    command_name: str = _metadata_field("command-name", "commandName")
    date: str = _metadata_field("date")
    domain: str = _metadata_field("domain")
    geo: Geo = Field(default_factory=Geo)
    http_version: str = _metadata_field("http-version", "httpVersion")
    method: str = _metadata_field("method")
    referrer: str = _metadata_field("referrer")
    remote_addr: str = _metadata_field("remote-addr", "remoteAddr")
    request_id: str = _metadata_field("request-id", "requestId")
    response_content_length: str = _metadata_field(
        "response-content-length", "responseContentLength"
    )
    response_time_ms: str = _metadata_field(
        "response-timeMS", "responseTimeMS", "responseTimeMs"
    )
    status: str = _metadata_field("status")
    url: str = _metadata_field("url")
    user_agent: str = _metadata_field("user-agent", "userAgent")


class LogRecord(_RecordPart):
    """One structured log entry as emitted by an application container.

    Records are frozen: they are decoded once from a line, read by the
    filter and render stages and then dropped.
    """

    application: str = ""
    component: str = ""
    environment: EnvInfo = Field(default_factory=EnvInfo)
    level: str = ""
    level_meta: LevelMeta = Field(default_factory=LevelMeta, alias="levelMeta")
    log_version: str = Field("", alias="logVersion")
    message: str = ""
    metadata: Metadata = Field(default_factory=Metadata)
    span_id: str = Field("", alias="spanId")
    stack: str = ""
    timestamp: int = 0
    trace_id: str = Field("", alias="traceId")

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> "LogRecord":
        """
        Decode a record from a JSON document.

        Args:
            text: One JSON object

        Returns:
            The decoded record

        Raises:
            pydantic.ValidationError: If the text is not a JSON object
                matching the record schema
        """
        return cls.model_validate_json(text)

    def to_dict(self) -> Dict[str, Any]:
        """Dump the record with wire names, extension keys included."""
        return self.model_dump(mode="json", by_alias=True)

    def to_pretty_json(self) -> str:
        """Serialize the record as indented JSON."""
        return self.model_dump_json(by_alias=True, indent=2)

    @property
    def has_message(self) -> bool:
        return bool(self.message.strip())

    @property
    def is_error(self) -> bool:
        return self.level.lower() == "error"

    @property
    def has_stack(self) -> bool:
        return self.is_error and bool(self.stack.strip())

    @property
    def request_url(self) -> str:
        return self.level_meta.request.url

    @property
    def user_name(self) -> str:
        if self.level_meta.user is None:
            return ""
        return self.level_meta.user.name
