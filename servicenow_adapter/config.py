from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field


class ConnectorConfig(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    url: AnyHttpUrl
    username: str = Field(min_length=1)
    password: str
    service_now_table: str = Field(alias="serviceNowTable", min_length=1)
    timeout_seconds: float | None = Field(default=None, gt=0)


class AuthConfig(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    username: str = Field(min_length=1)
    password: str


class AdapterProperties(BaseModel):
    """Adapter instance properties as handed over by the host platform."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    url: AnyHttpUrl
    auth: AuthConfig
    service_now_table: str = Field(alias="serviceNowTable", min_length=1)
    timeout_seconds: float | None = Field(default=None, gt=0)

    def to_connector_config(self) -> ConnectorConfig:
        return ConnectorConfig(
            url=self.url,
            username=self.auth.username,
            password=self.auth.password,
            service_now_table=self.service_now_table,
            timeout_seconds=self.timeout_seconds,
        )
