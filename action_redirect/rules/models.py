from pydantic import BaseModel, Field, field_validator

REDIRECT_STATUS_CODES = frozenset({301, 302, 303, 307, 308})


class ProjectRules(BaseModel):
    slug: str = "action-redirect"
    rules_version: str = "1"


class ViewsRules(BaseModel):
    enable_jsessionid: bool = False


class RedirectsRules(BaseModel):
    status_code: int = 302

    @field_validator("status_code")
    @classmethod
    def check_status_code(cls, value: int) -> int:
        if value not in REDIRECT_STATUS_CODES:
            raise ValueError(
                f"status_code must be one of {sorted(REDIRECT_STATUS_CODES)}, got {value}"
            )
        return value


class SessionRules(BaseModel):
    cookie_name: str = "JSESSIONID"
    url_parameter: str = "jsessionid"


class EncodingRules(BaseModel):
    default_charset: str = "utf-8"


class UrlMappingsRules(BaseModel):
    # None means every controller is mappable
    controllers: list[str] | None = None
    default_action: str = "index"


class LoggingRules(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_redirects: bool = True


class Rules(BaseModel):
    project: ProjectRules = Field(default_factory=ProjectRules)
    views: ViewsRules = Field(default_factory=ViewsRules)
    redirects: RedirectsRules = Field(default_factory=RedirectsRules)
    session: SessionRules = Field(default_factory=SessionRules)
    encoding: EncodingRules = Field(default_factory=EncodingRules)
    url_mappings: UrlMappingsRules = Field(default_factory=UrlMappingsRules)
    logging: LoggingRules = Field(default_factory=LoggingRules)

    # RulesPort
    def enable_jsessionid(self) -> bool:
        return self.views.enable_jsessionid

    def get_status_code(self) -> int:
        return self.redirects.status_code
