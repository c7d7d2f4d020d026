from typing import Annotated, Any, Literal, Self

from pydantic import (
    Field,
    NonNegativeInt,
    PositiveInt,
    TypeAdapter,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

LogLevel = Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]

_ENV_LIST = TypeAdapter(list[str])


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, extra="ignore", frozen=True
    )

    repo_to_clean: str = Field(min_length=1)

    dry_run: bool = True

    repo_age_threshold: PositiveInt | None = None
    repo_first_n_threshold: PositiveInt | None = None
    envs: Annotated[list[str], NoDecode] = Field(default_factory=list)

    api_delay: NonNegativeInt = 500
    max_workers: PositiveInt = 10

    aws_region: str | None = None
    log_level: LogLevel = "INFO"

    @field_validator("dry_run", mode="before")
    @classmethod
    def _parse_bool(cls, v: str | bool) -> bool:
        return v if isinstance(v, bool) else v.lower() == "true"

    @field_validator("envs", mode="before")
    @classmethod
    def _split_envs(cls, v: str | list[str]) -> list[str]:
        if isinstance(v, str):
            if v.strip().startswith("["):
                return _ENV_LIST.validate_json(v)
            return [env.strip() for env in v.split(",") if env.strip()]
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("repo_age_threshold", "repo_first_n_threshold", mode="before")
    @classmethod
    def _empty_is_unset(cls, v: Any, info: ValidationInfo) -> Any:
        if v == "":
            return None
        if str(v).strip() == "0":
            name = (info.field_name or "").upper()
            raise ValueError(
                f"{name}=0 is no longer accepted as 'disabled', leave {name} unset instead"
            )
        return v

    @model_validator(mode="after")
    def _one_threshold(self) -> Self:
        if self.repo_age_threshold is not None and self.repo_first_n_threshold is not None:
            raise ValueError(
                "REPO_AGE_THRESHOLD and REPO_FIRST_N_THRESHOLD are mutually exclusive, "
                "set only one of them"
            )
        return self
