from pydantic import BaseModel, Field

from afk_waitlist.components.waitlist.models import (
    DEFAULT_SOURCE_TAG,
    DEFAULT_TYPO_DOMAINS,
    Transport,
    WaitlistConfig,
)


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class RateLimitRules(BaseModel):
    max_submissions: int = Field(3, ge=0)
    window_seconds: int = Field(3600, gt=0)
    max_tracked_identifiers: int = Field(10_000, gt=0)
    sweep_every: int = Field(1000, ge=0)


class CustomLocationRules(BaseModel):
    min_length: int = 2
    max_length: int = 100


class ValidationRules(BaseModel):
    email_max_length: int = 254
    custom_location: CustomLocationRules = CustomLocationRules()
    typo_domains: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_TYPO_DOMAINS))


class SanitizerRules(BaseModel):
    max_length: int = 500
    disallowed_chars: str = "<>\"'&"


class DispatchRules(BaseModel):
    transport: Transport = Transport.MULTI_SINK
    timeout_seconds: float = Field(10.0, gt=0)
    source_tag: str = DEFAULT_SOURCE_TAG
    sheet_name: str = "Waitlist"
    email_provider: str = "mailchimp"
    tags: list[str] = Field(default_factory=lambda: ["waitlist", "la-launch"])
    script_exec_path: str = "/exec"


class OpsRules(BaseModel):
    required_env: list[str] = Field(default_factory=list)
    cors_origins: list[str] = Field(default_factory=list)


class Rules(BaseModel):
    project: ProjectRules
    rate_limits: RateLimitRules = RateLimitRules()
    validation: ValidationRules = ValidationRules()
    sanitizer: SanitizerRules = SanitizerRules()
    dispatch: DispatchRules = DispatchRules()
    ops: OpsRules = OpsRules()

    def to_waitlist_config(self) -> WaitlistConfig:
        """Flatten the policy sections into the component's config."""
        return WaitlistConfig(
            email_max_length=self.validation.email_max_length,
            custom_location_min_length=self.validation.custom_location.min_length,
            custom_location_max_length=self.validation.custom_location.max_length,
            typo_domains=dict(self.validation.typo_domains),
            sanitize_max_length=self.sanitizer.max_length,
            sanitize_disallowed_chars=self.sanitizer.disallowed_chars,
            rate_limit_max_submissions=self.rate_limits.max_submissions,
            rate_limit_window_seconds=self.rate_limits.window_seconds,
            source_tag=self.dispatch.source_tag,
        )
