from typing import Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
	model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

	APP_NAME: str = Field(default="SubDub API")
	DEBUG: bool = Field(default=False)
	API_PREFIX: str = Field(default="/api/v1")
	LOG_LEVEL: str = Field(default="INFO")

	# Database
	DATABASE_URL: str = Field(default="")

	# Auth / JWT
	JWT_SECRET: str = Field(default="dev-change-me")
	JWT_ALGORITHM: str = Field(default="HS256")
	ACCESS_TOKEN_EXPIRES_MINUTES: int = Field(default=60 * 24)

	# Durable workflow transport (Azure Service Bus scheduled messages)
	SERVICEBUS_CONNECTION_STRING: str = Field(default="")
	SERVICEBUS_QUEUE_NAME: str = Field(default="subscription-workflows")

	# Renewal reminders
	REMINDER_LEAD_DAYS: Union[list[int], str] = Field(default=[7, 5, 2, 1])
	WORKFLOW_RECHECK_STATUS_ON_RESUME: bool = Field(default=True)
	WORKFLOW_SUPERSEDE_PREVIOUS_RUNS: bool = Field(default=True)
	UPCOMING_RENEWAL_WINDOW_DAYS: int = Field(default=7, ge=1)

	# Links embedded in reminder notifications
	CLIENT_URL: str = Field(default="https://subdub.example.com")

	# Azure Monitor / Application Insights
	AZURE_MONITOR_CONN_STR: str = Field(default="")
	ENABLE_APP_INSIGHTS: bool = Field(default=True)
	SAMPLING_RATIO: float = Field(default=1.0)

	@field_validator("REMINDER_LEAD_DAYS", mode="before")
	@classmethod
	def parse_lead_days(cls, value: Union[str, list[int]]) -> list[int]:
		"""Accept a JSON list or a comma-separated string such as ``7,5,2,1``."""
		if isinstance(value, str):
			value = [part.strip() for part in value.strip("[]").split(",") if part.strip()]
		days = [int(day) for day in value]
		if not days:
			raise ValueError("REMINDER_LEAD_DAYS must contain at least one lead time")
		if any(day <= 0 for day in days):
			raise ValueError("REMINDER_LEAD_DAYS must be positive day counts")
		if len(set(days)) != len(days):
			raise ValueError("REMINDER_LEAD_DAYS must not contain duplicates")
		return days

	@property
	def reminder_lead_days(self) -> tuple[int, ...]:
		return tuple(self.REMINDER_LEAD_DAYS)


settings = Settings()
