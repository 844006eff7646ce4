from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	# Provider can be "openai" (chat completions) or "gemini" (Generative Language API)
	llm_provider: str = Field(default="openai", validation_alias="LLM_PROVIDER")
	openai_api_key: str | None = Field(default=None, validation_alias="OPENAI_API_KEY")
	openai_model: str = Field(default="gpt-5-nano", validation_alias="OPENAI_MODEL")
	openai_base_url: str = Field(default="https://api.openai.com/v1/chat/completions", validation_alias="OPENAI_BASE_URL")
	gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
	gemini_model: str = Field(default="gemini-2.5-flash", validation_alias="GEMINI_MODEL")
	# Applies to every outbound call; a hung provider holds the request this long
	llm_timeout_seconds: float = Field(default=60.0, validation_alias="LLM_TIMEOUT_SECONDS")

	# Book cover lookup against Open Library; disable to always use the age-band fallback
	cover_lookup_enabled: bool = Field(default=True, validation_alias="COVER_LOOKUP_ENABLED")
	cover_base_url: str = Field(default="https://covers.openlibrary.org/b/title", validation_alias="COVER_BASE_URL")

	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
	port: int = Field(default=3000, validation_alias="PORT")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

	@property
	def llm_configured(self) -> bool:
		if self.llm_provider == "gemini":
			return bool(self.gemini_api_key)
		return bool(self.openai_api_key)

settings = Settings()
