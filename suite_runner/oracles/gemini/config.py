"""Configuration for Gemini oracle."""

from pydantic import BaseModel, SecretStr


class GeminiConfig(BaseModel):
    """Configuration for Gemini oracle."""

    api_key: SecretStr
    model: str = "gemini-3-flash-preview"
    api_base_url: str = "https://generativelanguage.googleapis.com"
    thinking_budget: int = 2048
