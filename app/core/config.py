from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class SchoolBranding(BaseModel):
    """Institution details interpolated into printed receipts."""

    name: str
    address_line: str = ""
    logo_url: Optional[str] = None
    academic_session: str

    class Config:
        frozen = True


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field(..., alias="DATABASE_URL")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    # Assign serials to legacy fee transactions when the API process starts.
    backfill_serials_on_startup: bool = Field(True, alias="BACKFILL_SERIALS_ON_STARTUP")

    school_name: str = Field("Your School Name", alias="SCHOOL_NAME")
    school_address_line: str = Field("", alias="SCHOOL_ADDRESS_LINE")
    school_logo_url: Optional[str] = Field(None, alias="SCHOOL_LOGO_URL")
    academic_session: str = Field("2025-26", alias="ACADEMIC_SESSION")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    def branding(self) -> SchoolBranding:
        return SchoolBranding(
            name=self.school_name,
            address_line=self.school_address_line,
            logo_url=self.school_logo_url,
            academic_session=self.academic_session,
        )


settings = Settings()


def get_school_branding() -> SchoolBranding:
    """FastAPI dependency: read-only branding passed into the receipt renderer."""
    return settings.branding()
