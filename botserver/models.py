"""Pydantic models for bot server options and responses."""

from typing import Optional

from pydantic import BaseModel, Field


class BotServerOptions(BaseModel):
    """Options needed to build a bot server.

    Every field is optional at construction time so that incomplete
    records can be reported field by field during validation.
    """

    channel_access_token: Optional[str] = Field(
        None, description="LINE channel access token"
    )
    channel_secret: Optional[str] = Field(None, description="LINE channel secret")
    port: Optional[int] = Field(None, description="HTTPS listening port")
    key: Optional[str] = Field(None, description="Path to PEM private key")
    cert: Optional[str] = Field(None, description="Path to PEM certificate")

    class Config:
        frozen = True


class CertificateBundle(BaseModel):
    """Generated key and certificate, PEM encoded."""

    private_key: str
    certificate: str
    service_key: str = Field(..., description="Key that signed the certificate")

    class Config:
        frozen = True


class WebhookResponse(BaseModel):
    """Webhook endpoint response."""

    status: str = Field(default="ok", description="Status of event handling")
