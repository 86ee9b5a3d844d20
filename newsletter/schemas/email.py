"""Pydantic schemas for the email provider API."""

from pydantic import BaseModel, ConfigDict, Field


class SendEmailRequest(BaseModel):
    """Request body for ``POST /email`` on the provider."""

    sender: str = Field(
        serialization_alias="From",
        description="Sender address",
    )
    recipient: str = Field(
        serialization_alias="To",
        description="Recipient address",
    )
    subject: str = Field(
        serialization_alias="Subject",
    )
    html_body: str = Field(
        serialization_alias="HtmlBody",
        description="HTML version of the message",
    )
    text_body: str = Field(
        serialization_alias="TextBody",
        description="Plain-text version of the message",
    )

    model_config = ConfigDict(frozen=True)

    def to_wire(self) -> dict[str, str]:
        """Serialise using the provider's field names."""
        return self.model_dump(by_alias=True)
