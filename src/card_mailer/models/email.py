"""Models for extracted card data, template input and generated emails."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from card_mailer.errors import InputValidationError

PERSON_NAME_FALLBACK = "ご担当者"


class InputMode(str, Enum):
    """Mutually exclusive ways of submitting a business card."""

    IMAGE = "IMAGE"
    TEXT = "TEXT"


class ExtractedInfo(BaseModel):
    """Company and person names read from a business card."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    company_name: str = Field(
        default="",
        alias="companyName",
        description="Official company name including legal entity, empty if absent",
    )
    person_name: str = Field(
        default=PERSON_NAME_FALLBACK,
        alias="personName",
        description="Full name of the card holder",
    )


class EmailTemplateData(BaseModel):
    """Everything the email template needs."""

    model_config = ConfigDict(frozen=True)

    sender_name: str = Field(description="Name of the employee sending the email")
    event_name: str = Field(description="Event where the card was exchanged")
    extracted_info: ExtractedInfo


class GeneratedEmail(BaseModel):
    """Rendered email ready for copy-paste."""

    model_config = ConfigDict(frozen=True)

    subject: str
    body: str


@dataclass(frozen=True)
class CardInput:
    """A single extraction request: either an image data URI or pasted text."""

    image_data_uri: str | None = None
    """Image encoded as ``data:<mime>;base64,<payload>``."""

    text: str | None = None
    """Raw text copied from the card."""

    def __post_init__(self):
        if (self.image_data_uri is None) == (self.text is None):
            raise InputValidationError(
                "Exactly one of image_data_uri or text must be provided"
            )

    @classmethod
    def from_image(cls, data_uri: str) -> "CardInput":
        return cls(image_data_uri=data_uri)

    @classmethod
    def from_text(cls, text: str) -> "CardInput":
        return cls(text=text)

    @property
    def mode(self) -> InputMode:
        return InputMode.IMAGE if self.image_data_uri is not None else InputMode.TEXT
