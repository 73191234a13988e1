from typing import List

from pydantic import BaseModel, ConfigDict, Field


class FormalLetterPayload(BaseModel):
    """
    Payload for a formal letter typeset with LaTeX.

    All text fields are escaped for LaTeX by the template itself.
    """

    sender: str = Field(..., min_length=1)

    recipient: str = Field(..., min_length=1)

    date: str = Field(
        ...,
        description="Localized letter date (e.g. '1 January 2024').",
    )

    subject: str = Field(..., min_length=1)

    paragraphs: List[str] = Field(
        ...,
        min_length=1,
        description="Body paragraphs, in order.",
    )

    closing: str = Field(default="Yours faithfully,")

    model_config = ConfigDict(extra="forbid")
