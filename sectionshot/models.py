# sectionshot/models.py
import base64
from dataclasses import dataclass, field
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field


class ScreenshotRequest(BaseModel):
    """Body of POST /screenshot."""

    model_config = ConfigDict(populate_by_name=True)

    # validated by the capture engine
    url: Any = Field(None, description="Absolute URL of the page to capture.")
    section_height: Any = Field(
        None,
        alias="sectionHeight",
        description="Viewport height in pixels; each screenshot covers one section of this height.",
    )


class ScreenshotResponse(BaseModel):
    url: str
    timestamp: int
    count: int
    screenshots: List[str]


@dataclass
class CaptureResult:
    url: str
    timestamp: int
    screenshots: List[bytes] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.screenshots)

    def to_response(self) -> ScreenshotResponse:
        return ScreenshotResponse(
            url=self.url,
            timestamp=self.timestamp,
            count=self.count,
            screenshots=[base64.b64encode(img).decode() for img in self.screenshots],
        )
