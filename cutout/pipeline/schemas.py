from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from typing import List, Optional, Union


class PaletteMember(BaseModel):
    """One colour of a requested palette."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    color_hex: str
    color_weight: Optional[Union[int, float, str]] = None


class ColourPalette(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    members: List[PaletteMember] = Field(default_factory=list)


class GenerationRequest(BaseModel):
    """
    Inbound generation request.

    Only the JSON structure is checked here. A missing prompt or filename is
    kept as an empty string and surfaces later as a downstream failure.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    prompt: str = ""
    filename: str = ""
    resolution: Optional[str] = None
    aspect_ratio: Optional[str] = None
    num_images: Optional[int] = None
    style_type: Optional[str] = None
    colour_palette: Optional[ColourPalette] = None

    @field_validator("prompt", "filename", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return "" if v is None else v


class GeneratedImage(BaseModel):
    """One descriptor in the generation endpoint's `data` list."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    prompt: str = ""
    resolution: str = ""
    is_image_safe: bool = False
    seed: int = 0
    url: str = ""
    style_type: Optional[str] = None

    @field_validator("prompt", "resolution", "is_image_safe", "seed", "url", mode="before")
    @classmethod
    def none_as_default(cls, v, info: ValidationInfo):
        if v is None:
            return cls.model_fields[info.field_name].default
        return v


class GenerationResult(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    created: Optional[str] = None
    data: List[GeneratedImage] = Field(default_factory=list)

    @field_validator("data", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return [] if v is None else v


class BackgroundRemovalResult(BaseModel):
    """Background removal response. The endpoint fills one of several URL fields."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    original: Optional[str] = None
    high_resolution: Optional[str] = None
    preview: Optional[str] = None
    url: Optional[str] = None

    @property
    def image_url(self) -> Optional[str]:
        """First non-empty URL in priority order: original, high_resolution, preview, url."""
        for candidate in (self.original, self.high_resolution, self.preview, self.url):
            if candidate:
                return candidate
        return None


class StoredImage(BaseModel):
    """An object written to storage and its public address."""
    bucket: str
    key: str
    url: str


class PipelineResponse(BaseModel):
    image_urls: List[str] = Field(default_factory=list)
