"""
Typed view of the JSON report printed by
``ffprobe -print_format json -show_format -show_streams``.

Only the keys the extractor reads are declared; everything else is ignored.
ffprobe prints most numbers as strings ("1234", "10.000000", "N/A"), so
numeric keys accept either and are converted by the extractor.
"""
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, PrivateAttr, field_validator

Scalar = Union[int, float, str]


class CodecKind(str, Enum):
    VIDEO = "video"
    AUDIO = "audio"
    OTHER = "other"


class ProbeFormat(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    filename: Optional[str] = None
    format_name: Optional[str] = None
    format_long_name: Optional[str] = None
    size: Optional[Scalar] = None
    duration: Optional[Scalar] = None
    bit_rate: Optional[Scalar] = None
    tags: Optional[Dict[str, Any]] = None


class ProbeStream(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    index: Optional[int] = None
    codec_type: Optional[str] = None
    codec_name: Optional[str] = None
    codec_long_name: Optional[str] = None
    profile: Optional[str] = None
    width: Optional[Scalar] = None
    height: Optional[Scalar] = None
    display_aspect_ratio: Optional[str] = None
    r_frame_rate: Optional[str] = None
    avg_frame_rate: Optional[str] = None
    bit_rate: Optional[Scalar] = None
    pix_fmt: Optional[str] = None
    sample_rate: Optional[Scalar] = None
    channels: Optional[Scalar] = None
    channel_layout: Optional[str] = None
    tags: Optional[Dict[str, Any]] = None

    @property
    def kind(self) -> CodecKind:
        if self.codec_type == CodecKind.VIDEO.value:
            return CodecKind.VIDEO
        if self.codec_type == CodecKind.AUDIO.value:
            return CodecKind.AUDIO
        return CodecKind.OTHER


class RawProbeOutput(BaseModel):
    """Decoded ffprobe report: one format record and the stream list"""
    model_config = ConfigDict(extra="ignore")

    format: Optional[ProbeFormat] = None
    streams: List[ProbeStream] = []

    _document: Dict[str, Any] = PrivateAttr(default_factory=dict)

    @field_validator('streams', mode='before')
    @classmethod
    def null_streams_as_empty(cls, v):
        return [] if v is None else v

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "RawProbeOutput":
        output = cls.model_validate(document)
        output._document = document
        return output

    @property
    def document(self) -> Dict[str, Any]:
        """The untouched JSON document ffprobe printed"""
        return self._document
