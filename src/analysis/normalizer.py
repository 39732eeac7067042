# src/analysis/normalizer.py — v1
"""Turn modality-specific inputs into AnalysisRequest values.

Voice is treated as text over its transcript. Sketches and photos become
image requests carrying the instruction prompt for their analysis kind.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from agenticad.core.models import AnalysisRequest
from agenticad.providers.prompts import PHOTO_PROMPT, SKETCH_PROMPT


class TextInput(BaseModel):
    type: Literal["text"] = "text"
    content: str


class VoiceInput(BaseModel):
    type: Literal["voice"] = "voice"
    transcript: str
    duration_s: float = 0.0


class SketchInput(BaseModel):
    type: Literal["sketch"] = "sketch"
    image_data: str
    width: int | None = None
    height: int | None = None


class PhotoInput(BaseModel):
    type: Literal["photo"] = "photo"
    image_data: str
    width: int | None = None
    height: int | None = None
    device: str | None = None


ModalInput = Annotated[
    Union[TextInput, VoiceInput, SketchInput, PhotoInput],
    Field(discriminator="type"),
]


class MultimodalInput(BaseModel):
    """At most one input per modality, as collected by a single session."""

    text: TextInput | None = None
    voice: VoiceInput | None = None
    sketch: SketchInput | None = None
    photo: PhotoInput | None = None

    @property
    def is_empty(self) -> bool:
        return not any((self.text, self.voice, self.sketch, self.photo))


def normalize(item: TextInput | VoiceInput | SketchInput | PhotoInput) -> AnalysisRequest:
    """Build the AnalysisRequest for one input.

    Raises:
        ValueError: If the input carries no content.
    """
    if isinstance(item, TextInput):
        if not item.content.strip():
            raise ValueError("Text input is empty")
        return AnalysisRequest(
            modality="text", raw_content=item.content, analysis_kind="text_analysis"
        )

    if isinstance(item, VoiceInput):
        if not item.transcript.strip():
            raise ValueError("Voice input has an empty transcript")
        return AnalysisRequest(
            modality="voice", raw_content=item.transcript, analysis_kind="text_analysis"
        )

    if isinstance(item, SketchInput):
        if not item.image_data:
            raise ValueError("Sketch input has no image data")
        return AnalysisRequest(
            modality="sketch",
            raw_content=item.image_data,
            analysis_kind="sketch_analysis",
            prompt=SKETCH_PROMPT,
        )

    if isinstance(item, PhotoInput):
        if not item.image_data:
            raise ValueError("Photo input has no image data")
        return AnalysisRequest(
            modality="photo",
            raw_content=item.image_data,
            analysis_kind="image_analysis",
            prompt=PHOTO_PROMPT,
        )

    raise ValueError(f"Unsupported input type: {type(item).__name__}")


def normalize_all(inputs: MultimodalInput) -> list[AnalysisRequest]:
    """Requests in text, voice, sketch, photo order; blank text is skipped.

    Raises:
        ValueError: If no usable input remains.
    """
    requests: list[AnalysisRequest] = []
    if inputs.text is not None and inputs.text.content.strip():
        requests.append(normalize(inputs.text))
    if inputs.voice is not None and inputs.voice.transcript.strip():
        requests.append(normalize(inputs.voice))
    if inputs.sketch is not None:
        requests.append(normalize(inputs.sketch))
    if inputs.photo is not None:
        requests.append(normalize(inputs.photo))

    if not requests:
        raise ValueError("No usable input provided")
    return requests
