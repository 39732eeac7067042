# src/providers/prompts.py — v1
"""Prompt templates for attribute extraction."""

from __future__ import annotations

from agenticad.core.models import AnalysisRequest

TEXT_ANALYSIS_SYSTEM = (
    "You are an expert product design analyst specializing in physical product "
    "development and manufacturing. Return only valid JSON responses focused on "
    "product specifications."
)

IMAGE_ANALYSIS_SYSTEM = (
    "You are a professional product designer and CAD analyst. Analyze images and "
    "provide structured JSON responses for product modeling and manufacturing."
)

SKETCH_PROMPT = (
    "Analyze this product design sketch and extract component information, "
    "dimensions, and assembly relationships."
)

PHOTO_PROMPT = (
    "Analyze this product photo and identify style, materials, and design "
    "features that should be incorporated into a new product design."
)

TEXT_RESPONSE_SCHEMA = """{
  "requirements": ["list of explicit requirements"],
  "constraints": ["list of constraints or limitations"],
  "style": "design style (modern, retro, industrial, minimalist, ergonomic, etc.)",
  "components": ["list of product components mentioned"],
  "features": ["list of specific features requested"],
  "materials": ["suggested materials"],
  "dimensions": {
    "length": "estimated length in cm",
    "width": "estimated width in cm",
    "height": "estimated height in cm"
  },
  "manufacturing": {
    "method": "3D printing, injection molding, machining, etc.",
    "complexity": "simple, moderate, complex"
  },
  "use_case": "primary use case or function"
}"""

IMAGE_RESPONSE_SCHEMA = """{
  "layout": "overall shape or arrangement",
  "style": "design style",
  "components": ["visible components"],
  "features": ["visible design features"],
  "materials": ["apparent materials"],
  "dimensions": {"length": "cm", "width": "cm", "height": "cm"}
}"""


def build_text_prompt(text: str) -> str:
    return (
        "You are an expert product design AI assistant. Analyze the following "
        "text and extract structured information for physical product design.\n\n"
        f'Text to analyze: "{text}"\n\n'
        "Extract and return a JSON response with the following structure:\n"
        f"{TEXT_RESPONSE_SCHEMA}\n\n"
        "Focus on extracting actionable product design information that can be "
        "used to generate a 3D prototype."
    )


def build_image_prompt(instruction: str | None) -> str:
    return (
        f"{instruction or PHOTO_PROMPT}\n\n"
        "Return a JSON response with the following structure:\n"
        f"{IMAGE_RESPONSE_SCHEMA}"
    )


def system_prompt_for(request: AnalysisRequest) -> str:
    return IMAGE_ANALYSIS_SYSTEM if request.is_image else TEXT_ANALYSIS_SYSTEM


def user_prompt_for(request: AnalysisRequest) -> str:
    if request.is_image:
        return build_image_prompt(request.prompt)
    return build_text_prompt(request.raw_content)
