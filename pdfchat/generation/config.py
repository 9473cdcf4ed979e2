"""Configuration for answer generation."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class GenerationConfig:
    """Sampling settings sent with every completion request."""

    max_tokens: int = 2048
    temperature: float = 0.3
