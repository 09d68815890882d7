"""Shared pytest fixtures for llm-samplers tests.

Provides reusable settings objects, resource providers, and sample score
arrays that are used across multiple test modules.
"""

from __future__ import annotations

import numpy as np
import pytest

from llm_samplers.config import SamplerSettings
from llm_samplers.resources import NilSamplerResources, SimpleSamplerResources


@pytest.fixture
def default_settings() -> SamplerSettings:
    """Return SamplerSettings with all default values (no .env file)."""
    return SamplerSettings(_env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def diagnostic_settings() -> SamplerSettings:
    """Return settings with diagnostic mode and full logging enabled."""
    return SamplerSettings(
        _env_file=None,
        log_level="full",
        diagnostic_mode=True,  # type: ignore[call-arg]
    )


@pytest.fixture
def nil_resources() -> NilSamplerResources:
    """Return a provider with neither RNG nor history."""
    return NilSamplerResources()


@pytest.fixture
def seeded_resources() -> SimpleSamplerResources:
    """Return a provider with a fixed-seed RNG and an empty history."""
    return SimpleSamplerResources.seeded(42, [])


@pytest.fixture
def ascending_scores() -> list[float]:
    """Return the four-token scores ``[0.1, 0.2, 0.3, 0.4]``.

    Token 3 has the highest logit, token 0 the lowest.
    """
    return [0.1, 0.2, 0.3, 0.4]


@pytest.fixture
def sample_logits_large_vocab() -> np.ndarray:
    """Return random scores for a larger vocabulary (32000).

    Uses a fixed RNG seed for reproducibility.
    """
    rng = np.random.default_rng(seed=12345)
    return rng.standard_normal(32000).astype(np.float64)
