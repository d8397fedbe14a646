"""
Unit tests for the model-fallback cascade.
"""

import pytest

from conftest import upstream_failure
from zeronoise.intelligence.errors import UpstreamFailure
from zeronoise.intelligence.llm.cascade import ModelAttempt, ModelCascade


@pytest.mark.unit
class TestModelCascade:
    """Tests for ModelCascade."""

    def test_requires_attempts(self):
        with pytest.raises(ValueError):
            ModelCascade([])

    def test_models(self):
        cascade = ModelCascade.two_tier(ModelAttempt("big"), ModelAttempt("small"))
        assert cascade.models == ["big", "small"]

    @pytest.mark.asyncio
    async def test_first_success_wins(self):
        calls = []

        async def call(attempt):
            calls.append(attempt.model)
            return attempt.model

        cascade = ModelCascade.two_tier(ModelAttempt("big"), ModelAttempt("small"))
        assert await cascade.run(call) == "big"
        assert calls == ["big"]

    @pytest.mark.asyncio
    async def test_falls_back_on_upstream_failure(self):
        calls = []

        async def call(attempt):
            calls.append(attempt.model)
            if attempt.model == "big":
                raise upstream_failure(503)
            return attempt.model

        cascade = ModelCascade.two_tier(ModelAttempt("big"), ModelAttempt("small"))
        assert await cascade.run(call) == "small"
        assert calls == ["big", "small"]

    @pytest.mark.asyncio
    async def test_raises_last_failure_when_exhausted(self):
        async def call(attempt):
            raise UpstreamFailure(f"{attempt.model} down")

        cascade = ModelCascade.two_tier(ModelAttempt("big"), ModelAttempt("small"))
        with pytest.raises(UpstreamFailure, match="small down"):
            await cascade.run(call)

    @pytest.mark.asyncio
    async def test_other_errors_propagate_without_fallback(self):
        calls = []

        async def call(attempt):
            calls.append(attempt.model)
            raise KeyError("bug")

        cascade = ModelCascade.two_tier(ModelAttempt("big"), ModelAttempt("small"))
        with pytest.raises(KeyError):
            await cascade.run(call)
        assert calls == ["big"]

    @pytest.mark.asyncio
    async def test_single_carries_params(self):
        seen = []

        async def call(attempt):
            seen.append(attempt)
            return "ok"

        await ModelCascade.single("m", temperature=0.2, max_tokens=10).run(call)
        assert seen[0].temperature == 0.2
        assert seen[0].max_tokens == 10
