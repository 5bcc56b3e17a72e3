from typing import Any

from app.core.generation import GenerationError, sample_blueprint


class FakeIdeaGenerator:
    """IdeaGenerator double: returns the sample blueprint or fails on demand."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[tuple[str, str]] = []

    async def generate(self, title: str, description: str) -> dict[str, Any]:
        self.calls.append((title, description))
        if self.fail:
            raise GenerationError("AI provider request failed: boom")
        return sample_blueprint(title)
