from typing import Protocol


class CompletionModel(Protocol):
    """Single-shot text completion: one prompt in, the model's raw text out."""

    def generate(self, prompt: str) -> str: ...
