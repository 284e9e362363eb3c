"""Data models for the retrieval-augmented chat pipeline."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

UNKNOWN = "Unknown"

EmbeddingVector = tuple[float, ...]


class Source(BaseModel):
    """Citation-ready descriptor of a retrieved document."""

    title: str = UNKNOWN
    file_path: str = UNKNOWN
    score: float = 0.0


class RetrievedDocument(BaseModel):
    """A single match returned by the vector index."""

    text: str = ""
    title: str = UNKNOWN
    file_path: str = UNKNOWN
    score: float = 0.0

    def to_source(self) -> Source:
        return Source(title=self.title, file_path=self.file_path, score=self.score)


class RetrievalResult(BaseModel):
    """Ranked documents from one retrieval, in the index's own order."""

    documents: list[RetrievedDocument] = Field(default_factory=list)

    @property
    def context_docs(self) -> str:
        return "\n\n".join(doc.text for doc in self.documents)

    @property
    def sources(self) -> list[Source]:
        return [doc.to_source() for doc in self.documents]


class PromptContext(BaseModel):
    """Everything the answer generator needs for one request."""

    model_config = ConfigDict(frozen=True)

    system: str
    context_docs: str = ""
    question: str

    @property
    def prompt(self) -> str:
        return f"Context:\n{self.context_docs}\n\nQuestion: {self.question}\n\n"
