"""Job parameters - validated knobs for one grouping run."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError, model_validator

from tempgroup.core.errors import ParameterError

if TYPE_CHECKING:
    from tempgroup.core.settings import TempGroupSettings


class JobParameters(BaseModel):
    """Parameters of a grouping job run.

    ``page_size`` drives reader paging; ``chunk_size`` drives the
    transaction and commit granularity, so a page must hold at least one
    full chunk.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    chunk_size: int = Field(default=1000, gt=0)
    page_size: int = Field(default=10000, gt=0)
    max_threads: int = Field(default=4, gt=0)
    log_frequency: int = Field(default=10000, gt=0)
    preload_known_accounts: bool = False
    preload_threshold: int = Field(default=100_000, ge=0)
    writer_mode: Literal["batch", "upsert"] = "batch"

    @model_validator(mode="after")
    def _page_holds_chunk(self) -> JobParameters:
        if self.page_size < self.chunk_size:
            raise ValueError(
                f"page_size ({self.page_size}) must be >= chunk_size ({self.chunk_size})"
            )
        return self

    @classmethod
    def build(cls, **values: Any) -> JobParameters:
        """Validate *values*, raising :class:`ParameterError` instead of pydantic's error."""
        try:
            return cls(**{k: v for k, v in values.items() if v is not None})
        except PydanticValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(p) for p in first.get("loc", ())) or None
            raise ParameterError(f"Invalid job parameters: {first['msg']}", field=field, cause=e) from e

    @classmethod
    def from_settings(cls, settings: TempGroupSettings, **overrides: Any) -> JobParameters:
        """Parameters from settings, with non-None *overrides* applied on top."""
        values = {
            "chunk_size": settings.chunk_size,
            "page_size": settings.page_size,
            "max_threads": settings.max_threads,
            "log_frequency": settings.log_frequency,
            "preload_known_accounts": settings.preload_known_accounts,
            "preload_threshold": settings.preload_threshold,
            "writer_mode": settings.writer_mode,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.build(**values)
