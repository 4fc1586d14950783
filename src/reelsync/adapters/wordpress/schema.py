"""Pydantic models for the scraped website dump."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class WordPressBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


class WordPressMovie(WordPressBaseModel):
    title: str
    year: str | None = None
    url: str | None = None


class WordPressExperiment(WordPressBaseModel):
    experiment_number: str = Field(
        validation_alias=AliasChoices("experimentNumber", "experiment_number")
    )
    title: str | None = None
    post_date: str | None = Field(
        default=None,
        validation_alias=AliasChoices("postDate", "post_date", "date"),
    )
    host: str | None = None
    experiment_image: str | None = Field(
        default=None,
        validation_alias=AliasChoices("experimentImage", "experiment_image", "image"),
    )
    notes: str | None = None
    movies: list[WordPressMovie] = Field(default_factory=list["WordPressMovie"])


class WordPressDump(WordPressBaseModel):
    experiments: list[WordPressExperiment] = Field(default_factory=list["WordPressExperiment"])
