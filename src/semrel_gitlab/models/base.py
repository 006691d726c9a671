"""Shared base for GitLab payload models."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, PrivateAttr


class GitLabModel(BaseModel):
    """Unknown fields are ignored so newer GitLab versions keep validating.

    Models built with :meth:`from_api` also keep the payload they came from,
    so user templates see every field GitLab returned.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    _raw: dict[str, Any] = PrivateAttr(default_factory=dict)

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> Self:
        model = cls.model_validate(data)
        model._raw = dict(data)
        return model

    @classmethod
    def parse_list(cls, data: Iterable[Mapping[str, Any]] | None) -> list[Self]:
        return [cls.from_api(item) for item in data or []]

    @property
    def raw(self) -> dict[str, Any]:
        """The API payload as received, or the dumped fields when there is none."""
        return self._raw or self.to_dict()

    def to_dict(self) -> dict[str, Any]:
        """Request or template form; unset fields are dropped."""
        return self.model_dump(mode="json", exclude_none=True)
