"""Four-part build version — immutable once created for a run."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, computed_field

UINT16_MAX = 65535


class Version(BaseModel):
    """A ``build.major.minor.revision`` version.

    Build and major are coarse, caller-supplied fields.  Minor and revision
    carry the fine time component produced by ``VersionCodec``.  Versions
    order field-wise in that sequence.
    """

    model_config = ConfigDict(frozen=True)

    build: int = Field(ge=0, le=UINT16_MAX)
    major: int = Field(ge=0, le=UINT16_MAX)
    minor: int = Field(ge=0, le=UINT16_MAX)
    revision: int = Field(ge=0, le=UINT16_MAX)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def full(self) -> str:
        return f"{self.build}.{self.major}.{self.minor}.{self.revision}"

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse a canonical ``a.b.c.d`` rendering."""
        parts = text.strip().split(".")
        if len(parts) != 4 or not all(p.isdigit() for p in parts):
            raise ValueError(f"Not a four-part version: {text!r}")
        build, major, minor, revision = (int(p) for p in parts)
        return cls(build=build, major=major, minor=minor, revision=revision)

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.build, self.major, self.minor, self.revision)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.as_tuple() < other.as_tuple()

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.as_tuple() <= other.as_tuple()

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.as_tuple() > other.as_tuple()

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.as_tuple() >= other.as_tuple()

    def __str__(self) -> str:
        return self.full
