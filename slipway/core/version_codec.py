"""Time-encoded build versions with a recoverable inverse.

Build and major are coarse, caller-supplied fields.  Minor and revision hold
the number of 64-second intervals elapsed since the codec epoch::

    units    = (t - epoch) // 64s
    minor    = units // 65536
    revision = units %  65536

Two builds started more than one interval apart always sort distinctly;
builds inside the same interval share a version.  Timestamps outside the
representable window raise ``VersionRangeError`` instead of wrapping.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from slipway.errors import VersionRangeError
from slipway.models.versioning import UINT16_MAX, Version

logger = logging.getLogger(__name__)

QUANTUM_SECONDS = 64
_FIELD_SPAN = UINT16_MAX + 1
MAX_UNITS = _FIELD_SPAN * _FIELD_SPAN - 1

DEFAULT_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _as_utc(t: datetime) -> datetime:
    # Naive datetimes are taken to be UTC.
    if t.tzinfo is None:
        return t.replace(tzinfo=timezone.utc)
    return t.astimezone(timezone.utc)


class VersionCodec:
    """Encodes timestamps into versions and back.

    Parameters
    ----------
    epoch:
        Start of the encoding window.  Defaults to the Unix epoch.
    """

    def __init__(self, epoch: datetime = DEFAULT_EPOCH) -> None:
        self._epoch = _as_utc(epoch)

    @property
    def epoch(self) -> datetime:
        return self._epoch

    @property
    def window_end(self) -> datetime:
        """Start of the last representable interval, capped at ``datetime.max``."""
        try:
            return self._epoch + timedelta(seconds=MAX_UNITS * QUANTUM_SECONDS)
        except OverflowError:
            return datetime.max.replace(tzinfo=timezone.utc)

    def encode(self, t: datetime, build: int, major: int) -> Version:
        """Encode *t* with the given coarse fields.

        Raises ``VersionRangeError`` if *t* precedes the epoch, lies past the
        window, or a coarse field does not fit in 16 bits.
        """
        for name, value in (("build", build), ("major", major)):
            if not 0 <= value <= UINT16_MAX:
                raise VersionRangeError(
                    f"{name}={value} is outside 0..{UINT16_MAX}"
                )

        elapsed = _as_utc(t) - self._epoch
        seconds = elapsed.days * 86400 + elapsed.seconds
        if seconds < 0:
            raise VersionRangeError(
                f"{t.isoformat()} precedes the version epoch {self._epoch.isoformat()}"
            )

        units = seconds // QUANTUM_SECONDS
        if units > MAX_UNITS:
            raise VersionRangeError(
                f"{t.isoformat()} is past the last encodable interval "
                f"({self.window_end.isoformat()})"
            )

        minor, revision = divmod(units, _FIELD_SPAN)
        version = Version(build=build, major=major, minor=minor, revision=revision)
        logger.debug("Encoded %s as %s", t.isoformat(), version.full)
        return version

    def decode(self, version: Version) -> datetime:
        """Return the UTC start of the interval *version* encodes."""
        units = version.minor * _FIELD_SPAN + version.revision
        try:
            return self._epoch + timedelta(seconds=units * QUANTUM_SECONDS)
        except OverflowError as exc:
            raise VersionRangeError(
                f"{version.full} decodes past the last representable date"
            ) from exc

    def truncate(self, t: datetime) -> datetime:
        """Round *t* down to the codec's resolution."""
        return self.decode(self.encode(t, 0, 0))
