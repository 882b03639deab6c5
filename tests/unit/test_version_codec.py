"""Tests for the time-derived version codec."""

from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone

import pytest

from slipway.core.version_codec import QUANTUM_SECONDS, VersionCodec
from slipway.errors import VersionRangeError
from slipway.models.versioning import Version

UTC = timezone.utc


class TestEncode:
    def test_epoch_encodes_to_zero(self):
        codec = VersionCodec()
        version = codec.encode(datetime(1970, 1, 1, tzinfo=UTC), 1, 2)
        assert version.full == "1.2.0.0"

    def test_known_instant(self, fixed_now: datetime, fixed_version: str):
        assert VersionCodec().encode(fixed_now, 1, 0).full == fixed_version

    def test_quantum_boundaries(self):
        codec = VersionCodec()
        epoch = codec.epoch
        assert codec.encode(epoch + timedelta(seconds=63), 0, 0).revision == 0
        assert codec.encode(epoch + timedelta(seconds=64), 0, 0).revision == 1

    def test_revision_carries_into_minor(self):
        codec = VersionCodec()
        t = codec.epoch + timedelta(seconds=65536 * QUANTUM_SECONDS)
        version = codec.encode(t, 0, 0)
        assert (version.minor, version.revision) == (1, 0)

    def test_naive_datetime_is_utc(self, fixed_now: datetime):
        codec = VersionCodec()
        naive = fixed_now.replace(tzinfo=None)
        assert codec.encode(naive, 1, 0) == codec.encode(fixed_now, 1, 0)

    def test_other_timezones_are_normalized(self, fixed_now: datetime):
        codec = VersionCodec()
        shifted = fixed_now.astimezone(timezone(timedelta(hours=5)))
        assert codec.encode(shifted, 1, 0) == codec.encode(fixed_now, 1, 0)

    def test_custom_epoch(self):
        codec = VersionCodec(datetime(2020, 1, 1, tzinfo=UTC))
        version = codec.encode(datetime(2020, 1, 1, 0, 2, 8, tzinfo=UTC), 3, 4)
        assert version.full == "3.4.0.2"


class TestMonotonicity:
    def test_builds_one_quantum_apart_sort_distinctly(self):
        codec = VersionCodec()
        rng = random.Random(20240101)
        for _ in range(500):
            offset = rng.randrange(0, 60 * 365 * 86400)
            t1 = codec.epoch + timedelta(seconds=offset, microseconds=rng.randrange(10**6))
            t2 = t1 + timedelta(seconds=QUANTUM_SECONDS + rng.randrange(0, 10**6))
            assert codec.encode(t1, 1, 0) < codec.encode(t2, 1, 0)

    def test_same_quantum_shares_a_version(self):
        codec = VersionCodec()
        start = codec.epoch + timedelta(seconds=640)
        assert codec.encode(start, 1, 0) == codec.encode(start + timedelta(seconds=63), 1, 0)


class TestDecode:
    def test_decode_inverts_encode_to_resolution(self):
        codec = VersionCodec()
        rng = random.Random(7)
        for _ in range(200):
            t = codec.epoch + timedelta(
                seconds=rng.randrange(0, 80 * 365 * 86400),
                microseconds=rng.randrange(10**6),
            )
            decoded = codec.decode(codec.encode(t, 1, 0))
            assert decoded == codec.truncate(t)
            assert timedelta(0) <= t - decoded < timedelta(seconds=QUANTUM_SECONDS)

    def test_decode_returns_utc(self, fixed_now: datetime, fixed_version: str):
        decoded = VersionCodec().decode(Version.parse(fixed_version))
        assert decoded == fixed_now
        assert decoded.tzinfo == UTC

    def test_decode_past_representable_dates_raises(self):
        with pytest.raises(VersionRangeError):
            VersionCodec().decode(Version(build=0, major=0, minor=65535, revision=65535))


class TestRange:
    def test_before_epoch_raises(self):
        codec = VersionCodec(datetime(2020, 1, 1, tzinfo=UTC))
        with pytest.raises(VersionRangeError):
            codec.encode(datetime(2019, 12, 31, 23, 59, tzinfo=UTC), 1, 0)

    def test_range_error_is_a_value_error(self):
        codec = VersionCodec(datetime(2020, 1, 1, tzinfo=UTC))
        with pytest.raises(ValueError):
            codec.encode(datetime(2000, 1, 1, tzinfo=UTC), 1, 0)

    def test_past_window_raises_instead_of_wrapping(self):
        codec = VersionCodec(datetime(1000, 1, 1, tzinfo=UTC))
        last = codec.window_end
        assert codec.encode(last, 0, 0).full == "0.0.65535.65535"
        with pytest.raises(VersionRangeError):
            codec.encode(last + timedelta(seconds=QUANTUM_SECONDS), 0, 0)

    def test_window_end_is_capped_for_recent_epochs(self):
        assert VersionCodec().window_end.year == 9999

    @pytest.mark.parametrize("build,major", [(-1, 0), (0, -1), (65536, 0), (0, 70000)])
    def test_coarse_fields_must_fit_sixteen_bits(self, fixed_now, build, major):
        with pytest.raises(VersionRangeError):
            VersionCodec().encode(fixed_now, build, major)


class TestVersionModel:
    def test_parse_and_render(self):
        version = Version.parse("1.2.3.4")
        assert version.as_tuple() == (1, 2, 3, 4)
        assert str(version) == "1.2.3.4"

    @pytest.mark.parametrize("text", ["1.2.3", "1.2.3.x", "", "1.2.3.4.5", "1.2.3.70000"])
    def test_parse_rejects_malformed(self, text):
        with pytest.raises(ValueError):
            Version.parse(text)

    def test_field_wise_ordering(self):
        assert Version.parse("1.0.9.9") < Version.parse("1.1.0.0")
        assert Version.parse("2.0.0.0") > Version.parse("1.65535.65535.65535")
        assert Version.parse("1.2.3.4") <= Version.parse("1.2.3.4")

    def test_frozen(self):
        version = Version.parse("1.2.3.4")
        with pytest.raises(Exception):
            version.minor = 9  # type: ignore[misc]

    def test_full_is_serialized(self):
        assert Version.parse("1.2.3.4").model_dump()["full"] == "1.2.3.4"
