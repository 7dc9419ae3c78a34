from datetime import datetime, timedelta, timezone

from common.db.base import UTCDateTime


class TestUTCDateTime:
    """Bind and result processing for UTCDateTime."""

    def test_naive_values_are_tagged_as_utc(self):
        column_type = UTCDateTime()

        value = column_type.process_result_value(datetime(2026, 1, 1, 12, 0), None)

        assert value == datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_offsets_are_converted_to_utc(self):
        column_type = UTCDateTime()
        plus_two = timezone(timedelta(hours=2))

        value = column_type.process_bind_param(
            datetime(2026, 1, 1, 14, 0, tzinfo=plus_two), None
        )

        assert value.tzinfo == timezone.utc
        assert value.hour == 12

    def test_sqlite_strings_are_parsed(self):
        column_type = UTCDateTime()

        value = column_type.process_result_value("2026-01-01 12:00:00", None)

        assert value == datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_none_passes_through(self):
        column_type = UTCDateTime()

        assert column_type.process_bind_param(None, None) is None
        assert column_type.process_result_value(None, None) is None
