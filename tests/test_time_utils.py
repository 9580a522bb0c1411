import calendar
import datetime
import unittest

import pytz

from motp_errors import InvalidTimeFormat, InvalidTimezoneFormat
from time_utils import (
    MONTH_NAMES,
    TIME_PARSERS,
    apply_tz_offset,
    format_asctime,
    parse_tz_offset,
    resolve_time,
    to_epoch_seconds,
)

# Sun, 06 Nov 1994 08:49:37 GMT
REFERENCE_EPOCH = 784111777


class TimeFormatTests(unittest.TestCase):
    def assertEpoch(self, time_str, expected=REFERENCE_EPOCH):
        parsed = resolve_time(time_str)
        self.assertIsNotNone(parsed.tzinfo)
        self.assertEqual(to_epoch_seconds(parsed), expected)

    def test_rfc822_zone_name(self):
        self.assertEpoch("Sun, 06 Nov 1994 08:49:37 GMT")
        self.assertEpoch("Sun, 06 Nov 1994 03:49:37 EST")
        self.assertEpoch("Sun, 06 Nov 1994 08:49:37 UTC")

    def test_rfc822_numeric_zone(self):
        self.assertEpoch("Sun, 06 Nov 1994 09:49:37 +0100")
        self.assertEpoch("Sun, 06 Nov 1994 03:49:37 -0500")
        self.assertEpoch("Sun, 06 Nov 1994 14:19:37 +0530")

    def test_rfc850_zone_name(self):
        self.assertEpoch("Sunday, 06-Nov-94 08:49:37 GMT")

    def test_rfc850_numeric_zone(self):
        self.assertEpoch("Sunday, 06-Nov-94 03:49:37 -0500")

    def test_rfc850_two_digit_years(self):
        self.assertEpoch("Thursday, 01-Jan-70 00:00:00 GMT", 0)
        parsed = resolve_time("Saturday, 01-Jan-00 00:00:00 GMT")
        self.assertEqual(parsed.year, 2000)

    def test_asctime_is_local_time(self):
        parsed = resolve_time("Sun Nov  6 08:49:37 1994")
        self.assertIsNone(parsed.tzinfo)
        self.assertEqual(parsed, datetime.datetime(1994, 11, 6, 8, 49, 37))

    def test_plain_is_local_time(self):
        parsed = resolve_time("1994-11-06 08:49:37")
        self.assertIsNone(parsed.tzinfo)
        self.assertEqual(parsed, datetime.datetime(1994, 11, 6, 8, 49, 37))
        self.assertEqual(
            to_epoch_seconds(parsed),
            calendar.timegm(parsed.astimezone().utctimetuple()),
        )

    def test_epoch_seconds(self):
        self.assertEpoch("@784111777")
        self.assertEpoch("@0", 0)

    def test_names_are_case_insensitive_and_may_be_full(self):
        self.assertEpoch("sun, 06 nov 1994 08:49:37 gmt")
        self.assertEpoch("Sunday, 06 November 1994 08:49:37 GMT")

    def test_surrounding_whitespace_is_ignored(self):
        self.assertEpoch("  @784111777\n")

    def test_asctime_round_trip(self):
        civil = datetime.datetime(1994, 11, 6, 8, 49, 37)
        text = format_asctime(civil)
        self.assertEqual(text, "Sun Nov  6 08:49:37 1994")
        self.assertEqual(resolve_time(text), civil)

    def test_parsers_are_tried_in_order(self):
        labels = [label for label, _ in TIME_PARSERS]
        self.assertEqual(len(labels), 7)
        self.assertTrue(labels[0].startswith("HTTP date"))
        self.assertTrue(labels[-1].startswith("@"))

    def test_parsers_return_none_instead_of_raising(self):
        for _, parser in TIME_PARSERS:
            self.assertIsNone(parser("not-a-date", MONTH_NAMES, ()))

    def test_explicit_name_table_is_used(self):
        months = list(MONTH_NAMES)
        months[10] = ("nov", "novembre")
        text = "Sun, 06 novembre 1994 08:49:37 GMT"
        parsed = resolve_time(text, months=months)
        self.assertEqual(to_epoch_seconds(parsed), REFERENCE_EPOCH)
        with self.assertRaises(InvalidTimeFormat):
            resolve_time(text)

    def test_invalid_time_strings(self):
        for text in (
            "not-a-date",
            "",
            "1994-11-06 08:49:37 junk",
            "1994-02-30 00:00:00",
            "Sun, 06 Nov 1994 08:49:37 XYZ",
            "Sun, 06 Nov 1994 08:49:37 +1500",
            "Foo, 06 Nov 1994 08:49:37 GMT",
            "@-5",
            "@99999999999999999999",
            "Mon, 01 Jan 0001 00:00:00 +1400",
            "Fri, 31 Dec 9999 23:59:59 -1200",
        ):
            with self.assertRaises(InvalidTimeFormat, msg=text):
                resolve_time(text)

    def test_leap_second_is_rejected(self):
        with self.assertRaises(InvalidTimeFormat):
            resolve_time("1994-11-06 23:59:60")
        with self.assertRaises(InvalidTimeFormat):
            resolve_time("Sun, 06 Nov 1994 23:59:60 GMT")

    def test_error_names_the_input(self):
        with self.assertRaises(InvalidTimeFormat) as ctx:
            resolve_time("not-a-date")
        self.assertIn("not-a-date", str(ctx.exception))

    def test_now_is_used_when_no_time_string(self):
        now = datetime.datetime(2023, 11, 14, 22, 13, 20, tzinfo=pytz.utc)
        self.assertIs(resolve_time(None, now=now), now)
        self.assertIsNotNone(resolve_time().tzinfo)


class TimezoneOffsetTests(unittest.TestCase):
    def test_valid_offsets(self):
        self.assertEqual(parse_tz_offset("+0100"), 60)
        self.assertEqual(parse_tz_offset("-05"), -300)
        self.assertEqual(parse_tz_offset("+0530"), 330)
        self.assertEqual(parse_tz_offset("+1400"), 840)
        self.assertEqual(parse_tz_offset("-1200"), -720)
        self.assertEqual(parse_tz_offset("+00"), 0)

    def test_invalid_offsets(self):
        for tz in ("+1500", "+1401", "-1201", "-13", "+0160", "0100", "+1", "+123", "+01:00", "+12345", "", None):
            with self.assertRaises(InvalidTimezoneFormat, msg=repr(tz)):
                parse_tz_offset(tz)

    def test_no_override_passes_through(self):
        civil = resolve_time("Sun, 06 Nov 1994 09:49:37 +0100")
        self.assertIs(apply_tz_offset(civil, None), civil)

    def test_override_replaces_parsed_zone(self):
        civil = resolve_time("Sun, 06 Nov 1994 09:49:37 +0100")
        adjusted = apply_tz_offset(civil, "-0500")
        self.assertEqual(adjusted, datetime.datetime(1994, 11, 6, 3, 49, 37, tzinfo=pytz.utc))
        self.assertEqual(
            to_epoch_seconds(adjusted),
            calendar.timegm((1994, 11, 6, 3, 49, 37, 0, 0, 0)),
        )

    def test_override_of_epoch_time(self):
        adjusted = apply_tz_offset(resolve_time("@0"), "+0130")
        self.assertEqual(to_epoch_seconds(adjusted), 5400)
        self.assertEqual(format_asctime(adjusted), "Thu Jan  1 01:30:00 1970")

    def test_override_rejects_bad_offset(self):
        with self.assertRaises(InvalidTimezoneFormat):
            apply_tz_offset(resolve_time("@0"), "+1500")

    def test_override_past_year_9999_is_a_zone_error(self):
        civil = resolve_time("@253402300799")
        with self.assertRaises(InvalidTimezoneFormat) as ctx:
            apply_tz_offset(civil, "+1400")
        self.assertIn("+1400", str(ctx.exception))
        self.assertIn("outside the supported range", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
