from datetime import datetime, timezone

import pytest

from clockboard.engine.offsets import OffsetResolver
from clockboard.engine.simulation import TimeSimulation
from clockboard.engine.snippets import SnippetGenerator, ZoneKind, format_hours, sanitize_token

from conftest import EASTERN, SUMMER_NOW, WINTER_NOW, FakeFormatter


def _generator(catalog, resolver=None, now=SUMMER_NOW, local_timezone="Europe/London"):
    simulation = TimeSimulation(clock=lambda: now)
    return SnippetGenerator(resolver or OffsetResolver(), catalog, simulation, local_timezone)


def _artifacts(snippets):
    return (snippets.query_expression, snippets.script_variant_a, snippets.script_variant_b)


def test_dst_zone_deltas_are_embedded_in_every_artifact(catalog):
    resolver = OffsetResolver(FakeFormatter({"America/New_York": EASTERN}))
    snippets = _generator(catalog, resolver).generate("America/New_York")

    context = snippets.context
    assert context.kind is ZoneKind.GENERAL
    assert (context.winter_delta_hours, context.summer_delta_hours) == (1, 2)
    assert context.token == "EDT"

    assert "SET @summerOffsetHours = 2" in snippets.script_variant_a
    assert "SET @winterOffsetHours = 1" in snippets.script_variant_a
    assert "var summerOffsetHours = 2;" in snippets.script_variant_b
    assert "var winterOffsetHours = 1;" in snippets.script_variant_b
    assert "DATEADD(MINUTE, 2 * 60, [SourceDate])" in snippets.query_expression
    assert "DATEADD(MINUTE, 1 * 60, [SourceDate])" in snippets.query_expression
    for artifact in _artifacts(snippets):
        assert "EDT" in artifact
        assert "America / New York" in artifact
        assert "2024-03-10" in artifact
        assert "2024-11-03" in artifact
        assert "placeholder" in artifact


def test_general_query_names_windows_zone(catalog):
    snippets = _generator(catalog).generate("America/New_York")
    assert "Windows zone: Eastern Standard Time" in snippets.query_expression


def test_utc_always_adds_six_hours(catalog):
    winter = _generator(catalog, now=WINTER_NOW).generate("UTC")
    summer = _generator(catalog, now=SUMMER_NOW).generate("UTC")

    assert winter.context.kind is ZoneKind.FIXED_UTC
    assert _artifacts(winter) == _artifacts(summer)
    for artifact in _artifacts(winter):
        assert "+6 hours" in artifact
    assert "DATEADD(HOUR, 6, [SourceDate])" in winter.query_expression
    assert "SET @offsetHours = 6" in winter.script_variant_a
    assert "var offsetHours = 6;" in winter.script_variant_b


def test_utc_wins_over_a_utc_host(catalog):
    snippets = _generator(catalog, local_timezone="UTC").generate("UTC")
    assert snippets.context.kind is ZoneKind.FIXED_UTC


def test_local_zone_uses_native_conversion(catalog):
    snippets = _generator(catalog, local_timezone="Europe/London").generate("Europe/London")

    assert snippets.context.kind is ZoneKind.LOCAL
    assert "SystemDateToLocalDate(@sourceDate)" in snippets.script_variant_a
    assert "Platform.Function.SystemDateToLocalDate(sourceDate)" in snippets.script_variant_b
    assert (
        "AT TIME ZONE 'Central America Standard Time' AT TIME ZONE 'GMT Standard Time'"
        in snippets.query_expression
    )
    for artifact in _artifacts(snippets):
        assert "DATEADD" not in artifact.upper()


def test_fixed_reference_target_has_zero_deltas(catalog):
    snippets = _generator(catalog).generate("Etc/GMT+6")

    assert snippets.context.kind is ZoneKind.GENERAL
    assert (snippets.context.winter_delta_hours, snippets.context.summer_delta_hours) == (0, 0)
    assert "SET @summerOffsetHours = 0" in snippets.script_variant_a


def test_fractional_deltas_are_kept(catalog):
    snippets = _generator(catalog).generate("Asia/Kolkata")

    assert snippets.context.winter_delta_hours == 11.5
    assert "SET @winterOffsetHours = 11.5" in snippets.script_variant_a
    assert "var winterOffsetHours = 11.5;" in snippets.script_variant_b
    assert "DATEADD(MINUTE, 11.5 * 60, [SourceDate])" in snippets.query_expression


def test_simulated_instant_sets_reference_year(catalog):
    simulation = TimeSimulation(clock=lambda: SUMMER_NOW)
    simulation.set_from_nominal(2031, 1, 20, 9)
    generator = SnippetGenerator(OffsetResolver(), catalog, simulation, "Europe/London")

    snippets = generator.generate("America/Chicago")

    assert "2031-03-10" in snippets.query_expression
    assert snippets.context.dst_end == "2031-11-03"


def test_every_catalog_zone_is_consistent_across_artifacts(catalog):
    generator = _generator(catalog, local_timezone="Europe/London")
    for entry in catalog:
        snippets = generator.generate(entry.id)
        context = snippets.context
        for artifact in _artifacts(snippets):
            assert context.token in artifact, entry.id
            assert context.display_name in artifact, entry.id
        if context.kind is ZoneKind.GENERAL:
            summer = format_hours(context.summer_delta_hours)
            winter = format_hours(context.winter_delta_hours)
            assert f"SET @summerOffsetHours = {summer}" in snippets.script_variant_a, entry.id
            assert f"var summerOffsetHours = {summer};" in snippets.script_variant_b, entry.id
            assert f"DATEADD(MINUTE, {winter} * 60" in snippets.query_expression, entry.id


@pytest.mark.parametrize(
    "alias, expected",
    [
        ("EDT", "EDT"),
        ("GMT+05:30", "GMTplus05_30"),
        ("GMT-06:00", "GMTminus06_00"),
        ("+0530", "plus0530"),
        ("5 PM zone", "TZ5_PM_zone"),
        ("", "TZ"),
        ("::", "TZ"),
    ],
)
def test_sanitize_token(alias, expected):
    assert sanitize_token(alias) == expected


@pytest.mark.parametrize("value, expected", [(1.0, "1"), (-4.0, "-4"), (11.5, "11.5"), (11.75, "11.75"), (0, "0")])
def test_format_hours(value, expected):
    assert format_hours(value) == expected


def test_seasonal_deltas_use_january_and_july(catalog):
    formatter = FakeFormatter({"America/New_York": EASTERN})
    generator = _generator(catalog, OffsetResolver(formatter))

    assert generator.seasonal_deltas("America/New_York", 2025) == (1, 2)
    months = sorted({instant.month for _, instant in formatter.calls})
    assert months == [1, 7]
    assert all(instant.tzinfo == timezone.utc for _, instant in formatter.calls)
    assert {instant.year for _, instant in formatter.calls} == {2025}
    assert datetime(2025, 1, 1, 12, tzinfo=timezone.utc) in [instant for _, instant in formatter.calls]
