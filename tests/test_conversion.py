import pytest
from visacuity.conversion import (
    logmar_to_display,
    parse_snellen,
    round_logmar,
    snellen_to_logmar,
)
from visacuity.errors import InvalidArgumentError, LogMARNotFoundError
from visacuity.scales import UnitSystem, scales_for

ALL_ENTRIES = [(unit, e) for unit in UnitSystem for e in scales_for(unit)]


@pytest.mark.parametrize("unit,entry", ALL_ENTRIES)
def test_chart_lines_resolve_both_ways(unit, entry):
    """Every chart line maps to its display and its ratio converts to its LogMAR."""
    assert logmar_to_display(entry.logmar, unit) == entry.display
    assert snellen_to_logmar(entry.numerator, entry.denominator) == entry.logmar


def test_twenty_forty_is_point_three():
    # log10(2) + 0.04 = 0.341
    assert snellen_to_logmar(20, 40) == 0.3
    assert logmar_to_display(snellen_to_logmar(20, 40), "foot") == "20/40"


def test_twenty_twenty_is_not_negative_zero():
    value = snellen_to_logmar(20, 20)
    assert value == 0.0
    assert str(value) == "0.0"


def test_optotypes_read_correction():
    # log10(2) = 0.301; +2 optotypes -> -0.04 -> 0.261
    assert snellen_to_logmar(20, 40, optotypes_read_correction=0) == 0.3
    assert snellen_to_logmar(20, 40, optotypes_read_correction=2) == 0.3
    # log10(2) + 0.1 = 0.401
    assert snellen_to_logmar(20, 40, optotypes_read_correction=-5) == 0.4
    # log10(2) - 0.1 = 0.201
    assert snellen_to_logmar(20, 40, optotypes_read_correction=5) == 0.2


@pytest.mark.parametrize("numerator", [20, 6, 0, -1])
def test_zero_denominator_raises(numerator):
    with pytest.raises(InvalidArgumentError):
        snellen_to_logmar(numerator, 0)


@pytest.mark.parametrize("numerator,denominator", [(0, 20), (-20, 40), (20, -40)])
def test_non_positive_terms_raise(numerator, denominator):
    with pytest.raises(ValueError):
        snellen_to_logmar(numerator, denominator)


@pytest.mark.parametrize("value", [0.05, 0.15, 1.1, -0.4])
def test_logmar_not_in_chart_raises(value):
    for unit in UnitSystem:
        with pytest.raises(LogMARNotFoundError):
            logmar_to_display(value, unit)


def test_not_found_is_a_lookup_error():
    with pytest.raises(LookupError):
        logmar_to_display(0.25, "metre")


def test_round_logmar_half_away_from_zero():
    assert round_logmar(0.25) == 0.3
    assert round_logmar(-0.25) == -0.3
    assert round_logmar(0.349) == 0.3
    assert round_logmar(-0.04) == 0.0


def test_parse_snellen():
    assert parse_snellen("20/40") == (20.0, 40.0)
    assert parse_snellen(" 6 / 9.5 ") == (6.0, 9.5)


@pytest.mark.parametrize("bad", ["", "20", "20/", "twenty/forty", "20/40/60"])
def test_parse_snellen_rejects_malformed(bad):
    with pytest.raises(InvalidArgumentError):
        parse_snellen(bad)


@pytest.mark.parametrize(
    "numerator,denominator",
    [(20, float("inf")), (float("inf"), 40), (20, float("nan")), (float("nan"), 40)],
)
def test_non_finite_terms_raise(numerator, denominator):
    with pytest.raises(InvalidArgumentError):
        snellen_to_logmar(numerator, denominator)
