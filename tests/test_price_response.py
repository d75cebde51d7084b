"""Tests for the real-time price response advisor."""
import pytest

from greenload.optimizer import respond_to_price


def test_high_price_with_charged_battery_uses_battery():
    response = respond_to_price(current_price=0.30, average_price=0.15, demand=40, solar=0, battery_level=20)

    assert response.action == "use_battery"
    assert response.potential_savings == pytest.approx(8.4)


def test_high_price_with_empty_battery_reduces_load():
    response = respond_to_price(current_price=0.30, average_price=0.15, demand=40, solar=0, battery_level=5)

    assert response.action == "reduce_load"
    assert response.potential_savings == pytest.approx(1.2)


def test_cheap_price_with_surplus_solar_charges():
    response = respond_to_price(current_price=0.05, average_price=0.10, demand=30, solar=50, battery_level=20)

    assert response.action == "charge_battery"
    assert response.potential_savings == pytest.approx(1.0)


def test_elevated_price_reduces_load():
    response = respond_to_price(current_price=0.13, average_price=0.10, demand=40, solar=0, battery_level=30)

    assert response.action == "reduce_load"
    assert response.potential_savings == pytest.approx(0.52)


def test_normal_price_maintains():
    response = respond_to_price(current_price=0.10, average_price=0.10, demand=40, solar=0, battery_level=30)

    assert response.action == "maintain"
    assert response.potential_savings == 0.0
    assert response.recommendation


def test_non_positive_average_price_raises():
    with pytest.raises(ValueError):
        respond_to_price(current_price=0.1, average_price=0.0, demand=10, solar=0, battery_level=10)
