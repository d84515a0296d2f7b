"""
Tests for the maintenance cost indicator.
"""
from datetime import datetime
from types import SimpleNamespace

import pytest

from aion_view.services.maintenance_cost import (
    calculate_maintenance_cost_evolution,
    calculate_maintenance_cost_indicator,
    classify,
    get_equipment_costs,
    parse_brazilian_currency,
    total_replacement_value,
)


def make_equipment(id, name, replacement_cost, status="Ativo", model=None, manufacturer=None, tag=None):
    return SimpleNamespace(
        id=id,
        name=name,
        model=model,
        manufacturer=manufacturer,
        tag=tag or f"TAG-{id}",
        replacement_cost=replacement_cost,
        status=status,
        is_active=status.lower() == "ativo",
    )


def make_order(cost, opened_at, equipment_id=None, equipment_name=None, model=None, manufacturer=None):
    return SimpleNamespace(
        equipment_id=equipment_id,
        equipment_name=equipment_name,
        equipment_model=model,
        equipment_manufacturer=manufacturer,
        cost=cost,
        opened_at=opened_at,
    )


def make_contract(annual_value, start, end, active=True):
    return SimpleNamespace(annual_value=annual_value, start_date=start, end_date=end, active=active)


class TestParseBrazilianCurrency:
    """Tests for Brazilian currency parsing."""

    @pytest.mark.parametrize("value,expected", [
        ("4.500,00", 4500.0),
        ("R$ 1.234,56", 1234.56),
        ("4500.00", 4500.0),
        ("", 0.0),
        (None, 0.0),
        ("abc", 0.0),
        (1200, 1200.0),
    ])
    def test_parse(self, value, expected):
        assert parse_brazilian_currency(value) == pytest.approx(expected)


class TestClassify:
    def test_ranges(self):
        assert classify(3.9, 4.0) == "dentro"
        assert classify(4.0, 4.0) == "acima"
        assert classify(5.9, 4.0) == "acima"
        assert classify(6.0, 4.0) == "critico"


class TestEquipmentCosts:
    """Tests for summing work order costs per equipment."""

    def test_sums_by_equipment_id(self):
        equipment = [make_equipment(1, "Ultrassom", 100000)]
        orders = [
            make_order("1.000,00", datetime(2024, 1, 10), equipment_id=1),
            make_order(500, datetime(2024, 3, 1), equipment_id=1),
        ]
        costs = get_equipment_costs(orders, equipment)

        assert costs[1].total_spent == pytest.approx(1500.0)
        assert costs[1].work_order_count == 2
        assert costs[1].last_work_order == datetime(2024, 3, 1).isoformat()

    def test_matches_by_identity_then_name(self):
        equipment = [
            make_equipment(1, "Ultrassom", 100000, model="LOGIQ", manufacturer="GE"),
            make_equipment(2, "Ultrassom", 100000, model="EPIQ", manufacturer="Philips"),
            make_equipment(3, "Desfibrilador", 20000),
        ]
        orders = [
            make_order(100, datetime(2024, 1, 1), equipment_name="Ultrassom", model="EPIQ", manufacturer="Philips"),
            make_order(200, datetime(2024, 1, 1), equipment_name="Desfibrilador"),
            make_order(300, datetime(2024, 1, 1), equipment_name="Desconhecido"),
        ]
        costs = get_equipment_costs(orders, equipment)

        assert set(costs) == {2, 3}
        assert costs[2].total_spent == 100
        assert costs[3].total_spent == 200

    def test_duplicate_equipment_keeps_first_match(self):
        equipment = [
            make_equipment(7, "Monitor", 30000, model="IntelliVue", manufacturer="Philips"),
            make_equipment(8, "Monitor", 30000, model="IntelliVue", manufacturer="Philips"),
            make_equipment(9, "Bomba de Infusão", 8000),
            make_equipment(10, "Bomba de Infusão", 8000),
        ]
        orders = [
            make_order(100, datetime(2024, 1, 1), equipment_name="Monitor", model="IntelliVue",
                       manufacturer="Philips"),
            make_order(50, datetime(2024, 1, 1), equipment_name="Bomba de Infusão"),
        ]
        costs = get_equipment_costs(orders, equipment)

        assert set(costs) == {7, 9}

    def test_replacement_value_only_active(self):
        equipment = [
            make_equipment(1, "A", "100.000,00"),
            make_equipment(2, "B", 50000, status="Inativo"),
        ]
        assert total_replacement_value(equipment) == pytest.approx(100000.0)


class TestMaintenanceCostIndicator:
    """Tests for the annual indicator and monthly evolution."""

    def test_annual_indicator(self):
        equipment = [make_equipment(1, "Tomógrafo", 1000000)]
        orders = [make_order(10000, datetime(2024, 2, 1), equipment_id=1)]
        contracts = [
            make_contract(20000, datetime(2024, 1, 1), datetime(2024, 12, 31)),
            make_contract(99999, datetime(2024, 1, 1), datetime(2024, 12, 31), active=False),
            make_contract(99999, datetime(2020, 1, 1), datetime(2021, 12, 31)),
        ]

        indicator = calculate_maintenance_cost_indicator(2024, contracts, orders, equipment)

        assert indicator.contracts_value == pytest.approx(20000)
        assert indicator.work_orders_value == pytest.approx(10000)
        assert indicator.total_maintenance_cost == pytest.approx(30000)
        assert indicator.annual_percent == pytest.approx(3.0)
        assert indicator.status == "dentro"
        assert indicator.target_difference == pytest.approx(-1.0)

    def test_no_replacement_value(self):
        indicator = calculate_maintenance_cost_indicator(2024, [], [], [])
        assert indicator.annual_percent == 0
        assert indicator.status == "dentro"

    def test_evolution_accumulates_work_orders(self):
        equipment = [make_equipment(1, "Tomógrafo", 1200000)]
        orders = [
            make_order(1200, datetime(2024, 1, 15), equipment_id=1),
            make_order(2400, datetime(2024, 3, 15), equipment_id=1),
            make_order(9999, datetime(2023, 3, 15), equipment_id=1),
        ]
        contracts = [make_contract(12000, datetime(2024, 1, 1), datetime(2024, 6, 30))]

        evolution = calculate_maintenance_cost_evolution(2024, contracts, orders, equipment)

        assert len(evolution) == 12
        assert [e.month for e in evolution] == list(range(1, 13))
        assert evolution[0].work_orders_value == pytest.approx(1200)
        assert evolution[1].work_orders_value == pytest.approx(1200)
        assert evolution[2].work_orders_value == pytest.approx(3600)
        assert evolution[0].contracts_value == pytest.approx(1000)
        assert evolution[6].contracts_value == 0
