"""
Tests for uptime KPIs (derivação de horas, agregação e persistência).
"""
import pytest

from aion_view.core import settings
from aion_view.models import Equipment
from aion_view.services import uptime_kpi
from aion_view.services.uptime_kpi import kpi_from_availability


@pytest.fixture
async def critical_equipment(db):
    items = [
        Equipment(id=1001, tag="RADIO-CT-01", name="Tomógrafo Computadorizado", status="Ativo"),
        Equipment(id=1002, tag="RADIO-RM-01", name="Ressonância Magnética", status="Ativo"),
    ]
    db.add_all(items)
    await db.commit()
    return items


class TestKpiFromAvailability:
    """Tests for deriving running/stopped hours."""

    def test_derives_hours_from_standard_month(self):
        kpi = kpi_from_availability(1001, 2024, 3, 98.0)

        assert kpi.total_hours == settings.HOURS_PER_MONTH
        assert kpi.running_hours == pytest.approx(0.98 * settings.HOURS_PER_MONTH)
        assert kpi.stopped_hours == pytest.approx(0.02 * settings.HOURS_PER_MONTH)
        assert kpi.running_hours + kpi.stopped_hours == pytest.approx(kpi.total_hours)

    def test_missing_tag_and_name(self):
        kpi = kpi_from_availability(1001, 2024, 3, 98.0, tag=None, equipment=None)
        assert kpi.tag == "N/A"
        assert kpi.equipment == "N/A"


class TestAggregateUptime:
    """Tests for month aggregation weighted by hours."""

    def test_weighted_by_hours(self):
        kpis = [
            kpi_from_availability(1, 2024, 1, 100.0, total_hours=100),
            kpi_from_availability(2, 2024, 1, 50.0, total_hours=300),
        ]
        [aggregated] = uptime_kpi.aggregate_uptime(kpis)

        # (100 + 150) / 400
        assert aggregated.uptime_percent == pytest.approx(62.5)
        assert aggregated.equipment_count == 2
        assert aggregated.running_hours_total == pytest.approx(250)
        assert aggregated.stopped_hours_total == pytest.approx(150)

    def test_sorted_by_year_and_month(self):
        kpis = [
            kpi_from_availability(1, 2024, 3, 97.0),
            kpi_from_availability(1, 2023, 12, 96.0),
            kpi_from_availability(1, 2024, 1, 98.0),
        ]
        result = uptime_kpi.aggregate_uptime(kpis)
        assert [(a.year, a.month) for a in result] == [(2023, 12), (2024, 1), (2024, 3)]

    def test_zero_hours(self):
        [aggregated] = uptime_kpi.aggregate_uptime([kpi_from_availability(1, 2024, 1, 0, total_hours=0)])
        assert aggregated.uptime_percent == 0

    def test_empty(self):
        assert uptime_kpi.aggregate_uptime([]) == []


class TestUptimePersistence:
    """Tests for saving and reading KPIs from the database."""

    async def test_save_and_read(self, db, critical_equipment):
        await uptime_kpi.save_equipment_uptime_kpi(db, kpi_from_availability(1001, 2024, 2, 97.5))
        await uptime_kpi.save_equipment_uptime_kpi(db, kpi_from_availability(1001, 2024, 1, 98.0))

        kpis = await uptime_kpi.get_equipment_uptime_kpis(db, 1001, 2024)

        assert [k.month for k in kpis] == [1, 2]
        assert kpis[0].tag == "RADIO-CT-01"
        assert kpis[0].equipment == "Tomógrafo Computadorizado"

    async def test_save_replaces_same_month(self, db, critical_equipment):
        await uptime_kpi.save_equipment_uptime_kpi(db, kpi_from_availability(1001, 2024, 5, 95.0))
        await uptime_kpi.save_equipment_uptime_kpi(db, kpi_from_availability(1001, 2024, 5, 99.0))

        kpis = await uptime_kpi.get_equipment_uptime_kpis(db, 1001, 2024)
        assert len(kpis) == 1
        assert kpis[0].uptime_percent == 99.0

    async def test_filters_by_year(self, db, critical_equipment):
        await uptime_kpi.save_equipment_uptime_kpi(db, kpi_from_availability(1001, 2023, 5, 95.0))
        await uptime_kpi.save_equipment_uptime_kpi(db, kpi_from_availability(1001, 2024, 5, 96.0))

        assert len(await uptime_kpi.get_equipment_uptime_kpis(db, 1001, 2024)) == 1
        assert len(await uptime_kpi.get_equipment_uptime_kpis(db, 1001)) == 2

    async def test_aggregated_for_critical_ids(self, db, critical_equipment):
        await uptime_kpi.save_equipment_uptime_kpi(db, kpi_from_availability(1001, 2024, 1, 98.0))
        await uptime_kpi.save_equipment_uptime_kpi(db, kpi_from_availability(1002, 2024, 1, 96.0))

        [aggregated] = await uptime_kpi.get_aggregated_uptime_kpi(db, [1001, 1002], 2024)
        assert aggregated.uptime_percent == pytest.approx(97.0)
        assert aggregated.equipment_count == 2

    async def test_no_critical_ids(self, db):
        assert await uptime_kpi.get_all_critical_uptime_kpis(db, [], 2024) == []


class TestUptimeMockFile:
    """Tests for the JSON file used in mock mode."""

    async def test_save_and_read_in_mock_mode(self, mock_mode):
        await uptime_kpi.save_equipment_uptime_kpi(None, kpi_from_availability(7, 2024, 4, 97.0))
        await uptime_kpi.save_equipment_uptime_kpi(None, kpi_from_availability(7, 2024, 4, 98.0))

        kpis = await uptime_kpi.get_equipment_uptime_kpis(None, 7, 2024)
        assert len(kpis) == 1
        assert kpis[0].uptime_percent == 98.0
        assert (mock_mode / "equipment_kpis.json").exists()

    async def test_missing_file_is_empty(self, mock_mode):
        assert await uptime_kpi.get_equipment_uptime_kpis(None, 7, 2024) == []

    def test_invalid_file_is_empty(self, tmp_path):
        path = tmp_path / "equipment_kpis.json"
        path.write_text("{invalid", encoding="utf-8")
        assert uptime_kpi.read_mock_kpis(path) == {}
