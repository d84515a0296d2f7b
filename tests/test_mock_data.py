"""
Tests for the deterministic mock data generator.
"""
import json

from sqlalchemy import func, select

from aion_view.models import Equipment, EquipmentFlag, EquipmentKpiMonthly, WorkOrder
from aion_view.services import mock_data


class TestGenerateEquipment:
    def test_same_seed_same_data(self):
        assert mock_data.generate_equipment(30, seed=7) == mock_data.generate_equipment(30, seed=7)

    def test_imaging_first_and_sequential_ids(self):
        items = mock_data.generate_equipment(20, seed=1)

        assert len(items) == 20
        assert [e["id"] for e in items] == list(range(1001, 1021))
        assert items[0]["tag"] == "RADIO-CT-01"
        assert all(e["criticality"] == "Alta" for e in items[:len(mock_data.IMAGING_EQUIPMENT)])

    def test_lifecycle_dates(self):
        for item in mock_data.generate_equipment(20, seed=3):
            assert item["manufacture_date"] <= item["acquisition_date"] <= item["installation_date"]
            assert item["end_of_life"].year == item["acquisition_date"].year + 7
            assert item["end_of_service"].year == item["acquisition_date"].year + 10
            assert len(item["anvisa_registration"]) == 11

    def test_count_smaller_than_imaging(self):
        assert len(mock_data.generate_equipment(3, seed=1)) == 3


class TestGenerateKpisAndOrders:
    def test_uptime_range(self):
        equipment = mock_data.generate_equipment(5, seed=2)
        kpis = mock_data.generate_uptime_kpis(equipment, 2024, seed=2)

        assert set(kpis) == {str(e["id"]) for e in equipment}
        for items in kpis.values():
            assert [k.month for k in items] == list(range(1, 13))
            assert all(95.0 <= k.uptime_percent <= 99.0 for k in items)
            assert all(round(k.uptime_percent, 2) == k.uptime_percent for k in items)

    def test_work_orders(self):
        equipment = mock_data.generate_equipment(10, seed=4)
        orders = mock_data.generate_work_orders(equipment, count=40, year=2024, seed=4)

        assert len(orders) == 40
        assert all(o["opened_at"].year == 2024 for o in orders)
        assert all(o["status"] in ("Aberta", "Fechada") for o in orders)
        assert all((o["closed_at"] is None) == (o["status"] == "Aberta") for o in orders)

    def test_no_equipment(self):
        assert mock_data.generate_work_orders([], year=2024) == []


class TestWriteAndSeed:
    def test_write_mock_files(self, tmp_path):
        target = mock_data.write_mock_files(str(tmp_path), count=20, year=2024, seed=5)

        equipment = json.loads((target / "equipamentos.json").read_text(encoding="utf-8"))
        kpis = json.loads((target / "equipment_kpis.json").read_text(encoding="utf-8"))

        assert len(equipment) == 20
        assert set(kpis["monthlyKpis"]) == {"1001", "1002", "1003"}
        assert (target / "ordens_servico.json").exists()

    async def test_seed_database(self, db):
        counts = await mock_data.seed_database(db, count=20, year=2024, seed=5)

        assert counts["equipment"] == 20
        assert counts["kpis"] == 3 * 12
        assert await db.scalar(select(func.count()).select_from(Equipment)) == 20
        assert await db.scalar(select(func.count()).select_from(EquipmentKpiMonthly)) == 36
        assert await db.scalar(select(func.count()).select_from(WorkOrder)) == counts["work_orders"]
        flags = (await db.execute(select(EquipmentFlag.equipment_id))).scalars().all()
        assert sorted(flags) == [1001, 1002, 1003]

    async def test_seed_is_skipped_when_populated(self, db):
        await mock_data.seed_database(db, count=5, year=2024, seed=5)
        counts = await mock_data.seed_database(db, count=5, year=2024, seed=5)
        assert counts["equipment"] == 0
