"""
Tests for weekly rounds (week normalization, OS counters and uniqueness).
"""
from datetime import datetime, timedelta, timezone

import pytest

from aion_view.core.errors import NotFoundError, ValidationError
from aion_view.models import Investment, WorkOrder
from aion_view.services import purchases, rounds


@pytest.fixture
async def work_orders(db):
    orders = [
        WorkOrder(code=1, number="OS-1", sector="UTI 1", status="Aberta", maintenance_type="Corretiva",
                  equipment_name="Ventilador", opened_at=datetime(2024, 3, 1)),
        WorkOrder(code=2, number="OS-2", sector="UTI 1", status="Fechada", maintenance_type="Corretiva",
                  equipment_name="Monitor", opened_at=datetime(2024, 3, 2)),
        WorkOrder(code=3, number="OS-3", sector="UTI 2", status="Aberta", maintenance_type="Preventiva",
                  equipment_name="Bomba", opened_at=datetime(2024, 3, 3)),
        WorkOrder(code=4, number="OS-4", sector="UTI 2", status="Aberta", maintenance_type="Corretivo",
                  equipment_name="Desfibrilador", opened_at=datetime(2024, 3, 4)),
    ]
    db.add_all(orders)
    await db.commit()
    return orders


def round_data(**overrides):
    data = {
        "sector_id": 1,
        "sector_name": "UTI 1",
        "week_start": datetime(2024, 3, 6, 15, 30),
        "responsible_name": "João",
    }
    data.update(overrides)
    return data


class TestNormalizeWeekStart:
    def test_monday_midnight(self):
        assert rounds.normalize_week_start(datetime(2024, 3, 6, 15, 30)) == datetime(2024, 3, 4)

    def test_monday_is_kept(self):
        assert rounds.normalize_week_start(datetime(2024, 3, 4)) == datetime(2024, 3, 4)

    def test_sunday_goes_back(self):
        assert rounds.normalize_week_start(datetime(2024, 3, 10, 23, 59)) == datetime(2024, 3, 4)

    def test_timezone_converted_to_utc(self):
        # Segunda 01:00 em UTC+3 = domingo 22:00 UTC
        value = datetime(2024, 3, 11, 1, 0, tzinfo=timezone(timedelta(hours=3)))
        assert rounds.normalize_week_start(value) == datetime(2024, 3, 4)


class TestCounters:
    async def test_count_work_orders(self, work_orders):
        assert rounds.count_work_orders(work_orders, [1, 2, 4, 99]) == {"open": 2, "closed": 1}

    async def test_summary_by_sector(self, work_orders):
        assert rounds.rounds_summary_by_sector(work_orders) == [
            {"sector_name": "UTI 1", "open_os": 1, "closed_os": 1},
            {"sector_name": "UTI 2", "open_os": 2, "closed_os": 0},
        ]


class TestRoundCrud:
    """Tests for creating, updating and deleting rounds."""

    async def test_create(self, db, work_orders, common_user):
        round_ = await rounds.create_round(db, round_data(os_ids=[1, 2], responsible_name="joão"))

        assert round_.week_start == datetime(2024, 3, 4)
        assert round_.open_os_count == 1
        assert round_.closed_os_count == 1
        assert round_.responsible_id == common_user.id

    async def test_missing_fields(self, db):
        with pytest.raises(ValidationError):
            await rounds.create_round(db, round_data(responsible_name=""))

    async def test_duplicate_week(self, db):
        await rounds.create_round(db, round_data())
        with pytest.raises(ValidationError) as exc:
            await rounds.create_round(db, round_data(week_start=datetime(2024, 3, 8)))

        assert exc.value.code == "DUPLICATE_ROUND"
        assert exc.value.message == rounds.DUPLICATE_ROUND_MESSAGE

    async def test_same_week_other_sector(self, db):
        await rounds.create_round(db, round_data())
        other = await rounds.create_round(db, round_data(sector_id=2, sector_name="UTI 2"))
        assert other.week_start == datetime(2024, 3, 4)

    async def test_update_recounts(self, db, work_orders):
        round_ = await rounds.create_round(db, round_data(os_ids=[1]))
        updated = await rounds.update_round(db, round_.id, {"os_ids": [2, 4], "notes": "ok"})

        assert updated.open_os_count == 1
        assert updated.closed_os_count == 1
        assert updated.notes == "ok"

    async def test_update_into_taken_week(self, db):
        await rounds.create_round(db, round_data())
        second = await rounds.create_round(db, round_data(week_start=datetime(2024, 3, 13)))

        with pytest.raises(ValidationError):
            await rounds.update_round(db, second.id, {"week_start": datetime(2024, 3, 5)})

    async def test_links_investments(self, db):
        investment = Investment(title="Novo monitor", sector_id=1)
        db.add(investment)
        await db.commit()

        round_ = await rounds.create_round(db, round_data(investment_ids=[investment.id]))
        linked = await purchases.investments_from_round(db, round_.id)
        assert [i.id for i in linked] == [investment.id]

        await rounds.update_round(db, round_.id, {"investment_ids": []})
        await db.refresh(investment)
        assert investment.round_id is None

    async def test_delete(self, db):
        round_ = await rounds.create_round(db, round_data())
        await rounds.delete_round(db, round_.id)
        with pytest.raises(NotFoundError):
            await rounds.get_round(db, round_.id)

    async def test_list_newest_first(self, db):
        await rounds.create_round(db, round_data(week_start=datetime(2024, 3, 4)))
        await rounds.create_round(db, round_data(week_start=datetime(2024, 3, 18)))

        items = await rounds.list_rounds(db, sector_id=1)
        assert [r.week_start for r in items] == [datetime(2024, 3, 18), datetime(2024, 3, 4)]


class TestRoundQueries:
    async def test_available_work_orders(self, db, work_orders):
        orders = await rounds.available_work_orders(db)
        assert [o.code for o in orders] == [4, 1]

        orders = await rounds.available_work_orders(db, sector="UTI 1")
        assert [o.code for o in orders] == [1]

    async def test_round_ai_summary_without_key(self, db, work_orders):
        round_ = await rounds.create_round(db, round_data(os_ids=[1, 2]))
        summary = await rounds.round_ai_summary(db, round_.id)

        assert summary["round_id"] == round_.id
        assert "UTI 1" in summary["summary"]
        assert summary["insights"][0] == "Taxa de fechamento de OS: 50.0%"

    async def test_weekly_summary(self, db):
        await rounds.create_round(db, round_data())
        await rounds.create_round(db, round_data(sector_id=2, sector_name="UTI 2"))

        result = await rounds.weekly_summary(db, datetime(2024, 3, 7))
        assert result["week_start"] == "2024-03-04T00:00:00"
        assert result["round_count"] == 2
        assert "Total de Rondas: 2" in result["summary"]

    async def test_weekly_summary_empty(self, db):
        result = await rounds.weekly_summary(db, datetime(2024, 3, 7))
        assert result["summary"] == "Nenhuma ronda encontrada para o período."
