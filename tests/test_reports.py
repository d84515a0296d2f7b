"""
Tests for inventory CSV/PDF export.
"""
import codecs

from aion_view.services import reports


ITEMS = [
    {
        "id": 1001,
        "tag": "RADIO-CT-01",
        "name": "Tomógrafo Computadorizado",
        "manufacturer": "Siemens",
        "model": "SOMATOM go.Now",
        "sector": "Radiologia",
        "criticality": "Alta",
        "status": "Ativo",
        "acquisition_date": "2022-05-10T00:00:00",
        "end_of_life": "2029-05-10T00:00:00",
        "end_of_service": None,
        "replacement_cost": 2500000.0,
    },
]


class TestInventoryCsv:
    def test_bom_and_delimiter(self):
        content = reports.inventory_to_csv(ITEMS)

        assert content.startswith(codecs.BOM_UTF8)
        lines = content.decode("utf-8-sig").splitlines()
        assert lines[0].split(";")[:3] == ["ID", "Tag", "Equipamento"]
        assert len(lines) == 2

    def test_brazilian_formats(self):
        row = reports.inventory_to_csv(ITEMS).decode("utf-8-sig").splitlines()[1].split(";")

        assert row[2] == "Tomógrafo Computadorizado"
        assert row[8] == "10/05/2022"
        assert row[10] == ""
        assert row[11] == "R$ 2.500.000,00"

    def test_empty_inventory(self):
        lines = reports.inventory_to_csv([]).decode("utf-8-sig").splitlines()
        assert len(lines) == 1


class TestInventoryPdf:
    def test_generates_pdf(self):
        content = reports.inventory_to_pdf(ITEMS * 30, title="Inventário Radiologia")
        assert content.startswith(b"%PDF")

    def test_empty_inventory(self):
        assert reports.inventory_to_pdf([]).startswith(b"%PDF")
