"""
Tests for admin_cli commands (direct database access).
"""
from datetime import datetime, timedelta

import admin_cli
from aion_view.core import settings, verify_password
from aion_view.services import accounts, cache_service


class TestDispatch:
    """Tests for command dispatch and exit codes."""

    async def test_create_admin_defaults(self, db, capsys):
        assert await admin_cli.dispatch(db, ["create-admin"]) == 0

        user = await accounts.get_user_by_email(db, settings.DEFAULT_ADMIN_EMAIL)
        assert user.role == "admin"
        assert verify_password(settings.DEFAULT_ADMIN_PASSWORD, user.password)
        assert "Administrador criado" in capsys.readouterr().out

    async def test_create_admin_resets_existing(self, db, common_user, capsys):
        assert await admin_cli.dispatch(db, ["create-admin", "joao@aion.com", "NovaSenha123"]) == 0

        user = await accounts.get_user_by_email(db, "joao@aion.com")
        assert user.role == "admin"
        assert verify_password("NovaSenha123", user.password)
        assert "senha redefinida" in capsys.readouterr().out

    async def test_unlock(self, db, common_user, capsys):
        common_user.login_attempts = 5
        common_user.locked_until = datetime.utcnow() + timedelta(minutes=10)
        await db.commit()

        assert await admin_cli.dispatch(db, ["unlock", "joao@aion.com"]) == 0
        assert common_user.login_attempts == 0
        assert "Antes: tentativas=5" in capsys.readouterr().out

    async def test_set_password(self, db, common_user):
        assert await admin_cli.dispatch(db, ["set-password", "joao@aion.com", "outra123"]) == 0
        assert verify_password("outra123", common_user.password)

    async def test_unknown_user_fails(self, db, capsys):
        assert await admin_cli.dispatch(db, ["unlock", "ninguem@aion.com"]) == 1
        assert "✗ Erro" in capsys.readouterr().out

        assert await admin_cli.dispatch(db, ["show", "ninguem@aion.com"]) == 1

    async def test_show_and_diagnose(self, db, common_user, capsys):
        assert await admin_cli.dispatch(db, ["show", "joao@aion.com"]) == 0
        assert await admin_cli.dispatch(db, ["diagnose", "joao@aion.com"]) == 0
        assert await admin_cli.dispatch(db, ["diagnose"]) == 0

        out = capsys.readouterr().out
        assert "João Silva" in out
        assert "Nenhum problema encontrado" in out
        assert "Total: 1 usuários" in out

    async def test_add_user_and_duplicate(self, db, capsys):
        assert await admin_cli.dispatch(db, ["add-user", "ana@aion.com", "Ana", "gerente"]) == 0
        assert await admin_cli.dispatch(db, ["add-user", "ana@aion.com", "Ana"]) == 1
        assert await admin_cli.dispatch(db, ["add-user", "bia@aion.com", "Bia", "root"]) == 1

        user = await accounts.get_user_by_email(db, "ana@aion.com")
        assert user.role == "gerente"
        assert "Senha padrão" in capsys.readouterr().out

    async def test_list_sectors(self, db, capsys):
        await accounts.create_user(
            db, email="ana@aion.com", name="Ana", sectors=[{"sector_id": 4, "sector_name": "Radiologia"}]
        )
        assert await admin_cli.dispatch(db, ["list-sectors"]) == 0
        assert "Radiologia" in capsys.readouterr().out

    async def test_seed_and_clear_cache(self, db, monkeypatch):
        monkeypatch.setattr(settings, "MOCK_SEED", 11)
        assert await admin_cli.dispatch(db, ["seed-db"]) == 0

        await cache_service.set_cache(db, "rounds:list:{}", [])
        assert await admin_cli.dispatch(db, ["clear-cache"]) == 0
        assert await cache_service.get_cache(db, "rounds:list:{}") is None

    async def test_missing_arguments(self, db, capsys):
        assert await admin_cli.dispatch(db, ["set-password", "joao@aion.com"]) == 1
        assert "Comando desconhecido" in capsys.readouterr().out


class TestMain:
    def test_help(self, capsys):
        assert admin_cli.main([]) == 0
        assert "Aion View - CLI Admin" in capsys.readouterr().out

    def test_generate_mocks(self, mock_mode):
        assert admin_cli.main(["generate-mocks", "--seed", "3"]) == 0
        assert (mock_mode / "equipamentos.json").exists()
        assert (mock_mode / "equipment_kpis.json").exists()

    def test_generate_mocks_invalid_seed(self):
        assert admin_cli.main(["generate-mocks", "--seed", "abc"]) == 1
