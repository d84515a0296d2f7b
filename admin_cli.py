"""
Aion View - CLI Admin
Ferramenta de linha de comando para administrar usuários e dados (acesso direto ao banco)

Uso:
    python admin_cli.py create-admin [email] [senha] [nome]
    python admin_cli.py set-password <email> <senha>
    python admin_cli.py unlock <email>
    python admin_cli.py show <email>
    python admin_cli.py diagnose [email]
    python admin_cli.py add-user <email> <nome> [perfil] [senha]
    python admin_cli.py list-sectors
    python admin_cli.py generate-mocks [--seed N]
    python admin_cli.py seed-db
    python admin_cli.py clear-cache
"""
import asyncio
import logging
import sys
from datetime import datetime
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from aion_view.core import settings
from aion_view.core.errors import AionError
from aion_view.database import AsyncSessionLocal, Base, engine
from aion_view.services import accounts, cache_service, mock_data

logger = logging.getLogger("admin_cli")


def _fmt(value) -> str:
    if value is None:
        return "-"
    if isinstance(value, datetime):
        return value.strftime("%d/%m/%Y %H:%M:%S")
    return str(value)


async def cmd_create_admin(db: AsyncSession, email: str, password: str, name: str):
    """Cria admin ou redefine senha/perfil de um existente"""
    user, created = await accounts.create_or_update_admin(db, email, password, name)
    if created:
        print("\n✓ Administrador criado!")
    else:
        print("\n✓ Usuário existente atualizado para administrador (senha redefinida)")
    print(f"  Email: {user.email}")
    print(f"  Nome: {user.name}")
    print(f"  Perfil: {user.role}")


async def cmd_set_password(db: AsyncSession, email: str, password: str):
    user = await accounts.set_password(db, email, password)
    print(f"\n✓ Senha alterada para {user.email} (tentativas zeradas, bloqueio removido)")


async def cmd_unlock(db: AsyncSession, email: str):
    user = await accounts.get_user_by_email(db, email)
    if user:
        print(f"\n  Antes: tentativas={user.login_attempts} bloqueado_até={_fmt(user.locked_until)}")
    user = await accounts.unlock_user(db, email)
    print(f"✓ Usuário desbloqueado: {user.email}")
    print(f"  Depois: tentativas={user.login_attempts} bloqueado_até={_fmt(user.locked_until)}")


async def cmd_show(db: AsyncSession, email: str):
    """Mostra os dados do usuário"""
    user = await accounts.get_user_by_email(db, email)
    if not user:
        raise AionError(f"Usuário não encontrado: {email}", code="NOT_FOUND")

    print(f"\n{'='*50}")
    print(f"  ID:            {user.id}")
    print(f"  Email:         {user.email}")
    print(f"  Nome:          {user.name}")
    print(f"  Perfil:        {user.role}")
    print(f"  Ativo:         {'Sim' if user.active else 'Não'}")
    print(f"  Tentativas:    {user.login_attempts}")
    print(f"  Bloqueado até: {_fmt(user.locked_until)}")
    print(f"  Último login:  {_fmt(user.last_login)}")
    print(f"  Sessões:       {len(user.sessions or [])}")
    sectors = ", ".join(s.sector_name or str(s.sector_id) for s in user.sectors) or "-"
    print(f"  Setores:       {sectors}")
    print(f"{'='*50}")


async def cmd_diagnose(db: AsyncSession, email: str = None):
    """Diagnóstico de login de um usuário, ou status de todos"""
    if email:
        user = await accounts.get_user_by_email(db, email)
        if not user:
            raise AionError(f"Usuário não encontrado: {email}", code="NOT_FOUND")

        report = accounts.diagnose_user(user)
        print(f"\nDiagnóstico de {report['email']}: {report['status']}")
        if not report["problems"]:
            print("  ✓ Nenhum problema encontrado")
        for item in report["problems"]:
            print(f"  ✗ {item['problem']}")
            print(f"    Correção: {item['fix']}")
        return

    users = await accounts.list_users(db)
    print(f"\n{'='*80}")
    print(f"{'Email':<35} | {'Perfil':<8} | {'Tentativas':<10} | {'Status':<18}")
    print(f"{'='*80}")
    for user in users:
        report = accounts.diagnose_user(user)
        print(f"{user.email[:35]:<35} | {user.role:<8} | {report['login_attempts']:<10} | {report['status']:<18}")
    print(f"\nTotal: {len(users)} usuários")


async def cmd_add_user(db: AsyncSession, email: str, name: str, role: str = "comum", password: str = None):
    user = await accounts.create_user(db, email=email, name=name, role=role, password=password)
    print("\n✓ Usuário criado!")
    print(f"  Email: {user.email}")
    print(f"  Perfil: {user.role}")
    if not password:
        print(f"  Senha padrão: {settings.DEFAULT_USER_PASSWORD}")


async def cmd_list_sectors(db: AsyncSession):
    sectors = await accounts.list_sectors(db)
    print(f"\n{'ID':<8} | Setor")
    print(f"{'='*40}")
    for s in sectors:
        print(f"{s['sector_id']:<8} | {s['sector_name'] or '-'}")
    print(f"\nTotal: {len(sectors)} setores")


async def cmd_seed_db(db: AsyncSession):
    counts = await mock_data.seed_database(db)
    print("\n✓ Seed concluído")
    for key, value in counts.items():
        print(f"  {key}: {value}")


async def cmd_clear_cache(db: AsyncSession):
    removed = await cache_service.clear_cache(db)
    print(f"\n✓ Cache limpo ({removed} entradas)")


def cmd_generate_mocks(seed: int = None):
    target = mock_data.write_mock_files(seed=seed)
    print(f"\n✓ Mocks gerados em {target}")


def print_help():
    print("""
Aion View - CLI Admin
=====================

Comandos disponíveis:

  python admin_cli.py create-admin [email] [senha] [nome]   - Criar/atualizar administrador
  python admin_cli.py set-password <email> <senha>          - Alterar senha (também desbloqueia)
  python admin_cli.py unlock <email>                        - Desbloquear conta
  python admin_cli.py show <email>                          - Ver dados do usuário
  python admin_cli.py diagnose [email]                      - Diagnóstico de login
  python admin_cli.py add-user <email> <nome> [perfil] [senha]
                                                            - Criar usuário
                                                              Perfis: admin, gerente, comum
  python admin_cli.py list-sectors                          - Listar setores dos usuários

  python admin_cli.py generate-mocks [--seed N]             - Gerar arquivos JSON em ./mocks
  python admin_cli.py seed-db                               - Popular o banco com dados mock
  python admin_cli.py clear-cache                           - Limpar cache HTTP

Exemplos:
  python admin_cli.py create-admin admin@hospital.com.br NovaSenha123 "Maria Admin"
  python admin_cli.py unlock joao@hospital.com.br
  python admin_cli.py add-user ana@hospital.com.br "Ana Souza" gerente
""")


async def dispatch(db: AsyncSession, argv: List[str]) -> int:
    """Executa o comando; retorna o exit code"""
    cmd = argv[0].lower()
    args = argv[1:]

    try:
        if cmd == "create-admin":
            email = args[0] if len(args) > 0 else settings.DEFAULT_ADMIN_EMAIL
            password = args[1] if len(args) > 1 else settings.DEFAULT_ADMIN_PASSWORD
            name = args[2] if len(args) > 2 else settings.DEFAULT_ADMIN_NAME
            await cmd_create_admin(db, email, password, name)
        elif cmd == "set-password" and len(args) >= 2:
            await cmd_set_password(db, args[0], args[1])
        elif cmd == "unlock" and len(args) >= 1:
            await cmd_unlock(db, args[0])
        elif cmd == "show" and len(args) >= 1:
            await cmd_show(db, args[0])
        elif cmd == "diagnose":
            await cmd_diagnose(db, args[0] if args else None)
        elif cmd == "add-user" and len(args) >= 2:
            role = args[2] if len(args) > 2 else "comum"
            password = args[3] if len(args) > 3 else None
            await cmd_add_user(db, args[0], args[1], role, password)
        elif cmd == "list-sectors":
            await cmd_list_sectors(db)
        elif cmd == "seed-db":
            await cmd_seed_db(db)
        elif cmd == "clear-cache":
            await cmd_clear_cache(db)
        else:
            print(f"Comando desconhecido ou argumentos faltando: {' '.join(argv)}")
            print_help()
            return 1
    except AionError as e:
        print(f"✗ Erro: {e.message}")
        return 1
    except Exception as e:
        logger.error(f"Erro ao executar {cmd}: {e}", exc_info=True)
        print(f"✗ Erro: {e}")
        return 1

    return 0


async def run(argv: List[str]) -> int:
    async with engine.begin() as conn:
        import aion_view.models  # noqa: F401 (registra os models no metadata)
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        code = await dispatch(db, argv)

    await engine.dispose()
    return code


def main(argv: List[str] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv

    if not argv or argv[0].lower() == "help":
        print_help()
        return 0

    if argv[0].lower() == "generate-mocks":
        seed = None
        if "--seed" in argv:
            try:
                seed = int(argv[argv.index("--seed") + 1])
            except (IndexError, ValueError):
                print("Uso: generate-mocks [--seed N]")
                return 1
        try:
            cmd_generate_mocks(seed)
        except OSError as e:
            print(f"✗ Erro ao gravar mocks: {e}")
            return 1
        return 0

    return asyncio.run(run(argv))


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    sys.exit(main())
