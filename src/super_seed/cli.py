"""CLI do Super Seed: opera o motor pela linha de comando."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any, Callable, Dict, Optional

from .app import SuperSeedClient, configure_logging, gateway_from_config
from .errors import SuperSeedError, ValidationError
from .models import Session
from .persistence import PersistenceStore
from .projection import FILTER_KEYS, SessionView
from .formatting import format_satoshis


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="super-seed",
        description="Cliente de compartilhamento com pagamento por peça.",
    )
    parser.add_argument("--debug", action="store_true", help="Ativa logs detalhados.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("listar", help="Lista as sessões do motor.")
    list_parser.add_argument("--status", choices=FILTER_KEYS, default="all")
    list_parser.add_argument("--busca", default="", help="Filtra pelo nome.")
    list_parser.add_argument("--json", action="store_true", help="Exibe a saída em JSON.")

    get_parser = subparsers.add_parser("baixar", help="Mostra o custo e inicia a transferência.")
    get_parser.add_argument("link")
    get_parser.add_argument("--sim", action="store_true", help="Confirma sem perguntar.")

    publish_parser = subparsers.add_parser("publicar", help="Compartilha um caminho local.")
    publish_parser.add_argument("caminho")
    publish_parser.add_argument("--preco", required=True, help="Satoshis por peça.")

    toggle_parser = subparsers.add_parser("alternar", help="Pausa ou retoma uma sessão.")
    toggle_parser.add_argument("id")

    remove_parser = subparsers.add_parser("remover", help="Remove uma sessão.")
    remove_parser.add_argument("id")
    remove_parser.add_argument("--apagar-arquivos", action="store_true")
    remove_parser.add_argument("--sim", action="store_true", help="Confirma sem perguntar.")

    subparsers.add_parser("carteira", help="Sincroniza e mostra o saldo.")

    funds_parser = subparsers.add_parser("fundos", help="Solicita fundos para a carteira.")
    funds_parser.add_argument("valor")

    subparsers.add_parser("abrir-pasta", help="Abre a pasta de downloads.")
    subparsers.add_parser("observar", help="Acompanha as sessões até Ctrl+C.")
    subparsers.add_parser("config", help="Mostra configurações persistidas.")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    store = PersistenceStore()
    configure_logging(debug=args.debug, log_dir=store.state_dir)

    if args.command == "config":
        print(json.dumps(store.config, indent=2, ensure_ascii=False))
        return 0

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    client = SuperSeedClient(gateway_from_config(store.config), store.config)
    try:
        return asyncio.run(handler(client, args))
    except SuperSeedError as exc:
        print(f"Erro: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 0


# ----------------------------------------------------------------------
async def _cmd_listar(client: SuperSeedClient, args: argparse.Namespace) -> int:
    await client.registry.refresh()
    client.set_filter(args.status)
    client.set_search(args.busca)
    view = client.view()
    if args.json:
        print(json.dumps([session_to_dict(s) for s in view.sessions], indent=2, ensure_ascii=False))
        return 0
    _print_view(view)
    return 0


async def _cmd_baixar(client: SuperSeedClient, args: argparse.Namespace) -> int:
    preview = await client.acquire.submit(args.link)
    if preview is None:
        return 1
    print(f"{preview.name}  {preview.total_size_str}")
    print(
        f"{preview.total_piece_count} peças × {format_satoshis(preview.price_per_piece)}"
        f" = {preview.estimated_cost_str}"
    )
    if not (args.sim or _ask("Confirmar transferência?")):
        client.acquire.cancel()
        print("Cancelado.")
        return 0
    await client.acquire.confirm()
    print("Transferência iniciada.")
    return 0


async def _cmd_publicar(client: SuperSeedClient, args: argparse.Namespace) -> int:
    client.publish.use_path(args.caminho)
    client.publish.set_price(args.preco)
    link = await client.publish.create()
    print(link)
    return 0


async def _cmd_alternar(client: SuperSeedClient, args: argparse.Namespace) -> int:
    session = await _find_session(client, args.id)
    resumed = await client.controls.toggle_status(session)
    print(f"{'Retomada' if resumed else 'Pausada'}: {session.name}")
    return 0


async def _cmd_remover(client: SuperSeedClient, args: argparse.Namespace) -> int:
    session = await _find_session(client, args.id)
    request = client.controls.request_removal(session, delete_files=args.apagar_arquivos)
    if not (args.sim or _ask(request.message)):
        client.controls.dismiss_removal()
        print("Cancelado.")
        return 0
    await client.controls.confirm_removal()
    print(f"Removida: {session.name}")
    return 0


async def _cmd_carteira(client: SuperSeedClient, args: argparse.Namespace) -> int:
    wallet = await client.wallet.refresh_balance()
    print(f"Endereço: {wallet.address}")
    print(f"Saldo:    {wallet.balance_str}")
    return 0


async def _cmd_fundos(client: SuperSeedClient, args: argparse.Namespace) -> int:
    amount = await client.wallet.request_funds(args.valor)
    print(f"Solicitados {format_satoshis(amount)}; o saldo será atualizado pelo motor.")
    return 0


async def _cmd_abrir_pasta(client: SuperSeedClient, args: argparse.Namespace) -> int:
    await client.controls.open_storage_location()
    return 0


async def _cmd_observar(client: SuperSeedClient, args: argparse.Namespace) -> int:
    client.subscribe(_print_view)
    client.start()
    try:
        await client.registry.refresh()
        await asyncio.Event().wait()
    finally:
        client.stop()
    return 0


COMMANDS: Dict[str, Callable[[SuperSeedClient, argparse.Namespace], Any]] = {
    "listar": _cmd_listar,
    "baixar": _cmd_baixar,
    "publicar": _cmd_publicar,
    "alternar": _cmd_alternar,
    "remover": _cmd_remover,
    "carteira": _cmd_carteira,
    "fundos": _cmd_fundos,
    "abrir-pasta": _cmd_abrir_pasta,
    "observar": _cmd_observar,
}


# ----------------------------------------------------------------------
def session_to_dict(session: Session) -> Dict[str, Any]:
    return {
        "id": session.id,
        "contentId": session.content_id,
        "name": session.name,
        "status": session.status.value,
        "progress": round(session.progress, 2),
        "size": session.total_size,
        "sizeStr": session.total_size_str,
        "downloadSpeedStr": session.download_rate_str,
        "uploadSpeedStr": session.upload_rate_str,
        "peers": session.peer_count,
        "seeds": session.seed_count,
        "eta": session.eta,
        "satoshisEarned": session.satoshis_earned,
        "satoshisSpent": session.satoshis_spent,
        "pricePerPiece": session.price_per_piece,
        "addedAt": session.added_at.isoformat() if session.added_at else None,
    }


async def _find_session(client: SuperSeedClient, key: str) -> Session:
    await client.registry.refresh()
    matches = [
        session
        for session in client.registry.get_all()
        if session.id.startswith(key) or session.content_id.startswith(key)
    ]
    if len(matches) != 1:
        raise ValidationError(
            f"Nenhuma sessão com id {key!r}" if not matches else f"Id {key!r} é ambíguo"
        )
    return matches[0]


def _ask(question: str, reader: Optional[Callable[[str], str]] = None) -> bool:
    answer = (reader or input)(f"{question} [s/N] ")
    return answer.strip().lower() in {"s", "sim", "y", "yes"}


def _print_view(view: SessionView) -> None:
    if view.notice:
        print(f"! {view.notice}")
    if not view.sessions:
        print(view.empty_message)
    for session in view.sessions:
        print(_format_row(session))
    _print_totals(view)


def _format_row(session: Session) -> str:
    return (
        f"{session.id[:8]}  {session.status.value:<11}  "
        f"{session.progress:>5.1f}%  {session.download_rate_str:>11}  "
        f"{session.upload_rate_str:>11}  {session.name}"
    )


def _print_totals(view: SessionView) -> None:
    stats = view.stats
    print(
        f"↓ {stats.total_download_rate_str}  ↑ {stats.total_upload_rate_str}  "
        f"ativas: {stats.active_session_count}  peers: {stats.total_peer_count}  "
        f"ganho: {format_satoshis(view.total_earned)}  gasto: {format_satoshis(view.total_spent)}"
    )
    if view.wallet is not None:
        print(f"carteira: {view.wallet.balance_str}")


if __name__ == "__main__":
    raise SystemExit(main())
