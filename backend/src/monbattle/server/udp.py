from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Optional, Sequence, Set, Tuple

from monbattle.bootstrap import Services, build_services
from monbattle.config import Settings
from monbattle.core.dispatch import CommandDispatcher
from monbattle.logging_config import configure_logging

log = logging.getLogger(__name__)

ENCODING = "utf-8"


class BattleDatagramProtocol(asyncio.DatagramProtocol):
    """
    Одна датаграмма = один запрос, ответ уходит отправителю.
    Обработка синхронная и идёт в пуле потоков loop'а, поэтому
    медленный ростер (файл/БД) не блокирует приём.
    """

    def __init__(self, dispatcher: CommandDispatcher):
        self.dispatcher = dispatcher
        self.transport: Optional[asyncio.DatagramTransport] = None
        self._pending: Set[asyncio.Task] = set()

    def connection_made(self, transport) -> None:
        self.transport = transport

    def datagram_received(self, data: bytes, addr: Tuple[str, int]) -> None:
        task = asyncio.get_running_loop().create_task(self.respond(data, addr))
        # loop держит на задачи только слабые ссылки
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def error_received(self, exc: Exception) -> None:
        log.warning("udp error: %s", exc)

    async def respond(self, data: bytes, addr: Tuple[str, int]) -> None:
        try:
            text = data.decode(ENCODING)
        except UnicodeDecodeError:
            log.warning("undecodable datagram from %s:%s", *addr)
            self._send("Malformed", addr)
            return

        loop = asyncio.get_running_loop()
        reply = await loop.run_in_executor(None, self.dispatcher.handle_datagram, text)
        log.debug("%s:%s %r -> %r", addr[0], addr[1], text, reply)
        self._send(reply, addr)

    def _send(self, reply: str, addr: Tuple[str, int]) -> None:
        if self.transport is None or self.transport.is_closing():
            return
        self.transport.sendto(reply.encode(ENCODING), addr)


async def serve(services: Services, host: str, port: int) -> None:
    loop = asyncio.get_running_loop()
    transport, _ = await loop.create_datagram_endpoint(
        lambda: BattleDatagramProtocol(services.dispatcher),
        local_addr=(host, port),
    )
    log.info("udp server listening on %s:%d", host, port)
    try:
        await asyncio.Event().wait()
    finally:
        transport.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="monbattle-server", description="Creature battle UDP server"
    )
    parser.add_argument("--host", help="bind address (MONBATTLE_UDP_HOST)")
    parser.add_argument("--port", type=int, help="UDP port (MONBATTLE_UDP_PORT)")
    parser.add_argument(
        "--backend",
        choices=["sql", "json", "memory"],
        help="roster storage (MONBATTLE_ROSTER_BACKEND)",
    )
    parser.add_argument("--catalog", help="path to pokedex.json")
    parser.add_argument("--seed", type=int, help="RNG seed for reproducible battles")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    return parser


def settings_from_args(args: argparse.Namespace, base: Optional[Settings] = None) -> Settings:
    settings = base or Settings.from_env()
    overrides = {
        "udp_host": args.host,
        "udp_port": args.port,
        "roster_backend": args.backend,
        "catalog_path": args.catalog,
        "rng_seed": args.seed,
        "log_level": args.log_level.upper() if args.log_level else None,
    }
    data = settings.model_dump()
    data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings.model_validate(data)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    settings = settings_from_args(args)
    configure_logging(settings.log_level)

    services = build_services(settings)
    try:
        asyncio.run(serve(services, settings.udp_host, settings.udp_port))
    except KeyboardInterrupt:
        log.info("udp server stopped")
