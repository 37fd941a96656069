# -*- coding: utf-8 -*-
"""Command line tracking: `suivi-poste <tracking_numbers>`.

Without an API key the public relay server is used.

Exit codes: 0 when help was asked for or every number was tracked, 1 when
no number was given, the request failed or any number couldn't be tracked.
Blocks for failed numbers are printed along with the others, on stdout;
network errors in raw mode and the final hint go to stderr.
"""
import asyncio
import datetime
import sys
from typing import List, Optional, Sequence, TextIO, Tuple

from rich.console import Console
from rich.markup import escape
from tornado.options import Error as OptionsError, OptionParser

from suivi_poste.environs.env import Config, ConfigError
from suivi_poste.formatter import Mode, format_results
from suivi_poste.modules.tracker import tracker
from suivi_poste.modules.tracker.models import Success


PROG = 'suivi-poste'

USAGE = """
  Usage
    $ suivi-poste <tracking_numbers>

  Options
    --help --aide -h      Afficher l'aide
    --full                Afficher les informations complètes de suivi
    --raw                 Récupérer le résultat brut de l'API au format JSON
    --no-color            Désactiver l'affichage des couleurs
    --api-key="<token>"   Clef d'API suivi La Poste à utiliser

  Exemple
    $ suivi-poste 4P36275770836
    $ suivi-poste 4P36275770836 --full
    $ suivi-poste 4P36275770836 6T11111111110 114111111111111
    $ suivi-poste 4P36275770836 114111111111111 --no-color
    $ suivi-poste 4P36275770836 --raw --api-key="my-api-key"

  suivi-poste v{version}
"""

DIRECT_CALL_NOTICE = 'Appel direct à l\'API suivis postaux via la clef d\'API passée en paramètre.'

FAILURE_HINT = (
	'🛠️ Cet outil se base sur l\'API de suivi Open Data de La Poste, en beta. '
	'Certains numéros de suivis peuvent ne pas être reconnus.\n'
	'👉 Essayez sur le site: https://www.laposte.fr/outils/suivre-vos-envois'
)


class _CLIOptionParser(OptionParser):
	"""tornado.options parser printing our own usage."""

	def __init__(self, version: str):
		super().__init__()
		# Attributes are options here, bypass __setattr__.
		self.__dict__['_usage'] = USAGE.format(version=version)

	def print_help(self, file: Optional[TextIO] = None) -> None:
		print(self._usage, file=file or sys.stdout)


def make_parser(version: str) -> OptionParser:
	parser = _CLIOptionParser(version)

	def help_callback(value: bool):
		if value:
			parser.print_help()
			sys.exit(0)

	# --help is built in.
	parser.define('aide', type=bool, default=False, help='show help', callback=help_callback)
	parser.define('h', type=bool, default=False, help='show help', callback=help_callback)
	parser.define('raw', type=bool, default=False, help='raw API answer')
	parser.define('full', type=bool, default=False, help='complete tracking info')
	parser.define('no_color', type=bool, default=False, help='no colors')
	parser.define('no_colors', type=bool, default=False, help='no colors')
	parser.define('api_key', type=str, default=None, help='La Poste API key', metavar='TOKEN')
	return parser


def split_args(args: Sequence[str]) -> Tuple[List[str], List[str]]:
	"""Options and tracking numbers, wherever options were put."""
	flags = [arg for arg in args if arg.startswith('-')]
	tracking_numbers = [arg for arg in args if not arg.startswith('-')]
	return flags, tracking_numbers


def _write_raw(file: TextIO, raw: bytes) -> None:
	"""Bytes as received when the stream lets us, decoded text otherwise."""
	buffer = getattr(file, 'buffer', None)
	file.flush()
	if buffer is not None:
		buffer.write(raw)
		buffer.flush()
	else:
		file.write(raw.decode('utf-8', errors='replace'))
		file.flush()


async def track(
	tracking_numbers: Sequence[str],
	config: Config,
	mode: Mode = Mode.BASIC,
	api_key: Optional[str] = None,
	console: Optional[Console] = None,
	err_console: Optional[Console] = None,
	tz: Optional[datetime.tzinfo] = None
) -> int:
	"""Track the shipments and print the result, returns exit code."""
	console = console or Console(highlight=False, emoji=False, soft_wrap=True)
	err_console = err_console or Console(stderr=True, highlight=False, emoji=False, soft_wrap=True)

	batch = await tracker.fetch_tracking(tracking_numbers, config, api_key=api_key)
	results = batch.in_order(tracking_numbers)
	ok = all(isinstance(result, Success) for result in results)

	# Raw mode, just print the result
	if mode is Mode.RAW:
		if batch.raw:
			_write_raw(console.file, batch.raw)
		else:
			for tracking_number, result in zip(tracking_numbers, results):
				message = getattr(result, 'return_message', None) or 'Erreur inconnue'
				err_console.print(f'[red]❌ {escape(tracking_number)} | {escape(message)}[/red]')
		return 0 if ok else 1

	if api_key:
		console.print(f'[grey62]{escape(DIRECT_CALL_NOTICE)}[/grey62]\n')

	console.print(f'\n{format_results(batch, tracking_numbers, mode, tz)}\n')

	if not ok:
		err_console.print(f'[bright_cyan]{escape(FAILURE_HINT)}[/bright_cyan]')
		return 1
	return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
	"""Entry point of the `suivi-poste` script."""
	argv = sys.argv[1:] if argv is None else list(argv)
	try:
		config = Config.from_environ()
	except ConfigError as e:
		print(e, file=sys.stderr)
		return 1
	parser = make_parser(config.version)

	flags, tracking_numbers = split_args(argv)
	try:
		parser.parse_command_line([PROG] + flags)
	except OptionsError as e:
		print(e, file=sys.stderr)
		return 1

	if not tracking_numbers:
		parser.print_help(sys.stderr)
		return 1

	if parser.raw:
		mode = Mode.RAW
	elif parser.full:
		mode = Mode.FULL
	else:
		mode = Mode.BASIC

	no_color = parser.no_color or parser.no_colors
	console = Console(no_color=no_color, highlight=False, emoji=False, soft_wrap=True)
	err_console = Console(stderr=True, no_color=no_color, highlight=False, emoji=False, soft_wrap=True)

	return asyncio.run(track(
		tracking_numbers,
		config,
		mode=mode,
		api_key=parser.api_key,
		console=console,
		err_console=err_console
	))


if __name__ == '__main__':
	sys.exit(main())
