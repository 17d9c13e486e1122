# === FILE: link_checker/cli.py ===
"""
Точка входа для запуска LinkChecker через командную строку.

Команды:
  check     Обойти сайт и сохранить отчёт (JSON + CSV битых ссылок)
  fetch     Показать последний сохранённый отчёт ("{}" если его нет)
  last-run  Показать время последней проверки
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования

Пример:
  link-checker check --base-url https://example.com --concurrency 3 --output-dir reports
"""
import json
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from link_checker import __version__
from link_checker.config import load_config
from link_checker.engine import Engine
from link_checker.exceptions import ConfigurationError, PersistenceError
from link_checker.logger import DEFAULT_FORMAT, init_logging

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='LinkChecker, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stdout, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд LinkChecker CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except (OSError, ValueError, TypeError) as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('check', context_settings=CONTEXT_SETTINGS)
@click.option('--base-url', 'base_url', default=None, help='Корневой URL (override base_url)')
@click.option('--test-url', 'test_url', default=None, help='URL для тестового запуска (важнее --base-url)')
@click.option('--concurrency', type=click.IntRange(min=1), default=None, help='Одновременных запросов')
@click.option('--timeout', type=float, default=None, help='Таймаут одного запроса (секунд)')
@click.option('--internal-only', is_flag=True, help='Не проверять ссылки на внешние хосты')
@click.option(
    '--output-dir', 'output_dir',
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help='Каталог для JSON/CSV отчётов'
)
@click.pass_context
def check(ctx, base_url, test_url, concurrency, timeout, internal_only, output_dir):
    """Обойти сайт и сохранить отчёт."""
    try:
        cfg = ctx.obj['config'].with_overrides(
            concurrency=concurrency,
            timeout=timeout,
            output_dir=output_dir,
            crawl_external=False if internal_only else None,
        )
    except ValidationError as e:
        print_error(f'Некорректные параметры: {e}')

    engine = Engine(cfg)
    try:
        ack = engine.run_crawl(base_url, test_url)
    except ConfigurationError as e:
        print_error(f'Ошибка конфигурации: {e}')
    except PersistenceError as e:
        print_error(f'Ошибка при сохранении отчёта: {e}')
    click.echo(ack)


@cli.command('fetch', context_settings=CONTEXT_SETTINGS)
@click.option('--output-dir', 'output_dir', default=None, type=click.Path(file_okay=False, path_type=Path))
@click.option('--pretty', is_flag=True, help='Преформатировать JSON-вывод (отступ 2)')
@click.pass_context
def fetch(ctx, output_dir, pretty):
    """Показать последний сохранённый отчёт."""
    cfg = ctx.obj['config'].with_overrides(output_dir=output_dir)
    text = Engine(cfg).get_last_report()
    if pretty:
        try:
            text = json.dumps(json.loads(text), ensure_ascii=False, indent=2)
        except json.JSONDecodeError as e:
            print_error(f'Повреждённый отчёт: {e}')
    click.echo(text)


@cli.command('last-run', context_settings=CONTEXT_SETTINGS)
@click.option('--output-dir', 'output_dir', default=None, type=click.Path(file_okay=False, path_type=Path))
@click.pass_context
def last_run(ctx, output_dir):
    """Показать метаданные последней проверки."""
    cfg = ctx.obj['config'].with_overrides(output_dir=output_dir)
    run = Engine(cfg).get_last_run()
    if run is None:
        click.echo('never')
        return
    click.echo(json.dumps(run.to_dict(), ensure_ascii=False))


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
