#!/usr/bin/env python3
"""
Точка входа для запуска краулера LinkSpider через командную строку.

Команды:
  crawl URL   Обойти сайт начиная с URL и вывести/сохранить отчёт
  config      Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования

Команда crawl опции:
  --depth INT          Глубина обхода (override depth)
  --ignore-relative    Переходить только по абсолютным ссылкам
  --user-agent STR     Заголовок User-Agent
  --rate FLOAT         Лимит запросов в секунду
  --same-host          Не выходить за пределы хоста стартового URL
  --json PATH          Сохранить JSON-отчёт в файл
  --html PATH          Сохранить HTML-отчёт в файл
  --template DIR       Папка с Jinja2-шаблоном report.html.j2
  --pretty             Преформатировать JSON-вывод (отступ 2)
  --crawl-timeout SEC  Таймаут всего обхода (секунд)

Пример:
  link-spider crawl https://example.com --depth 3 --rate 5 --json report.json
"""
import asyncio
import sys
from functools import partial
from pathlib import Path

import click

from link_spider import __version__
from link_spider.config import load_config, merge_options
from link_spider.engine import start_crawl
from link_spider.logger import DEFAULT_FORMAT, init_logging
from link_spider.report.html_report import render_html
from link_spider.report.json_report import render_json
from link_spider.utils import same_host

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='LinkSpider, version %(version)s')
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
    """Группа команд LinkSpider CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.argument('url')
@click.option('--depth', '-d', type=int, default=None, help='Глубина обхода')
@click.option('--ignore-relative', is_flag=True, help='Только абсолютные ссылки')
@click.option('--user-agent', '-u', default=None, help='Заголовок User-Agent')
@click.option('--rate', '-r', type=float, default=None, help='Лимит запросов в секунду')
@click.option('--same-host', 'same_host_only', is_flag=True, help='Не выходить за пределы хоста стартового URL')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить HTML-отчёт в файл'
)
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Папка с Jinja2-шаблоном (по умолчанию встроенный)'
)
@click.option('--pretty', is_flag=True, help='Преформатировать JSON-вывод (отступ 2)')
@click.option(
    '--crawl-timeout', 'crawl_timeout',
    type=float,
    default=None,
    help='Таймаут всего обхода (секунд)'
)
@click.pass_context
def crawl(ctx, url, depth, ignore_relative, user_agent, rate, same_host_only,
          json_output, html_output, template_dir, pretty, crawl_timeout):
    """Обойти сайт начиная с URL и сгенерировать отчёт."""
    try:
        cfg = merge_options(
            ctx.obj['config'],
            depth=depth,
            ignore_relative=True if ignore_relative else None,
            user_agent=user_agent,
            max_requests_per_second=rate,
            should_crawl=partial(same_host, other=url) if same_host_only else None,
        )
    except Exception as e:
        print_error(f'Некорректные параметры: {e}')

    try:
        if crawl_timeout:
            report = asyncio.run(
                asyncio.wait_for(start_crawl(cfg, url), timeout=crawl_timeout)
            )
        else:
            report = asyncio.run(start_crawl(cfg, url))
    except asyncio.TimeoutError:
        print_error(f'Обход не завершён за {crawl_timeout} секунд')
    except Exception as e:
        print_error(f'Ошибка при обходе: {e}')

    if not json_output and not html_output:
        click.echo(report.json(pretty=pretty))
        return

    if json_output:
        try:
            saved_json = render_json(report, json_output, pretty=pretty)
            click.echo(f'JSON report: {saved_json}')
        except Exception as e:
            print_error(f'Ошибка при сохранении JSON: {e}')

    if html_output:
        try:
            saved_html = render_html(report, html_output, template_dir)
            click.echo(f'HTML report: {saved_html}')
        except Exception as e:
            print_error(f'Ошибка при сохранении HTML: {e}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
