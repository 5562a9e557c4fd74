#!/usr/bin/env python3
"""
webjourney CLI - Scrape entities declared in YAML

Usage:
    webjourney scrape <url> --entities defs.yaml --entity Article [--document html|playwright]
    webjourney describe --entities defs.yaml [--entity Article]
"""

import argparse
import dataclasses
import datetime
import json
import sys
from typing import Any, Dict

from .config import Config
from .config_logger import log_config
from .diagnostics import get_logger, set_debug
from .error_handler import format_error_for_logging
from .exceptions import RuleDefinitionError, WebJourneyError

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_SCRAPE_FAILED = 1
EXIT_DEFINITION_ERROR = 2

ENTITIES_ARG_HELP = "Path to the YAML entity definitions"


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    if hasattr(value, "__dict__"):
        return vars(value)
    return str(value)


def entity_to_dict(entity: Any) -> Dict[str, Any]:
    if dataclasses.is_dataclass(entity):
        return dataclasses.asdict(entity)
    return dict(vars(entity))


def _configure(args) -> Config:
    cfg = Config.from_env()
    if args.debug:
        cfg.enable_debug = True
    set_debug(cfg.enable_debug)
    if getattr(args, "no_cache", False):
        cfg.entity_cache_enabled = False
    log_config(logger, cfg)
    return cfg


def _select_entity(entities: Dict[str, type], name: str) -> type:
    if name not in entities:
        raise RuleDefinitionError(f"Unknown entity '{name}'. Defined: {', '.join(entities) or 'none'}")
    return entities[name]


def _scrape(args, entity_type: type, cfg: Config) -> Any:
    from .entity import EntityCreator, LoggingCreationListener

    creator = EntityCreator(cfg=cfg)
    listeners = [LoggingCreationListener(logger)] if cfg.enable_debug else []

    if args.document == "playwright":
        from .document.playwright_document import PlaywrightDocument

        with PlaywrightDocument.launch(args.url, cfg) as document:
            return creator.create_entity(entity_type, document, listeners=listeners)

    from .document import HtmlDocument

    document = HtmlDocument(args.url, cfg=cfg)
    return creator.create_entity(entity_type, document, listeners=listeners)


def cmd_scrape(args) -> int:
    """Scrape one entity and print it as JSON"""
    from .entity import load_entities

    cfg = _configure(args)
    try:
        entities = load_entities(args.entities)
        entity_type = _select_entity(entities, args.entity)
    except RuleDefinitionError as e:
        print(format_error_for_logging(e, "definitions"), file=sys.stderr)
        return EXIT_DEFINITION_ERROR

    try:
        logger.info(f"Scraping {args.entity} from {args.url}")
        entity = _scrape(args, entity_type, cfg)
    except RuleDefinitionError as e:
        print(format_error_for_logging(e, "definitions"), file=sys.stderr)
        return EXIT_DEFINITION_ERROR
    except WebJourneyError as e:
        print(format_error_for_logging(e, "scrape"), file=sys.stderr)
        return EXIT_SCRAPE_FAILED

    output = json.dumps(entity_to_dict(entity), indent=2, default=_json_default, ensure_ascii=False)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(output + "\n")
        logger.info(f"Result written to: {args.output}")
    else:
        print(output)
    return EXIT_OK


def cmd_describe(args) -> int:
    """Print the fields and resolved rules of each entity"""
    from .entity import EntityDescriptions, load_entities

    cfg = _configure(args)
    descriptions = EntityDescriptions(cache_enabled=False)
    try:
        entities = load_entities(args.entities)
        if args.entity:
            entities = {args.entity: _select_entity(entities, args.entity)}
        for entity_type in entities.values():
            print(descriptions.describe(entity_type).describe())
            print()
    except RuleDefinitionError as e:
        print(format_error_for_logging(e, "definitions"), file=sys.stderr)
        return EXIT_DEFINITION_ERROR
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webjourney",
        description="webjourney - Build typed entities from web pages",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Scrape command
    scrape_parser = subparsers.add_parser('scrape', help='Scrape an entity from a URL')
    scrape_parser.add_argument('url', help='Page to start from')
    scrape_parser.add_argument('--entities', '-e', required=True, help=ENTITIES_ARG_HELP)
    scrape_parser.add_argument('--entity', required=True, help='Name of the entity to build')
    scrape_parser.add_argument('--document', choices=['html', 'playwright'], default='html',
                               help='Static HTML (lxml) or a real browser (Playwright)')
    scrape_parser.add_argument('--no-cache', action='store_true', help='Disable the entity description cache')
    scrape_parser.add_argument('--output', '-o', help='Output file for the JSON result')
    scrape_parser.add_argument('--debug', action='store_true', help='Debug logging')
    scrape_parser.set_defaults(func=cmd_scrape)

    # Describe command
    describe_parser = subparsers.add_parser('describe', help='Show entity fields and rules')
    describe_parser.add_argument('--entities', '-e', required=True, help=ENTITIES_ARG_HELP)
    describe_parser.add_argument('--entity', help='Only this entity')
    describe_parser.add_argument('--debug', action='store_true', help='Debug logging')
    describe_parser.set_defaults(func=cmd_describe)

    return parser


def main(argv=None) -> int:
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
