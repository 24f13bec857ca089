#!/usr/bin/env python3

import argparse
import logging
import sys

import yaml

from .applier import SchemaDDLApplier
from .config import Settings
from .ddl import action_from_dict
from .errors import SchemaNotFoundError, SchemaStoreError, VSchemaDDLError
from .schema_store import FileSchemaStore
from .vschema import KeyspaceSchema


logger = logging.getLogger(__name__)


def set_logging_config(tags, log_level_str=None):
    """Configure logging to output only to stderr."""
    handlers = [logging.StreamHandler(sys.stderr)]

    log_levels = {
        'critical': logging.CRITICAL,
        'error': logging.ERROR,
        'warning': logging.WARNING,
        'info': logging.INFO,
        'debug': logging.DEBUG,
    }

    log_level = log_levels.get(log_level_str)
    if log_level is None:
        logging.warning(f'Unknown log level {log_level_str}, setting info')
        log_level = logging.INFO

    logging.basicConfig(
        level=log_level,
        format=f'[{tags} %(asctime)s %(levelname)8s] %(message)s',
        handlers=handlers,
        force=True,
    )


def load_actions(ddl_file):
    with open(ddl_file, 'r') as f:
        data = yaml.safe_load(f)
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list) or not data:
        raise ValueError(f'{ddl_file} should contain a DDL action or a list of them')
    return [action_from_dict(item) for item in data]


def print_vschema(vschema: KeyspaceSchema):
    sys.stdout.write(yaml.safe_dump(vschema.to_dict(), sort_keys=True))


def run_apply(args, config: Settings):
    if not args.ddl:
        raise Exception("need to pass --ddl argument")

    actions = load_actions(args.ddl)
    store = FileSchemaStore(config.store.data_dir, read_only=config.store.read_only)
    applier = SchemaDDLApplier(store)

    # actions are applied in order to one snapshot and saved together
    vschema = applier.get_vschema(args.keyspace)
    for action in actions:
        applier.apply_to(vschema, action)

    if args.dry_run:
        logger.info(f'dry run, VSchema of keyspace {args.keyspace} not saved')
    else:
        store.save_vschema(vschema)
        logger.info(f'saved VSchema of keyspace {args.keyspace} ({len(actions)} actions)')
    print_vschema(vschema)


def run_show(args, config: Settings):
    store = FileSchemaStore(config.store.data_dir, read_only=True)
    try:
        vschema = store.get_vschema(args.keyspace)
    except SchemaNotFoundError:
        vschema = KeyspaceSchema.empty(args.keyspace)
    print_vschema(vschema)


def main(argv=None):
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "mode", help="run mode",
        type=str,
        choices=["apply", "show"])
    parser.add_argument("--config", help="config file path", default='config.yaml', type=str)
    parser.add_argument("--keyspace", help="keyspace name", required=True, type=str)
    parser.add_argument("--ddl", help="yaml file with the DDL action(s) to apply", type=str)
    parser.add_argument(
        "--dry_run", action="store_true", default=False,
        help="print the resulting VSchema without saving it",
    )
    args = parser.parse_args(argv)

    config = Settings()
    try:
        config.load(args.config)
    except (OSError, yaml.YAMLError, ValueError) as e:
        logger.error(f'failed to load config {args.config}: {e}')
        return 1

    set_logging_config(f'vschema {args.keyspace}', log_level_str=config.log_level)

    if not config.is_keyspace_matches(args.keyspace):
        logger.error(f'keyspace {args.keyspace} is not allowed by {config.settings_file}')
        return 1

    try:
        if args.mode == 'apply':
            run_apply(args, config)
        if args.mode == 'show':
            run_show(args, config)
    except (VSchemaDDLError, SchemaStoreError, ValueError, OSError, yaml.YAMLError) as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
