#!python
import argparse
import logging
import os
import platform
import sys
import time

from . import __version__
from . import config as _config
from . import util as _util
from .constants import EXIT_OK, PROGNAME, SUBCOMMAND
from .io import load_reads, load_variants, write_read_contexts
from .pipeline import run_pipeline
from .reference import FastaReferenceSource


def join_main(reads, variants, reference, output, **settings):
    reference_source = FastaReferenceSource(*_util.bash_expands(*reference))
    read_records = load_reads(*reads, contigs=settings['contigs'])
    variant_records = load_variants(*variants, contigs=settings['contigs']) if variants else []
    contexts = run_pipeline(
        read_records,
        variant_records,
        reference_source,
        shard_width=settings['shard_width'],
        reference_window_padding=settings['reference_window_padding'],
        concurrency=settings['concurrency'],
        max_retries=settings['max_retries'],
    )
    if os.path.dirname(output):
        _util.mkdirp(os.path.dirname(output))
    write_read_contexts(read_records, contexts, output)
    return contexts


def create_parser(argv):
    parser = argparse.ArgumentParser(prog=PROGNAME, formatter_class=_config.CustomHelpFormatter)
    parser.add_argument(
        '-v', '--version', action='version', version='%(prog)s version ' + __version__,
        help='Outputs the version number')
    subp = parser.add_subparsers(dest='command', help='specifies which subprogram to use')
    subp.required = True
    required = {}  # hold required argument group by subparser command name
    optional = {}  # hold optional argument group by subparser command name
    for command in SUBCOMMAND.values():
        subparser = subp.add_parser(command, formatter_class=_config.CustomHelpFormatter, add_help=False)
        required[command] = subparser.add_argument_group('required arguments')
        optional[command] = subparser.add_argument_group('optional arguments')
        optional[command].add_argument('-h', '--help', action='help', help='show this help message and exit')
        optional[command].add_argument('--log', help='redirect stdout to a log file', default=None)
        optional[command].add_argument(
            '--log_level', help='level of logging to output', choices=['INFO', 'DEBUG'], default='INFO')

    # join
    required[SUBCOMMAND.JOIN].add_argument(
        '--reads', nargs='+', required=True, metavar='FILEPATH', help='path(s) to the BAM/SAM files holding the reads')
    required[SUBCOMMAND.JOIN].add_argument(
        '--reference', nargs='+', required=True, metavar='FILEPATH', help='path(s) to the reference fasta files')
    required[SUBCOMMAND.JOIN].add_argument(
        '-o', '--output', required=True, metavar='FILEPATH', help='path to the tab-delimited output file')
    optional[SUBCOMMAND.JOIN].add_argument(
        '--variants', nargs='*', default=[], metavar='FILEPATH', help='path(s) to the VCF/BCF files holding the variants')
    optional[SUBCOMMAND.JOIN].add_argument(
        '--config', '-c', type=_util.filepath, default=None, help='path to an INI config file')
    _config.augment_parser(_config.DEFAULTS.keys(), optional[SUBCOMMAND.JOIN])

    # config
    required[SUBCOMMAND.CONFIG].add_argument(
        '-o', '--output', required=True, metavar='FILEPATH', help='path to write the config template to')

    return parser, parser.parse_args(argv)


def main(argv=None):
    """
    sets up the parser and checks the validity of command line options before running the selected subcommand
    """
    if argv is None:
        argv = sys.argv[1:]
    start_time = int(time.time())
    parser, args = create_parser(argv)

    log_conf = {'format': '{message}', 'style': '{', 'level': args.log_level}

    original_logging_handlers = logging.root.handlers[:]
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    if args.log:  # redirect stdout AND stderr to a log file
        log_conf['filename'] = args.log
    logging.basicConfig(**log_conf)

    _util.logger.info(f'{PROGNAME}: {__version__}')
    _util.logger.info(f'hostname: {platform.node()}')
    _util.log_arguments(args)

    try:
        if args.command == SUBCOMMAND.CONFIG:
            _config.write_config(args.output)
        else:
            config_settings = _config.read_config(args.config) if args.config else {}
            settings = _config.resolve_settings(vars(args), config_settings)
            join_main(args.reads, args.variants, args.reference, args.output, **settings)

        duration = int(time.time()) - start_time
        _util.logger.info(f'run time (hh/mm/ss): {_util.format_duration(duration)}')
        _util.logger.info(f'run time (s): {duration}')
        return EXIT_OK
    except Exception as err:
        if args.log:
            _util.logger.exception(err)  # capture the error in the logging output file
        raise err
    finally:
        for handler in logging.root.handlers[:]:
            logging.root.removeHandler(handler)
        for handler in original_logging_handlers:
            logging.root.addHandler(handler)


if __name__ == '__main__':
    main()
