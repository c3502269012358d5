'''
Command line interface

    $ pngme encode ./dice.png ruSt "This is a secret message!"
    $ pngme decode ./dice.png ruSt
    $ pngme remove ./dice.png ruSt
    $ pngme print ./dice.png

Set the DEBUG environment variable to see what happens during the parsing.
'''
import argparse
import logging
import os
import sys

from . import commands
from .exceptions import PngmeException


logger = logging.getLogger(__name__)


def do_encode(args):
    dest_path = commands.embed(args.file_path, args.chunk_type, args.message, args.output)
    print(f'message written into \'{dest_path}\'')


def do_decode(args):
    message = commands.extract(args.file_path, args.chunk_type)
    if message is None:
        print(f'Unable to locate the chunk with type \'{args.chunk_type}\'')
        return

    print(message)


def do_remove(args):
    chunk = commands.delete(args.file_path, args.chunk_type)
    print(f'removed chunk \'{chunk.tag}\' ({len(chunk.payload)} bytes)')


def do_print(args):
    print(commands.render(args.file_path))


def get_parser():
    parser = argparse.ArgumentParser(prog='pngme', description='Hide messages inside PNG files')
    subparsers = parser.add_subparsers(dest='command', required=True)

    encode = subparsers.add_parser('encode', help='hide a message into a new chunk')
    encode.add_argument('file_path')
    encode.add_argument('chunk_type')
    encode.add_argument('message')
    encode.add_argument('output', nargs='?', default=None,
                        help=f'where to save the result (default: {commands.DEFAULT_OUTPUT_PATH})')
    encode.set_defaults(func=do_encode)

    decode = subparsers.add_parser('decode', help='print the message contained in a chunk')
    decode.add_argument('file_path')
    decode.add_argument('chunk_type')
    decode.set_defaults(func=do_decode)

    remove = subparsers.add_parser('remove', help='remove a chunk, overwriting the file')
    remove.add_argument('file_path')
    remove.add_argument('chunk_type')
    remove.set_defaults(func=do_remove)

    display = subparsers.add_parser('print', help='list all the chunks of a file')
    display.add_argument('file_path')
    display.set_defaults(func=do_print)

    return parser


def main(argv=None):
    logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)

    args = get_parser().parse_args(argv)

    try:
        args.func(args)
    except (PngmeException, OSError) as e:
        logger.debug('command failed', exc_info=True)
        print(f'{args.command}: {e}', file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
