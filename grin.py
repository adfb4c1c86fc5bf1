# filename: grin.py

import argparse
import sys

from grin_errors import FormatError
from huffman_service import GrinService


def build_parser():
    parser = argparse.ArgumentParser(
        prog="grin",
        description="Compress and decompress files with a static Huffman code.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="print sizes and ratio when done")
    commands = parser.add_subparsers(dest="command", metavar="{encode,decode}")
    commands.required = True

    encode = commands.add_parser("encode", help="compress INFILE into a .grin file")
    encode.add_argument("infile")
    encode.add_argument("outfile")

    decode = commands.add_parser("decode", help="restore a .grin file")
    decode.add_argument("infile")
    decode.add_argument("outfile")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    service = GrinService()

    try:
        if args.command == "encode":
            stats = service.encode_file(args.infile, args.outfile)
        else:
            stats = service.decode_file(args.infile, args.outfile)
    except (FormatError, OSError) as e:
        print(f"grin: error: {e}", file=sys.stderr)
        return 1

    if not stats.complete:
        print(f"grin: warning: {args.infile} ended before its end-of-stream marker; output is truncated",
              file=sys.stderr)
    if args.verbose:
        print(f"{args.command}: {stats.original_size} bytes <-> {stats.compressed_size} bytes "
              f"(ratio {stats.ratio:.3f})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
