import argparse
import asyncio
import json
import sys
from pathlib import Path

import services.error as error
import services.logger as log
import services.config_io as config_io
from services.config import load_app_config
from services.config_schema import AppConfig
from services.engine import ExtractionEngine
from services.envelope import decode_message, encode_message
from services.error import FileReadError
from services.media import open_file
from services.message import FileSource

l = log.get_logger()


def cmd_convert(src: str, dst: str) -> int:
    src_path = Path(src)
    dst_path = Path(dst)

    if not src_path.is_file():
        print(f"Error: source file not found: {src_path}", file=sys.stderr)
        return 1

    try:
        data = config_io.load_config(src_path)
    except Exception as e:
        print(f"Error reading {src_path}: {e}", file=sys.stderr)
        return 1

    try:
        config_io.save_config(data, dst_path)
    except Exception as e:
        print(f"Error writing {dst_path}: {e}", file=sys.stderr)
        return 1

    print(f"Converted {src_path} → {dst_path}")
    return 0


async def cmd_extract(config: AppConfig, paths: list[str]) -> int:
    engine = ExtractionEngine(config.extraction)
    status = 0
    for i, p in enumerate(paths):
        source = FileSource(p)
        try:
            handle = await open_file(source, config.max_file_size)
        except FileReadError as e:
            print(f"Error reading file {source.display_name}: {e}", file=sys.stderr)
            status = 1
            continue
        if len(paths) > 1:
            if i:
                print()
            print(f"==> {handle.name} <==")
        print(await engine.extract(handle))
    return status


async def cmd_encode(config: AppConfig, text: str, paths: list[str]) -> int:
    engine = ExtractionEngine(config.extraction)
    files = [FileSource(p) for p in paths]
    sys.stdout.write(await encode_message(text, files, engine, config.max_file_size))
    return 0


def cmd_decode(path: str | None) -> int:
    with error.catch_and_log(f"decode {path or 'stdin'}"):
        if path is None or path == "-":
            message = sys.stdin.read()
        else:
            message = Path(path).read_text(encoding="utf-8")
    decoded = decode_message(message)
    print(json.dumps(decoded.to_dict(), ensure_ascii=False, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="attachkit",
        description="Extract text from files and pack it into chat messages",
    )
    parser.add_argument("--config", help="Config file (default: config.* in the data directory)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    ext = subparsers.add_parser("extract", help="Print the text extracted from each file")
    ext.add_argument("files", nargs="+", help="Local paths or http(s) URLs")

    enc = subparsers.add_parser("encode", help="Build a message with the files attached")
    enc.add_argument("-m", "--message", default="", help="Typed message text")
    enc.add_argument("files", nargs="*", help="Local paths or http(s) URLs")

    dec = subparsers.add_parser("decode", help="Split a stored message into text and attachments (JSON)")
    dec.add_argument("file", nargs="?", help="Message file (default: stdin)")

    conv = subparsers.add_parser("convert", help="Convert a config file between formats (json/yaml/toml)")
    conv.add_argument("src", help="Source config file (e.g. config.json)")
    conv.add_argument("dst", help="Destination config file (e.g. config.yaml)")

    return parser


def main(argv: list[str] | None = None) -> int:
    error.install_excepthook()
    args = build_parser().parse_args(argv)

    if args.command == "convert":
        return cmd_convert(args.src, args.dst)
    if args.command == "decode":
        return cmd_decode(args.file)

    try:
        config = load_app_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        l.critical(str(e))
        return 2

    if args.command == "extract":
        return asyncio.run(cmd_extract(config, args.files))
    return asyncio.run(cmd_encode(config, args.message, args.files))


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        pass
