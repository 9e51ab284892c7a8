import argparse
import logging
import sys
from typing import List, Optional

from .audio import audio_file_capacity, decode_audio_file, encode_audio_file
from .errors import StegoError
from .image import decode_image_file, encode_image_file, image_file_capacity
from .text import decode_text, encode_text, text_capacity
from .video import decode_video_file, encode_video_file, video_file_capacity

MEDIA = ("text", "image", "audio", "video")

logger = logging.getLogger(__name__)


def _read_bytes(path: str) -> bytes:
    if path == "-":
        return sys.stdin.buffer.read()
    with open(path, "rb") as f:
        return f.read()


def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _write_bytes(path: str, data: bytes) -> None:
    if path == "-":
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
    else:
        with open(path, "wb") as f:
            f.write(data)


def _write_text(path: str, text: str) -> None:
    if path == "-":
        sys.stdout.write(text)
        sys.stdout.flush()
    else:
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)


def _progress(percent: int) -> None:
    logger.info(f"{percent}%")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="stegcodec", description="Hide messages in text, images, audio and video")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--media", choices=MEDIA, required=True)

    hide = subparsers.add_parser("hide", parents=[common], help="Embed a message into a cover file")
    hide.add_argument("--cover", required=True, help="Cover file ('-' for stdin)")
    hide.add_argument("--output", required=True, help="Stego output file ('-' for stdout)")
    source = hide.add_mutually_exclusive_group(required=True)
    source.add_argument("--message", help="Message text")
    source.add_argument("--message-file", help="File whose bytes are the message")
    hide.add_argument("--password", default=None)

    reveal = subparsers.add_parser("reveal", parents=[common], help="Extract a hidden message")
    reveal.add_argument("--input", required=True, help="Stego file ('-' for stdin)")
    reveal.add_argument("--output", default="-", help="Where to write the message (default stdout)")
    reveal.add_argument("--password", default=None)

    cap = subparsers.add_parser("capacity", parents=[common], help="Print the payload capacity in bytes")
    cap.add_argument("--cover", required=True)

    return parser


def run_hide(args) -> int:
    message = args.message if args.message is not None else _read_bytes(args.message_file)

    if args.media == "text":
        _write_text(args.output, encode_text(_read_text(args.cover), message, args.password))
        return 0

    cover = _read_bytes(args.cover)
    if args.media == "image":
        out = encode_image_file(cover, message, args.password, on_progress=_progress)
    elif args.media == "audio":
        out = encode_audio_file(cover, message, args.password, on_progress=_progress)
    else:
        out = encode_video_file(cover, message, args.password, on_progress=_progress)
    _write_bytes(args.output, out)
    return 0


def run_reveal(args) -> int:
    if args.media == "text":
        result = decode_text(_read_text(args.input), args.password)
    elif args.media == "image":
        result = decode_image_file(_read_bytes(args.input), args.password, on_progress=_progress)
    elif args.media == "audio":
        result = decode_audio_file(_read_bytes(args.input), args.password, on_progress=_progress)
    else:
        result = decode_video_file(_read_bytes(args.input), args.password, on_progress=_progress)

    if not result:
        print("No hidden message found", file=sys.stderr)
        return 1
    _write_bytes(args.output, result.data)
    return 0


def run_capacity(args) -> int:
    if args.media == "text":
        capacity = text_capacity(_read_text(args.cover))
    elif args.media == "image":
        capacity = image_file_capacity(_read_bytes(args.cover))
    elif args.media == "audio":
        capacity = audio_file_capacity(_read_bytes(args.cover))
    else:
        capacity = video_file_capacity(_read_bytes(args.cover))
    print(capacity)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    commands = {"hide": run_hide, "reveal": run_reveal, "capacity": run_capacity}
    try:
        return commands[args.command](args)
    except StegoError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
