"""
Command-line interface for message annotation.

Usage:
    # Single message
    text-annotator "Call 555-123-4567 tomorrow"

    # One message per line, JSONL output
    text-annotator --file messages.txt --output annotations.jsonl

    # Regex only
    text-annotator --sources regex_entity "see www.example.com"

    # Show the instant phase before the complete one
    text-annotator --progressive --mode spacy_local "Lunch with Ada in Paris"
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Iterable, List, Optional, TextIO

import structlog

from ..annotation.factory import build_annotation_pipeline, build_preferences
from ..annotation.pipeline import AnnotationPipeline
from ..config import settings
from ..logging_config import setup_logging
from ..models.annotation import AnnotatedMessageText


logger = structlog.get_logger(__name__)


def read_messages(texts: List[str], file_path: Optional[Path]) -> List[str]:
    messages = list(texts)
    if file_path is not None:
        with open(file_path, "r", encoding="utf-8") as f:
            messages.extend(line.rstrip("\n") for line in f if line.strip())
    return messages


def annotate_messages(
    pipeline: AnnotationPipeline,
    messages: Iterable[str],
    sources: Optional[List[str]] = None,
    progressive: bool = False,
) -> Iterable[dict]:
    """
    Annotate messages and build one output record per result.

    With ``progressive`` every phase becomes its own record, tagged with
    ``phase``; otherwise one record per message.
    """
    for index, text in enumerate(messages):
        if progressive:
            for phase, annotations in enumerate(pipeline.annotate_progressive(text, sources), 1):
                annotated = AnnotatedMessageText(text, annotations)
                yield {"index": index, "phase": phase, **annotated.to_dict()}
        else:
            annotated = AnnotatedMessageText(text, pipeline.annotate(text, sources))
            yield {"index": index, **annotated.to_dict()}


def write_records(records: Iterable[dict], out: TextIO) -> int:
    count = 0
    for record in records:
        out.write(json.dumps(record, ensure_ascii=False) + "\n")
        count += 1
    return count


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="text-annotator",
        description="Annotate message text with dates, URLs, emails, phone numbers and named entities",
    )
    parser.add_argument("texts", nargs="*", help="Message texts to annotate")
    parser.add_argument("--file", "-f", type=Path, help="File with one message per line")
    parser.add_argument("--output", "-o", type=Path, help="Write JSONL here instead of stdout")
    parser.add_argument(
        "--sources",
        help="Comma-separated source ids to enable (e.g. regex_entity,tiered_ner)",
    )
    parser.add_argument("--mode", help="NER mode: auto, off, or a provider id")
    parser.add_argument(
        "--progressive",
        action="store_true",
        help="Emit the instant regex phase before the complete result",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    config = settings.model_copy(update={"log_json": False})
    if args.verbose:
        config = config.model_copy(update={"log_level": "DEBUG"})
    setup_logging(config, stream=sys.stderr)

    messages = read_messages(args.texts, args.file)
    if not messages:
        print("No input messages (pass texts or --file)", file=sys.stderr)
        return 2

    preferences = build_preferences(config)
    if args.mode:
        preferences.set_selected_provider(args.mode)

    pipeline = build_annotation_pipeline(config, preferences)
    sources = [s.strip() for s in args.sources.split(",") if s.strip()] if args.sources else None

    records = annotate_messages(pipeline, messages, sources, args.progressive)

    if args.output:
        with open(args.output, "w", encoding="utf-8") as out:
            count = write_records(records, out)
        logger.info("annotations_written", path=str(args.output), records=count)
    else:
        write_records(records, sys.stdout)

    return 0


if __name__ == "__main__":
    sys.exit(main())
