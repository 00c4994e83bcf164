"""poextract command line entry point."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Optional

from poextract import APP_NAME, __version__
from poextract.errors import PoExtractError
from poextract.services.settings import GIT_CHECK_TRACKED_ONLY, Settings

logger = logging.getLogger(APP_NAME)

EXIT_OK = 0
EXIT_UNTRANSLATED = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Extract translatable keys from source code and merge them into PO catalogs.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-v", "--verbose", action="count", default=0, help="More output (-vv for debug)")
    common.add_argument("-q", "--quiet", action="store_true", help="Only print errors")
    common.add_argument("--config", metavar="FILE", help="JSON or YAML config file")
    common.add_argument("--base-dir", dest="base_dir", metavar="DIR",
                        help="Directory globs and references are relative to")
    common.add_argument("--context", help="Message context (msgctxt) to merge into")

    sub = parser.add_subparsers(dest="command", required=True)

    extract = sub.add_parser("extract", parents=[common], help="Extract messages and update PO files")
    extract.add_argument("sources", nargs="+", metavar="SOURCE", help="Source file globs")
    extract.add_argument("--po", action="append", required=True, metavar="GLOB", help="PO file glob")
    extract.add_argument("--po-to", dest="po_to", metavar="DIR",
                         help="Write merged files into DIR instead of updating in place")
    extract.add_argument("--marker", dest="markers", action="append", metavar="NAME",
                         help="Translation function name (repeatable)")
    extract.add_argument("--arg-pos", dest="arg_pos", type=int, help="Argument holding the key")
    extract.add_argument("--members", action="store_true", default=None,
                         help="Also match obj.marker(...) calls")
    extract.add_argument("--parser", help="auto, javascript or python")
    extract.add_argument("--sort", help="msgid, file or source, with optional -asc/-desc")
    extract.add_argument("--replace", action="store_true", default=None,
                         help="Drop entries no longer found in source")
    extract.add_argument("--no-references", dest="references", action="store_false", default=None,
                         help="Do not write reference comments")
    extract.add_argument("--no-comments", dest="comments", action="store_false", default=None,
                         help="Do not write extracted comments")
    extract.add_argument("--dry-run", dest="dry_run", action="store_true", default=None,
                         help="Merge and report, but write nothing")
    extract.add_argument("--force", dest="force_save", action="store_true", default=None,
                         help="Write files even when nothing changed")
    git = extract.add_mutually_exclusive_group()
    git.add_argument("--no-git-check", dest="git_check", action="store_false", default=None,
                     help="Write over catalogs with uncommitted changes")
    git.add_argument("--tracked-only", dest="git_check", action="store_const",
                     const=GIT_CHECK_TRACKED_ONLY, help="Allow writing over untracked catalogs")

    audit = sub.add_parser("audit", parents=[common], help="Report untranslated messages")
    audit.add_argument("globs", nargs="+", metavar="GLOB", help="PO file globs")
    return parser


def _setup_logging(verbose: int, quiet: bool):
    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(name)s: %(message)s")


_OPTION_KEYS = (
    "base_dir", "context", "markers", "arg_pos", "members", "parser", "sort", "replace",
    "references", "comments", "dry_run", "force_save", "git_check",
)


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    return {
        key: getattr(args, key)
        for key in _OPTION_KEYS
        if getattr(args, key, None) is not None
    }


def _run_extract(args: argparse.Namespace, settings: Settings) -> int:
    from poextract.services.extractor import Extractor
    from poextract.services.po_merge import PoMerger

    extractor = Extractor(settings)
    messages = extractor.extract(args.sources)
    print(f"Extracted {len(messages)} messages from {len(extractor.files)} files")

    merger = PoMerger(settings)
    if args.po_to:
        results = merger.merge_pos_to(args.po, args.po_to, messages)
    else:
        results = merger.merge_pos(args.po, messages)
    for result in results:
        counts = ", ".join(f"{kind} {n}" for kind, n in result.counts.items())
        state = "written" if result.written else "unchanged"
        print(f"{result.file}: {counts} ({state})")
    return EXIT_OK


def _run_audit(args: argparse.Namespace, settings: Settings) -> int:
    from poextract.services.auditor import Auditor, format_results

    results = Auditor(settings).get_results(args.globs)
    for line in format_results(results):
        print(line)
    if any(not r.complete for r in results):
        return EXIT_UNTRANSLATED
    return EXIT_OK


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose, args.quiet)
    try:
        settings = Settings.load(args.config, **_overrides(args))
        if args.command == "extract":
            return _run_extract(args, settings)
        return _run_audit(args, settings)
    except PoExtractError as e:
        logger.error("%s: %s", type(e).__name__, e)
        return EXIT_ERROR
    except OSError as e:
        logger.error("%s", e)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
