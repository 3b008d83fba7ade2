import argparse
import json
import sys

from infra.errors import ScribeError
from pipeline.transcribe import scribe


def parse_pages(value: str):
    """'-1' -> -1, '4' -> 4, '2,5,7' -> [2, 5, 7]"""
    try:
        if ',' in value:
            return [int(part) for part in value.split(',') if part.strip()]
        return int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"invalid page selection {value!r} (use -1, a page number, or a comma-separated list)"
        )


def add_scribe_arguments(parser):
    """Options shared by every command that runs scribe()."""
    parser.add_argument('file', help='Document path or http(s) URL')
    parser.add_argument('--model', help='Vision model (default: $VISION_MODEL or gpt-4o-mini)')
    parser.add_argument('--api-key', help='API key (default: $OPENAI_API_KEY)')
    parser.add_argument('--pages', type=parse_pages, default=-1,
                        help='-1 for all pages, a page number, or a list like 2,5,7')
    parser.add_argument('--concurrency', type=int, default=10, help='Pages in flight at once (default: 10)')
    parser.add_argument('--maintain-format', action='store_true',
                        help='Process pages in order, giving each page the previous page as context')
    parser.add_argument('--temp-dir', help='Parent directory for the working directory')
    parser.add_argument('--no-cleanup', action='store_true', help='Keep the working directory')
    parser.add_argument('--log-dir', help='Write JSONL run logs here')
    parser.add_argument('--temperature', type=float)
    parser.add_argument('--top-p', type=float)
    parser.add_argument('--frequency-penalty', type=float)
    parser.add_argument('--presence-penalty', type=float)
    parser.add_argument('--max-tokens', type=int)


def scribe_options(args) -> dict:
    llm_params = {
        'temperature': args.temperature,
        'top_p': args.top_p,
        'frequency_penalty': args.frequency_penalty,
        'presence_penalty': args.presence_penalty,
        'max_tokens': args.max_tokens,
    }
    return {
        'api_key': args.api_key,
        'model': args.model,
        'pages_to_convert_as_images': args.pages,
        'concurrency': args.concurrency,
        'maintain_format': args.maintain_format,
        'temp_dir': args.temp_dir,
        'cleanup': not args.no_cleanup,
        'log_dir': args.log_dir,
        'llm_params': {k: v for k, v in llm_params.items() if v is not None},
    }


def cmd_convert(args):
    try:
        result = scribe(
            args.file,
            output_dir=args.output_dir,
            show_progress=not args.json,
            **scribe_options(args),
        )
    except ScribeError as e:
        print(f"❌ {type(e).__name__}: {e}", file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(json.dumps(result.model_dump(), indent=2))
    elif args.output_dir:
        print(f"📄 Wrote {args.output_dir}/{result.file_name}.md")
    else:
        print(result.markdown)

    if result.status != "success":
        print(f"⚠️  Missing pages {result.failed_pages}: {result.error}", file=sys.stderr)
        sys.exit(2)


def setup_convert_parser(subparsers):
    convert_parser = subparsers.add_parser('convert', help='Transcribe a document to markdown')
    add_scribe_arguments(convert_parser)
    convert_parser.add_argument('--output-dir', help='Write <file_name>.md here instead of stdout')
    convert_parser.add_argument('--json', action='store_true', help='Print the full result as JSON')
    convert_parser.set_defaults(func=cmd_convert)
