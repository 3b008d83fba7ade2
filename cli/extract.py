import json
import sys
from pathlib import Path

from infra.errors import ExtractionError
from pipeline.extract import extract, get_template, list_templates
from cli.convert import add_scribe_arguments, scribe_options


def cmd_extract(args):
    schema = None
    if args.schema:
        try:
            schema = json.loads(Path(args.schema).read_text(encoding='utf-8'))
        except (OSError, json.JSONDecodeError) as e:
            print(f"❌ Cannot read schema {args.schema}: {e}", file=sys.stderr)
            sys.exit(1)

    options = scribe_options(args)
    try:
        result = extract(
            args.file,
            schema=schema,
            template=args.template,
            parse_model=args.parse_model,
            auto_schema=args.auto_schema,
            additional_prompt=args.prompt,
            **options,
        )
    except ExtractionError as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(result.model_dump(), indent=2))

    if not result.success:
        print(f"⚠️  Extracted from a partial transcription, missing pages {result.failed_pages}: {result.error}", file=sys.stderr)
        sys.exit(2)


def cmd_templates(args):
    for name in list_templates():
        fields = get_template(name)
        print(f"{name:<20} {', '.join(field['name'] for field in fields)}")


def setup_extract_parser(subparsers):
    extract_parser = subparsers.add_parser('extract', help='Extract structured JSON from a document')
    add_scribe_arguments(extract_parser)
    source = extract_parser.add_mutually_exclusive_group()
    source.add_argument('--template', help='Built-in template name (see: scribe templates)')
    source.add_argument('--schema', help='Path to a JSON field-list schema')
    source.add_argument('--auto-schema', action='store_true', help='Let the model propose a schema')
    extract_parser.add_argument('--parse-model', help='Model for the extraction call (default: --model)')
    extract_parser.add_argument('--prompt', help='Extra extraction instructions')
    extract_parser.set_defaults(func=cmd_extract)


def setup_templates_parser(subparsers):
    templates_parser = subparsers.add_parser('templates', help='List built-in extraction templates')
    templates_parser.set_defaults(func=cmd_templates)
