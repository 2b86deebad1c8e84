"""
Command line entry point.

    docfill inspect contract.docx [--json] [--form] [--select "Group=Option"]
    docfill fill contract.docx --values values.json --output filled.docx \
        --select "Service Options=Full Package" [--use-defaults] [--empty-mode empty]

.docx templates go through the python-docx adapter; any other file is read
and written as UTF-8 text. Values come from a .json object or from a form
printed by "inspect --form" and filled in by hand.
"""

import argparse
import json
import logging
import os
import sys
from typing import Dict, List, Optional

from docfill.config import configure_logging, get_settings
from docfill.placeholders import PlaceholderRegistry, fill_document, selection_identifiers
from docfill.utils.docx_io import fill_docx_template, read_docx_text
from docfill.utils.form_layout import filter_visible_fields, render_blank_form, values_from_completed_form

logger = logging.getLogger(__name__)


def _is_docx(path: str) -> bool:
    return path.lower().endswith(".docx")


def read_template_text(path: str) -> str:
    if _is_docx(path):
        return read_docx_text(path)
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def parse_selections(pairs: Optional[List[str]]) -> Optional[Dict[str, str]]:
    """Turns ["Service Options=Full Package", ...] into a group -> option mapping."""
    if not pairs:
        return None
    selections = {}
    for pair in pairs:
        group_name, separator, option = pair.partition("=")
        if not separator or not group_name.strip():
            raise ValueError(f"Invalid selection '{pair}', expected 'Group Name=Option'")
        selections[group_name.strip()] = option.strip()
    return selections


def describe_registry(registry: PlaceholderRegistry, selections: Optional[Dict[str, str]] = None) -> Dict:
    return {
        "fields": [
            {
                "key": group.canonical_key,
                "label": group.display_key,
                "type": group.type,
                "optional": group.is_optional,
                "default": group.default_value,
                "dependencies": group.conditional_dependencies,
                "placeholders": [v.original_placeholder for v in group.variants],
            }
            for group in registry.groups
        ],
        "conditional_groups": [
            {"name": g.group_name, "options": g.options, "dependent_fields": g.dependent_fields}
            for g in registry.conditional_groups
        ],
        "selection_flags": selection_identifiers(registry.conditional_groups, selections or {}),
    }


def load_values(path: str, registry: PlaceholderRegistry) -> Dict:
    """
    Reads fill values from a JSON object file or a completed plain-text form.

    Files ending in .json must hold an object keyed by field key; anything
    else is read as "Label: value" lines and matched to the registry's fields.
    """
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()
    if path.lower().endswith(".json"):
        values = json.loads(content)
        if not isinstance(values, dict):
            raise ValueError("values file must contain a JSON object")
        return values
    return values_from_completed_form(content, registry.groups)


def cmd_inspect(args) -> int:
    if not os.path.exists(args.template):
        logger.error(f"Template file not found at {args.template}")
        return 1

    try:
        text = read_template_text(args.template)
        selections = parse_selections(args.select)
    except Exception as e:
        logger.error(f"Could not inspect template {args.template}: {e}")
        return 1

    registry = PlaceholderRegistry.from_text(text, get_settings().control_prefixes)

    if args.form:
        fields = registry.groups
        if selections is not None:
            fields = filter_visible_fields(fields, selections)
        print(render_blank_form(fields), end="")
        return 0

    summary = describe_registry(registry, selections)
    if args.json:
        print(json.dumps(summary, indent=2, ensure_ascii=False))
        return 0

    print(f"Found {len(registry)} fields in {args.template}")
    for field in summary["fields"]:
        flags = [field["type"]]
        if field["optional"]:
            flags.append("optional")
        if field["default"] is not None:
            flags.append(f"default={field['default']}")
        line = f"  - {field['label']} ({', '.join(flags)})"
        if field["dependencies"]:
            line += f" [shown when: {', '.join(field['dependencies'])}]"
        print(line)

    for group in summary["conditional_groups"]:
        print(f"{group['name']}: {', '.join(group['options'])}")
    return 0


def cmd_fill(args) -> int:
    if not os.path.exists(args.template):
        logger.error(f"Template file not found at {args.template}")
        return 1
    if not os.path.exists(args.values):
        logger.error(f"Values file not found at {args.values}")
        return 1

    substitution_options = get_settings().substitution_options()
    try:
        text = read_template_text(args.template)
    except Exception as e:
        logger.error(f"Could not read template {args.template}: {e}")
        return 1

    try:
        registry = PlaceholderRegistry.from_text(text, substitution_options["reserved_prefixes"])
        values = load_values(args.values, registry)
        selections = parse_selections(args.select)
    except (OSError, UnicodeDecodeError, ValueError) as e:
        logger.error(f"Invalid input: {e}")
        return 1

    options = {}
    if args.use_defaults:
        options["use_defaults"] = True
    if args.match_case:
        options["match_case"] = True
    if args.empty_mode:
        options["empty_mode"] = args.empty_mode

    try:
        output_dir = os.path.dirname(args.output)
        if output_dir and not os.path.exists(output_dir):
            os.makedirs(output_dir)

        if _is_docx(args.template):
            fill_docx_template(args.template, values, args.output, selections=selections, **options)
        else:
            substitution_options.update(options)
            filled = fill_document(text, values, selections=selections, **substitution_options)
            with open(args.output, "w", encoding="utf-8") as f:
                f.write(filled)
            logger.info(f"Successfully created filled document: {args.output}")
    except Exception as e:
        logger.error(f"Could not fill {args.template}: {e}")
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Detect and fill {{placeholders}} in document templates.")
    parser.add_argument("--log-level", default=None, help="Logging level (default from DOCFILL_LOG_LEVEL)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    inspect_parser = subparsers.add_parser("inspect", help="List the fields and option groups of a template")
    inspect_parser.add_argument("template", help="Path to a .docx or text template")
    inspect_parser.add_argument("--json", action="store_true", help="Print the field list as JSON")
    inspect_parser.add_argument("--form", action="store_true", help="Print a blank plain-text form to fill in")
    inspect_parser.add_argument("--select", action="append", metavar="GROUP=OPTION",
                                help="Conditional option selection, repeatable")
    inspect_parser.set_defaults(func=cmd_inspect)

    fill_parser = subparsers.add_parser("fill", help="Fill a template with values from a JSON file or a completed form")
    fill_parser.add_argument("template", help="Path to a .docx or text template")
    fill_parser.add_argument("--values", required=True, help="JSON object mapping field keys to values, or a completed plain-text form")
    fill_parser.add_argument("--output", required=True, help="Path to save the filled document")
    fill_parser.add_argument("--select", action="append", metavar="GROUP=OPTION",
                             help="Conditional option selection, repeatable")
    fill_parser.add_argument("--use-defaults", action="store_true", help="Use placeholder defaults for missing values")
    fill_parser.add_argument("--match-case", action="store_true", help="Match value case to ALL CAPS/lowercase placeholders")
    fill_parser.add_argument("--empty-mode", choices=["emdash", "empty"], default=None,
                             help="Rendering of required fields without a value")
    fill_parser.set_defaults(func=cmd_fill)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
