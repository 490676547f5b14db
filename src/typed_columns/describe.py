"""Command-line tool that parses column declarations and prints their structure."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from typed_columns.column import ColumnDescriptor
from typed_columns.errors import TypeDeclarationError
from typed_columns.formats import Format
from typed_columns.parsing import ColumnParser


def format_column(column: ColumnDescriptor, indent: int = 0) -> list[str]:
    """Render a descriptor and its nested columns as indented lines."""
    label = column.name or "<anonymous>"
    details = [column.data_type.value]
    if column.nullable:
        details.append("nullable")
    if column.low_cardinality:
        details.append("low_cardinality")
    if column.fixed_length:
        details.append(f"fixed {column.estimated_length}B")
    if column.precision is not None:
        details.append(f"precision={column.precision}")
    if column.scale is not None:
        details.append(f"scale={column.scale}")
    if column.time_zone is not None:
        details.append(f"tz={column.time_zone}")
    if column.function is not None:
        details.append(f"function={column.function}")
    if column.enum_constants is not None:
        entries = ", ".join(f"{name}={code}" for name, code in column.enum_constants)
        details.append(f"values={{{entries}}}")

    lines = ["  " * indent + f"{label}: {column.original_type_name} ({', '.join(details)})"]
    for nested in column.nested_columns:
        lines.extend(format_column(nested, indent + 1))
    return lines


def format_capabilities(fmt: Format) -> list[str]:
    """Render the capability flags of a format."""
    return [
        f"{fmt.value}:",
        f"  input: {'yes' if fmt.supports_input else 'no'}",
        f"  output: {'yes' if fmt.supports_output else 'no'}",
        f"  binary: {'yes' if fmt.is_binary else 'no'}",
        f"  header: {'yes' if fmt.has_header else 'no'}",
        f"  row based: {'yes' if fmt.is_row_based else 'no'}",
        f"  default input: {fmt.default_input_format.value}",
    ]


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    arg_parser = argparse.ArgumentParser(
        description="Parse column type declarations and describe their structure"
    )
    arg_parser.add_argument(
        "declaration",
        nargs="?",
        help="Column declarations, e.g. \"a Nullable(UInt8), b Array(String)\"",
    )
    arg_parser.add_argument(
        "-n", "--name",
        type=str,
        help="Treat the declaration as a single type and give the column this name",
    )
    arg_parser.add_argument(
        "-j", "--json",
        action="store_true",
        help="Print the descriptors as JSON",
    )
    arg_parser.add_argument(
        "-f", "--format",
        type=str,
        help="Describe the capabilities of a data format instead",
    )
    arg_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = arg_parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s [%(levelname)s] %(message)s",
        )

    if args.format:
        try:
            fmt = Format.of(args.format)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print("\n".join(format_capabilities(fmt)))
        return 0

    if args.declaration is None:
        print("Error: A declaration is required unless -f/--format is given", file=sys.stderr)
        return 1

    parser = ColumnParser()
    try:
        if args.name is not None:
            columns = [parser.of(args.name, args.declaration)]
        else:
            columns = parser.parse(args.declaration)
    except TypeDeclarationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps([column.to_dict() for column in columns], indent=2))
    else:
        for column in columns:
            print("\n".join(format_column(column)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
