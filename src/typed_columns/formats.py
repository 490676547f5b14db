"""Serialization formats supported by the database and their capabilities."""

from __future__ import annotations

from enum import Enum


class Format(Enum):
    """Data formats, identified by their wire names."""

    ROW_BINARY = "RowBinary"
    ROW_BINARY_WITH_NAMES_AND_TYPES = "RowBinaryWithNamesAndTypes"
    TAB_SEPARATED = "TabSeparated"
    TAB_SEPARATED_RAW = "TabSeparatedRaw"
    TAB_SEPARATED_WITH_NAMES = "TabSeparatedWithNames"
    TAB_SEPARATED_WITH_NAMES_AND_TYPES = "TabSeparatedWithNamesAndTypes"
    ARROW = "Arrow"
    ARROW_STREAM = "ArrowStream"
    AVRO = "Avro"
    AVRO_CONFLUENT = "AvroConfluent"
    CSV = "CSV"
    CSV_WITH_NAMES = "CSVWithNames"
    CAPN_PROTO = "CapnProto"
    CUSTOM_SEPARATED = "CustomSeparated"
    CUSTOM_SEPARATED_IGNORE_SPACES = "CustomSeparatedIgnoreSpaces"
    JSON_COMPACT_EACH_ROW = "JSONCompactEachRow"
    JSON_COMPACT_EACH_ROW_WITH_NAMES_AND_TYPES = "JSONCompactEachRowWithNamesAndTypes"
    JSON = "JSON"
    JSON_AS_STRING = "JSONAsString"
    JSON_COMPACT = "JSONCompact"
    JSON_COMPACT_STRINGS_EACH_ROW = "JSONCompactStringsEachRow"
    JSON_COMPACT_STRINGS_EACH_ROW_WITH_NAMES_AND_TYPES = "JSONCompactStringsEachRowWithNamesAndTypes"
    JSON_COMPACT_STRINGS = "JSONCompactStrings"
    JSON_EACH_ROW = "JSONEachRow"
    JSON_EACH_ROW_WITH_PROGRESS = "JSONEachRowWithProgress"
    JSON_STRINGS_EACH_ROW = "JSONStringsEachRow"
    JSON_STRINGS_EACH_ROW_WITH_PROGRESS = "JSONStringsEachRowWithProgress"
    JSON_STRING_EACH_ROW = "JSONStringEachRow"
    JSON_STRINGS = "JSONStrings"
    LINE_AS_STRING = "LineAsString"
    MARKDOWN = "Markdown"
    MSG_PACK = "MsgPack"
    MYSQL_WIRE = "MySQLWire"
    NATIVE = "Native"
    NULL = "Null"
    ODBC_DRIVER2 = "ODBCDriver2"
    ORC = "ORC"
    PARQUET = "Parquet"
    POSTGRESQL_WIRE = "PostgreSQLWire"
    PRETTY = "Pretty"
    PRETTY_COMPACT = "PrettyCompact"
    PRETTY_COMPACT_MONO_BLOCK = "PrettyCompactMonoBlock"
    PRETTY_COMPACT_NO_ESCAPES = "PrettyCompactNoEscapes"
    PRETTY_NO_ESCAPES = "PrettyNoEscapes"
    PRETTY_SPACE = "PrettySpace"
    PRETTY_SPACE_NO_ESCAPES = "PrettySpaceNoEscapes"
    PROTOBUF = "Protobuf"
    PROTOBUF_SINGLE = "ProtobufSingle"
    RAW_BLOB = "RawBLOB"
    REGEXP = "Regexp"
    TSKV = "TSKV"
    TSV = "TSV"
    TSV_RAW = "TSVRaw"
    TSV_WITH_NAMES = "TSVWithNames"
    TSV_WITH_NAMES_AND_TYPES = "TSVWithNamesAndTypes"
    TEMPLATE = "Template"
    TEMPLATE_IGNORE_SPACES = "TemplateIgnoreSpaces"
    VALUES = "Values"
    VERTICAL = "Vertical"
    XML = "XML"

    @property
    def supports_input(self) -> bool:
        """Return whether the format can be used for input."""
        return _CAPABILITIES[self][0]

    @property
    def supports_output(self) -> bool:
        """Return whether the format can be used for output."""
        return _CAPABILITIES[self][1]

    @property
    def is_binary(self) -> bool:
        return _CAPABILITIES[self][2]

    @property
    def is_text(self) -> bool:
        return not self.is_binary

    @property
    def has_header(self) -> bool:
        """Return whether output in this format starts with names and/or types."""
        return self.supports_output and _CAPABILITIES[self][3]

    @property
    def is_row_based(self) -> bool:
        """Return whether data is read and written row by row.

        False means column, document or otherwise structured output, which
        cannot be streamed one record at a time.
        """
        return _CAPABILITIES[self][4]

    @property
    def default_input_format(self) -> Format:
        """Return the format to use for input, which usually has no header."""
        explicit = _DEFAULT_INPUTS.get(self)
        if explicit is not None:
            return explicit
        if self.supports_input:
            return self
        return Format.ROW_BINARY if self.is_binary else Format.TAB_SEPARATED

    @classmethod
    def of(cls, name: str) -> Format:
        """Get a format by its wire name."""
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"Unknown format '{name}'") from None


# (input, output, binary, header, row_based)
_CAPABILITIES: dict[Format, tuple[bool, bool, bool, bool, bool]] = {
    Format.ROW_BINARY: (True, True, True, False, True),
    Format.ROW_BINARY_WITH_NAMES_AND_TYPES: (True, True, True, True, True),
    Format.TAB_SEPARATED: (True, True, False, False, True),
    Format.TAB_SEPARATED_RAW: (True, True, False, False, True),
    Format.TAB_SEPARATED_WITH_NAMES: (True, True, False, True, True),
    Format.TAB_SEPARATED_WITH_NAMES_AND_TYPES: (True, True, False, True, True),
    Format.ARROW: (True, True, True, True, False),
    Format.ARROW_STREAM: (True, True, True, True, False),
    Format.AVRO: (True, True, True, True, False),
    Format.AVRO_CONFLUENT: (True, False, True, False, False),
    Format.CSV: (True, True, False, False, True),
    Format.CSV_WITH_NAMES: (True, True, False, True, True),
    Format.CAPN_PROTO: (True, False, True, False, False),
    Format.CUSTOM_SEPARATED: (True, True, False, False, True),
    Format.CUSTOM_SEPARATED_IGNORE_SPACES: (True, True, False, False, True),
    Format.JSON_COMPACT_EACH_ROW: (True, True, False, False, True),
    Format.JSON_COMPACT_EACH_ROW_WITH_NAMES_AND_TYPES: (True, True, False, True, True),
    Format.JSON: (False, True, False, False, False),
    Format.JSON_AS_STRING: (True, False, False, False, False),
    Format.JSON_COMPACT: (False, True, False, False, False),
    Format.JSON_COMPACT_STRINGS_EACH_ROW: (True, True, False, False, True),
    Format.JSON_COMPACT_STRINGS_EACH_ROW_WITH_NAMES_AND_TYPES: (True, True, False, True, True),
    Format.JSON_COMPACT_STRINGS: (False, True, False, False, False),
    Format.JSON_EACH_ROW: (True, True, False, False, True),
    Format.JSON_EACH_ROW_WITH_PROGRESS: (False, True, False, False, True),
    Format.JSON_STRINGS_EACH_ROW: (True, True, False, False, True),
    Format.JSON_STRINGS_EACH_ROW_WITH_PROGRESS: (False, True, False, False, True),
    Format.JSON_STRING_EACH_ROW: (False, False, False, False, True),
    Format.JSON_STRINGS: (False, True, False, False, False),
    Format.LINE_AS_STRING: (True, False, False, False, True),
    Format.MARKDOWN: (False, True, False, False, True),
    Format.MSG_PACK: (True, True, True, False, False),
    Format.MYSQL_WIRE: (False, True, True, False, False),
    Format.NATIVE: (True, True, True, True, False),
    Format.NULL: (False, True, False, False, False),
    Format.ODBC_DRIVER2: (False, True, True, False, False),
    Format.ORC: (True, False, True, True, False),
    Format.PARQUET: (True, True, True, True, False),
    Format.POSTGRESQL_WIRE: (False, True, True, False, False),
    Format.PRETTY: (False, True, False, False, False),
    Format.PRETTY_COMPACT: (False, True, False, False, False),
    Format.PRETTY_COMPACT_MONO_BLOCK: (False, True, False, False, False),
    Format.PRETTY_COMPACT_NO_ESCAPES: (False, True, False, False, False),
    Format.PRETTY_NO_ESCAPES: (False, True, False, False, False),
    Format.PRETTY_SPACE: (False, True, False, False, False),
    Format.PRETTY_SPACE_NO_ESCAPES: (False, True, False, False, False),
    Format.PROTOBUF: (True, True, True, True, False),
    Format.PROTOBUF_SINGLE: (True, True, True, True, False),
    Format.RAW_BLOB: (True, True, True, False, False),
    Format.REGEXP: (True, False, False, False, False),
    Format.TSKV: (True, True, False, False, False),
    Format.TSV: (True, True, False, False, True),
    Format.TSV_RAW: (True, True, False, False, True),
    Format.TSV_WITH_NAMES: (True, True, False, True, True),
    Format.TSV_WITH_NAMES_AND_TYPES: (True, True, False, True, True),
    Format.TEMPLATE: (True, True, False, True, True),
    Format.TEMPLATE_IGNORE_SPACES: (True, False, False, True, True),
    Format.VALUES: (True, True, False, False, True),
    Format.VERTICAL: (False, True, False, False, False),
    Format.XML: (False, True, False, False, False),
}

# Header-less counterparts used when sending data in a format with a header
_DEFAULT_INPUTS: dict[Format, Format] = {
    Format.ROW_BINARY_WITH_NAMES_AND_TYPES: Format.ROW_BINARY,
    Format.TAB_SEPARATED_WITH_NAMES: Format.TAB_SEPARATED,
    Format.TAB_SEPARATED_WITH_NAMES_AND_TYPES: Format.TAB_SEPARATED,
    Format.CSV_WITH_NAMES: Format.CSV,
    Format.JSON: Format.JSON_COMPACT_EACH_ROW,
    Format.JSON_COMPACT: Format.JSON_COMPACT_EACH_ROW,
    Format.JSON_COMPACT_STRINGS_EACH_ROW_WITH_NAMES_AND_TYPES: Format.JSON_COMPACT_STRINGS_EACH_ROW,
    Format.JSON_COMPACT_STRINGS: Format.JSON_COMPACT_STRINGS_EACH_ROW,
    Format.JSON_EACH_ROW_WITH_PROGRESS: Format.JSON_EACH_ROW,
    Format.JSON_STRINGS_EACH_ROW_WITH_PROGRESS: Format.JSON_STRINGS_EACH_ROW,
    Format.JSON_STRING_EACH_ROW: Format.JSON_STRINGS_EACH_ROW,
    Format.JSON_STRINGS: Format.JSON_STRINGS_EACH_ROW,
    Format.TSV_WITH_NAMES: Format.TSV,
    Format.TSV_WITH_NAMES_AND_TYPES: Format.TSV,
}
