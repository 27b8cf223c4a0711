#import modules
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

import requests

from config import (
    FETCH_TIMEOUT, CSV_ENCODING, COLUMNS,
    LIST_SEPARATOR, QUOTE_SEPARATOR, RELATIONSHIP_TYPES,
)

AMOUNT_PATTERN = re.compile(r"\$\d[\d.,]*[KMB]?")

## 0. Errors

class NetworkDataError(Exception):
    """Base class for everything the influence network pipeline raises."""


class SourceUnavailableError(NetworkDataError):
    """The CSV could not be read or fetched. Retrying may help."""


class EmptyInputError(NetworkDataError):
    """The CSV text is empty or whitespace only."""


class GraphValidationError(NetworkDataError):
    """A graph does not satisfy the node/edge model."""


## 1. Reading the source

def read_csv_source(source : Union[str, Path], timeout : float = FETCH_TIMEOUT, encoding : str = CSV_ENCODING) -> str:
    r"""Return the full CSV text behind `source`.
    `source` is either a local path or an `http://` / `https://` URL.
    Any read or network failure is raised as `SourceUnavailableError`; no partial text is returned.
    """
    source = str(source)
    if source.startswith(('http://', 'https://')):
        try:
            response = requests.get(source, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise SourceUnavailableError(f"Failed to fetch CSV from {source}: {exc}") from exc
        response.encoding = response.encoding or 'utf-8'
        return response.text.lstrip('\ufeff')
    try:
        with open(source, 'r', encoding=encoding, newline='') as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceUnavailableError(f"Failed to read CSV file {source}: {exc}") from exc

## 2. Row parsing

def parse_csv_line(line : str, delimiter : str = ',') -> List[str]:
    r"""Split one record into trimmed values.
    A `"` toggles quoted mode, in which `delimiter` is literal. A doubled quote inside a quoted span
    is a literal quote and does not toggle. Unbalanced quotes never raise.
    """
    values = []
    current = []
    in_quotes = False
    i = 0
    while i < len(line):
        char = line[i]
        if char == '"':
            if in_quotes and i + 1 < len(line) and line[i + 1] == '"':
                current.append('"')
                i += 2
                continue
            in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            values.append(''.join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1
    values.append(''.join(current).strip())
    return values

def split_csv_records(text : str, delimiter : str = ',') -> List[str]:
    r"""Split raw text into records on newlines that are outside a quoted field.
    Only a `"` at the start of a field opens a quoted field; a `"` in the middle of a value stays on its line.
    A quoted field may span lines only if it closes right before a delimiter or a line end. Otherwise
    (stray closing quote, or end of text still inside the quote) the record ends at its first line and
    scanning resumes on the next one, so one malformed row never swallows the rows after it.
    """
    records = []
    start = i = 0
    in_quotes = False
    field_start = True
    span_newline = None
    while i < len(text) or (in_quotes and span_newline is not None):
        if i >= len(text):
            i, in_quotes = span_newline, False
        char = text[i]
        if in_quotes:
            if char == '"' and text[i + 1:i + 2] == '"':
                i += 2
                continue
            if char != '"':
                if char == '\n' and span_newline is None:
                    span_newline = i
                i += 1
                continue
            in_quotes = False
            if span_newline is None or text[i + 1:i + 2] in (delimiter, '\r', '\n', ''):
                span_newline = None
                field_start = False
                i += 1
                continue
            i, char = span_newline, '\n'
        if char == '\n':
            records.append(text[start:i])
            start = i + 1
            field_start = True
            span_newline = None
        elif char == '"' and field_start:
            in_quotes = True
            field_start = False
        else:
            field_start = char == delimiter or (field_start and char in ' \t')
        i += 1
    records.append(text[start:])
    return records

def parse_csv_rows(text : str, delimiter : str = ',') -> List[List[str]]:
    r"""Turn CSV text into one value list per data record.
    Blank records are skipped. The first non-blank record is the header and is never returned.
    Raises `EmptyInputError` for empty or whitespace-only text.
    """
    if text is None or not text.strip():
        raise EmptyInputError("CSV input is empty")
    text = text.lstrip('\ufeff')
    rows = []
    header_seen = False
    for record in split_csv_records(text, delimiter):
        if not record.strip():
            continue
        if not header_seen:
            header_seen = True
            continue
        rows.append(parse_csv_line(record, delimiter))
    return rows

## 3. Field decoding

@dataclass
class Record:
    name: str
    influence_raw: str = ''
    ventures: List[str] = field(default_factory=list)
    connections: List[str] = field(default_factory=list)
    quotes: List[str] = field(default_factory=list)
    image: str = ''


def split_list(value : Optional[str], separator : str = LIST_SEPARATOR) -> List[str]:
    r"""Split `value` on `separator`, trim the parts and drop the empty ones. Order is kept.
    """
    if not value:
        return []
    return [part.strip() for part in value.split(separator) if part.strip()]

def decode_record(values : List[str]) -> Optional[Record]:
    r"""Map positional values (Name, Influence, Ventures, Connections, Quotes, Image) to a `Record`.
    Missing trailing columns read as empty. Returns `None` when the name is empty.
    """
    values = list(values) + [''] * (len(COLUMNS) - len(values))
    name = values[0].strip()
    if not name:
        return None
    return Record(
        name=name,
        influence_raw=values[1],
        ventures=split_list(values[2], LIST_SEPARATOR),
        connections=split_list(values[3], LIST_SEPARATOR),
        quotes=split_list(values[4], QUOTE_SEPARATOR),
        image=values[5],
    )

def decode_records(rows : List[List[str]]) -> List[Record]:
    r"""Decode every row, silently skipping rows without a name.
    """
    records = []
    for values in rows:
        record = decode_record(values)
        if record is not None:
            records.append(record)
    return records

## 4. Relationship extraction

@dataclass(frozen=True)
class Relationship:
    kind: str
    target_name: str
    description: str = ''
    amount: Optional[str] = None


def extract_amount(item : str) -> Optional[str]:
    r"""Return the first money amount (`$5M`, `$1.2B`, `$250,000`) found in `item`, if any.
    """
    match = AMOUNT_PATTERN.search(item)
    return match.group(0) if match else None

def extract_relationships(influence_raw : Optional[str], vocabulary : List[str] = RELATIONSHIP_TYPES) -> List[Relationship]:
    r"""Parse the Influence field with the fixed `vocabulary` of relationship prefixes.
    Each `;`-separated item yields at most one relationship: the first prefix the item starts with
    (case-sensitive) is the kind, the trimmed remainder is the target. Unknown phrases and empty
    targets are dropped.
    """
    relationships = []
    for item in split_list(influence_raw, LIST_SEPARATOR):
        for kind in vocabulary:
            if item.startswith(kind):
                target = item[len(kind):].strip()
                if target:
                    relationships.append(Relationship(kind, target, item, extract_amount(item)))
                break
    return relationships

def extract_freeform_relationships(influence_raw : Optional[str]) -> List[Relationship]:
    r"""Parse the Influence field as `<label> with <target>` items, keeping the label verbatim.
    Without a `" with "` the last whitespace-delimited token is the target and the rest the label.
    Items with an empty label or target are dropped.
    """
    relationships = []
    for item in split_list(influence_raw, LIST_SEPARATOR):
        if ' with ' in item:
            label, target = item.split(' with ', 1)
        else:
            tokens = item.split()
            label, target = ' '.join(tokens[:-1]), tokens[-1]
        label, target = label.strip(), target.strip()
        if label and target:
            relationships.append(Relationship(label, target, item, extract_amount(item)))
    return relationships
