"""Unit tests for row parsing, field decoding and relationship extraction."""
import pytest
import requests

import csv_utils
from csv_utils import (
    EmptyInputError, SourceUnavailableError, Record, Relationship,
    parse_csv_line, parse_csv_rows, decode_record, decode_records, split_list,
    extract_relationships, extract_freeform_relationships, extract_amount,
    read_csv_source,
)


# --- Row parser ---

def test_parse_csv_line_trims_values():
    assert parse_csv_line(" Alice , Hired Bob ,x") == ['Alice', 'Hired Bob', 'x']


def test_quoted_delimiter_is_literal():
    values = parse_csv_line('Alice,"Hired Bob, Jr.",,,,')
    assert values[1] == 'Hired Bob, Jr.'
    assert len(values) == 6


def test_doubled_quote_is_literal_quote():
    assert parse_csv_line('a,"b ""quoted"" c",d') == ['a', 'b "quoted" c', 'd']


def test_unbalanced_quote_does_not_raise():
    assert parse_csv_line('Alice,"Hired Bob,x') == ['Alice', 'Hired Bob,x']


def test_pipe_delimiter():
    assert parse_csv_line('Alice|Hired Bob|"Q1|Q2"', delimiter='|') == ['Alice', 'Hired Bob', 'Q1|Q2']


def test_rows_skip_header_and_blank_lines(scenario_a):
    text = scenario_a.replace('\nBob', '\n\n   \nBob')
    rows = parse_csv_rows(text)
    assert [r[0] for r in rows] == ['Alice', 'Bob', 'Charlie']


def test_rows_quoted_newline_stays_in_field():
    text = 'Name,Influence,Ventures,Connections,Quotes,Image\nAlice,,,,"Line one\nline two",\nBob,,,,,'
    rows = parse_csv_rows(text)
    assert len(rows) == 2
    assert rows[0][4] == 'Line one\nline two'


def test_rows_unterminated_quote_keeps_following_lines():
    text = 'Name,Influence,Ventures,Connections,Quotes,Image\nAlice,"Hired Bob,,,,\nBob,,,,,'
    rows = parse_csv_rows(text)
    assert [r[0] for r in rows] == ['Alice', 'Bob']


def test_rows_mid_value_quotes_stay_on_their_line():
    text = (
        'Name,Influence,Ventures,Connections,Quotes,Image\n'
        'Alice,Friends with Bob,,,He said "hi,\n'
        'Bob,Hired Carol,,,,\n'
        'Carol,,,,,\n'
        'Dan,,,,Quote 5",\n'
    )
    rows = parse_csv_rows(text)
    assert [r[0] for r in rows] == ['Alice', 'Bob', 'Carol', 'Dan']
    assert rows[1][1] == 'Hired Carol'


def test_rows_stray_closing_quote_ends_record_at_first_line():
    text = (
        'Name,Influence,Ventures,Connections,Quotes,Image\n'
        'Alice,"Hired Bob,,,,\n'
        'Bob,,,,Quote "x",\n'
        'Carol,,,,,'
    )
    rows = parse_csv_rows(text)
    assert [r[0] for r in rows] == ['Alice', 'Bob', 'Carol']


def test_rows_crlf_and_bom():
    text = '\ufeffName,Influence\r\nAlice,Hired Bob\r\nBob,\r\n'
    rows = parse_csv_rows(text)
    assert rows == [['Alice', 'Hired Bob'], ['Bob', '']]


@pytest.mark.parametrize("text", ["", "   ", "\n\n \t\n"])
def test_empty_input_is_fatal(text):
    with pytest.raises(EmptyInputError):
        parse_csv_rows(text)


def test_header_only_gives_no_rows():
    assert parse_csv_rows("Name,Influence,Ventures,Connections,Quotes,Image\n") == []


# --- Field decoder ---

def test_split_list_empty_string_is_empty():
    assert split_list('') == []
    assert split_list(None) == []
    assert split_list(' A ; ;B ') == ['A', 'B']


def test_decode_record_full_row():
    record = decode_record(['Alice', 'Hired Bob', 'V1; V2', 'Bob;Carol', 'Q1 | Q2', '/public/a.jpg'])
    assert record == Record(
        name='Alice', influence_raw='Hired Bob', ventures=['V1', 'V2'],
        connections=['Bob', 'Carol'], quotes=['Q1', 'Q2'], image='/public/a.jpg',
    )


def test_decode_record_pads_missing_columns():
    record = decode_record(['Alice'])
    assert record.ventures == [] and record.quotes == [] and record.image == ''


def test_decode_record_without_name_fails_closed():
    assert decode_record(['', 'Hired Bob']) is None
    assert decode_record([]) is None
    assert [r.name for r in decode_records([['', 'x'], ['Bob']])] == ['Bob']


# --- Relationship extractor ---

def test_vocabulary_extraction():
    rels = extract_relationships("Friends with Bob; Hired Charlie ;;Worked for Acme Corp")
    assert [(r.kind, r.target_name) for r in rels] == [
        ('Friends with', 'Bob'), ('Hired', 'Charlie'), ('Worked for', 'Acme Corp'),
    ]


def test_unknown_phrase_and_empty_target_are_dropped():
    assert extract_relationships("Advised Bob;Hired ;hired Bob") == []
    assert extract_relationships("") == []
    assert extract_relationships(None) == []


def test_first_matching_prefix_wins():
    rels = extract_relationships("Donated to Contributed to Fund")
    assert rels == [Relationship('Donated to', 'Contributed to Fund', 'Donated to Contributed to Fund')]


def test_amount_is_extracted():
    rels = extract_relationships("Donated to Tech Corp ($5M)")
    assert rels[0].amount == '$5M'
    assert extract_amount("Contributed $1.2B over ten years") == '$1.2B'
    assert extract_amount("Hired Bob") is None


def test_freeform_extraction():
    rels = extract_freeform_relationships("Friends with Bob;Mentor Charlie;Bob")
    assert [(r.kind, r.target_name) for r in rels] == [('Friends', 'Bob'), ('Mentor', 'Charlie')]


def test_freeform_splits_on_first_with():
    rels = extract_freeform_relationships("Partnered with Bob with care")
    assert (rels[0].kind, rels[0].target_name) == ('Partnered', 'Bob with care')


# --- Source reader ---

def test_read_local_file(tmp_path, scenario_a):
    path = tmp_path / 'network.csv'
    path.write_text(scenario_a, encoding='utf-8')
    assert read_csv_source(path) == scenario_a


def test_read_missing_file_is_source_unavailable(tmp_path):
    with pytest.raises(SourceUnavailableError):
        read_csv_source(tmp_path / 'missing.csv')


class _FakeResponse:
    def __init__(self, text, status=200):
        self.text = text
        self.status_code = status
        self.encoding = 'utf-8'

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


def test_read_url(monkeypatch, scenario_a):
    monkeypatch.setattr(csv_utils.requests, 'get', lambda url, timeout: _FakeResponse(scenario_a))
    assert read_csv_source('https://example.org/network.csv') == scenario_a


def test_read_url_http_error(monkeypatch):
    monkeypatch.setattr(csv_utils.requests, 'get', lambda url, timeout: _FakeResponse('', status=404))
    with pytest.raises(SourceUnavailableError):
        read_csv_source('https://example.org/missing.csv')


def test_read_url_network_failure(monkeypatch):
    def boom(url, timeout):
        raise requests.ConnectionError("unreachable")
    monkeypatch.setattr(csv_utils.requests, 'get', boom)
    with pytest.raises(SourceUnavailableError) as excinfo:
        read_csv_source('http://example.org/network.csv')
    assert isinstance(excinfo.value.__cause__, requests.ConnectionError)
