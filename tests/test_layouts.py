# tests/test_layouts.py
"""
Tests for dbdump layouts.
Every layout gets the same header/row/footer calls; only the bytes differ.
"""

import codecs
import csv
import io
import json
from datetime import date, datetime
from decimal import Decimal

import pytest

from dbdump.defaults import settings
from dbdump.exceptions import EncodeError, SinkError
from dbdump.layouts import (
    CSVExcelRenderer, CSVRenderer, JSONArrayHeaderRenderer, JSONArrayRenderer,
    JSONLinesRenderer, JSONObjectRenderer, LAYOUTS, TextRenderer,
    create_renderer, get_all_layouts, get_layout, register_layout
)


class BrokenSink(io.StringIO):
    """Sink that fails every write."""

    def write(self, s):
        raise OSError('No space left on device')


def render(renderer, columns, rows):
    renderer.write_header(columns)
    for row in rows:
        renderer.write_row(row)
    renderer.write_footer()
    return renderer


class TestBaseRenderer:
    """Call order and error translation shared by all layouts."""

    def test_row_before_header(self, sink):
        renderer = JSONArrayRenderer(sink)
        with pytest.raises(RuntimeError, match='before header'):
            renderer.write_row([1])
        assert sink.getvalue() == ''

    def test_header_twice(self, sink):
        renderer = CSVRenderer(sink)
        renderer.write_header(['a'])
        with pytest.raises(RuntimeError, match='already written'):
            renderer.write_header(['a'])

    def test_footer_twice(self, sink):
        renderer = TextRenderer(sink)
        renderer.write_header(None)
        renderer.write_footer()
        with pytest.raises(RuntimeError):
            renderer.write_footer()

    def test_row_after_footer(self, sink):
        renderer = TextRenderer(sink)
        renderer.write_header(['a'])
        renderer.write_footer()
        with pytest.raises(RuntimeError, match='after footer'):
            renderer.write_row([1])

    def test_row_count(self, sink):
        renderer = render(JSONLinesRenderer(sink), ['a'], [[1], [2], [3]])
        assert renderer.row_count == 3

    def test_sink_error(self):
        renderer = JSONArrayRenderer(BrokenSink())
        with pytest.raises(SinkError, match='No space left'):
            renderer.write_header(['a'])

    def test_defaults_to_stdout(self, capsys):
        render(TextRenderer(), ['a', 'b'], [['x', 'y']])
        assert capsys.readouterr().out == 'x y\n'


class TestTextRenderer:
    """Tests for the plain text layout."""

    def test_space_joined(self, sink):
        render(TextRenderer(sink), ['id', 'name'], [[1, 'Aang'], [2, 'Katara']])
        assert sink.getvalue() == '1 Aang\n2 Katara\n'

    def test_header_not_written(self, sink):
        render(TextRenderer(sink), ['id', 'name'], [])
        assert sink.getvalue() == ''

    def test_null_and_datetime(self, sink):
        render(TextRenderer(sink), ['a', 'b'], [[None, datetime(2024, 1, 15, 8, 30)]])
        assert sink.getvalue() == 'NULL 2024-01-15 08:30:00\n'

    def test_custom_null_string(self, sink):
        render(TextRenderer(sink, null_string='-'), ['a'], [[None]])
        assert sink.getvalue() == '-\n'

    def test_binary_value(self, sink):
        render(TextRenderer(sink), ['a'], [[b'raw bytes']])
        assert sink.getvalue() == 'raw bytes\n'


class TestCSVRenderer:
    """Tests for the CSV layout."""

    def test_header_and_rows(self, sink):
        render(CSVRenderer(sink), ['id', 'name'], [[1, 'Aang'], [2, None]])
        assert sink.getvalue() == 'id,name\n1,Aang\n2,\n'

    def test_quoting_round_trip(self, sink):
        value = 'a,"b'
        render(CSVRenderer(sink), ['id', 'text'], [[1, value]])
        assert sink.getvalue().splitlines()[1] == '1,"a,""b"'

        rows = list(csv.reader(io.StringIO(sink.getvalue())))
        assert rows == [['id', 'text'], ['1', value]]

    def test_embedded_newline_round_trip(self, sink):
        render(CSVRenderer(sink), ['text'], [['line one\nline two']])
        rows = list(csv.reader(io.StringIO(sink.getvalue())))
        assert rows[1] == ['line one\nline two']

    def test_empty_result_writes_nothing(self, sink):
        render(CSVRenderer(sink), None, [])
        assert sink.getvalue() == ''

    def test_binary_converted_to_text(self, sink):
        render(CSVRenderer(sink), ['bio'], [[b'earth, metal']])
        rows = list(csv.reader(io.StringIO(sink.getvalue())))
        assert rows[1] == ['earth, metal']

    def test_dates_use_configured_format(self, sink):
        settings['date_format'] = '%d/%m/%Y'
        from dbdump.utils import reset_format_cache
        reset_format_cache()

        render(CSVRenderer(sink), ['d'], [[date(2024, 12, 25)]])
        assert sink.getvalue() == 'd\n25/12/2024\n'

    def test_null_string(self, sink):
        render(CSVRenderer(sink, null_string='NULL'), ['a'], [[None]])
        assert sink.getvalue() == 'a\nNULL\n'

    def test_custom_delimiter(self, sink):
        render(CSVRenderer(sink, delimiter='\t'), ['a', 'b'], [[1, 2]])
        assert sink.getvalue() == 'a\tb\n1\t2\n'

    def test_rows_of_different_width(self, sink):
        renderer = CSVRenderer(sink)
        renderer.write_header(['a', 'b'])
        renderer.write_row([1, 2])
        renderer.write_row([3])
        renderer.write_footer()
        assert sink.getvalue() == 'a,b\n1,2\n3\n'


class TestCSVExcelRenderer:
    """Tests for the Excel flavoured CSV layout."""

    def test_bom_and_separator_hint(self):
        sink = io.BytesIO()
        render(CSVExcelRenderer(sink), ['id', 'name'], [[1, 'Aang'], [2, 'Katara']])
        data = sink.getvalue()

        assert data.startswith(codecs.BOM_UTF16_LE)
        text = data[len(codecs.BOM_UTF16_LE):].decode('utf-16-le')
        assert text == 'sep=;\nid;name\n1;Aang\n2;Katara\n'

    def test_hint_before_any_content_when_empty(self):
        sink = io.BytesIO()
        render(CSVExcelRenderer(sink), None, [])
        assert sink.getvalue() == codecs.BOM_UTF16_LE + 'sep=;\n'.encode('utf-16-le')

    def test_quotes_semicolons(self):
        sink = io.BytesIO()
        render(CSVExcelRenderer(sink), ['text'], [['a;b']])
        text = sink.getvalue().decode('utf-16')
        rows = list(csv.reader(io.StringIO(text), delimiter=';'))
        assert rows == [['sep=', ''], ['text'], ['a;b']]

    def test_writes_to_binary_layer_of_text_sink(self):
        raw = io.BytesIO()
        sink = io.TextIOWrapper(raw, encoding='utf-8', newline='')
        render(CSVExcelRenderer(sink), ['a'], [['é']])
        assert raw.getvalue().decode('utf-16') == 'sep=;\na\né\n'

    def test_separator_from_settings(self):
        settings['excel_separator'] = '\t'
        sink = io.BytesIO()
        render(CSVExcelRenderer(sink), ['a', 'b'], [[1, 2]])
        assert sink.getvalue().decode('utf-16') == 'sep=\t\na\tb\n1\t2\n'

    def test_text_only_sink_rejected(self):
        with pytest.raises(TypeError, match='binary sink'):
            CSVExcelRenderer(io.StringIO())


class TestJSONLinesRenderer:
    """Tests for the JSON Lines layout."""

    def test_header_then_rows(self, sink):
        render(JSONLinesRenderer(sink), ['id', 'name'], [[1, 'Aang'], [2, 'Katara']])
        assert sink.getvalue() == '["id","name"]\n[1,"Aang"]\n[2,"Katara"]\n'

    def test_round_trip(self, sink):
        render(JSONLinesRenderer(sink), ['a', 'b', 'c'], [['a', 42, None]])
        lines = sink.getvalue().splitlines()
        assert json.loads(lines[1]) == ['a', 42, None]

    def test_no_html_escaping(self, sink):
        render(JSONLinesRenderer(sink), ['a'], [['<b>Tom & Jerry</b>']])
        line = sink.getvalue().splitlines()[1]
        assert line == '["<b>Tom & Jerry</b>"]'
        assert json.loads(line) == ['<b>Tom & Jerry</b>']

    def test_non_ascii_kept(self, sink):
        render(JSONLinesRenderer(sink), ['a'], [['Zuko 🔥']])
        assert sink.getvalue().splitlines()[1] == '["Zuko 🔥"]'

    def test_empty_result(self, sink):
        render(JSONLinesRenderer(sink), None, [])
        assert sink.getvalue() == ''


class TestJSONArrayRenderer:
    """Tests for the JSON array-of-arrays document layout."""

    def test_framing(self, sink):
        render(JSONArrayRenderer(sink), ['id', 'name'], [[1, 'x'], [2, 'y']])
        assert sink.getvalue() == '[\n [1,"x"]\n,[2,"y"]\n]\n'
        assert json.loads(sink.getvalue()) == [[1, 'x'], [2, 'y']]

    def test_empty_document(self, sink):
        render(JSONArrayRenderer(sink), None, [])
        assert sink.getvalue() == '[\n]\n'
        assert json.loads(sink.getvalue()) == []

    def test_header_only(self, sink):
        render(JSONArrayRenderer(sink), ['id'], [])
        assert json.loads(sink.getvalue()) == []

    def test_temporal_and_decimal_values(self, sink):
        row = [datetime(2024, 1, 15, 8, 30), date(2024, 1, 15), Decimal('10.10'), b'bin']
        render(JSONArrayRenderer(sink), ['a', 'b', 'c', 'd'], [row])
        assert json.loads(sink.getvalue()) == [['2024-01-15T08:30:00', '2024-01-15', '10.10', 'bin']]

    def test_nan_is_encode_error(self, sink):
        renderer = JSONArrayRenderer(sink)
        renderer.write_header(['a'])
        with pytest.raises(EncodeError):
            renderer.write_row([float('nan')])

    def test_unknown_object_is_encode_error(self, sink):
        renderer = JSONArrayRenderer(sink)
        renderer.write_header(['a'])
        with pytest.raises(EncodeError, match='not JSON serializable'):
            renderer.write_row([object()])

    def test_failed_row_leaves_document_open(self, sink):
        renderer = JSONArrayRenderer(sink)
        renderer.write_header(['a'])
        renderer.write_row([1])
        with pytest.raises(EncodeError):
            renderer.write_row([object()])
        assert sink.getvalue() == '[\n [1]\n'


class TestJSONArrayHeaderRenderer:
    """Tests for the JSON array document with a header element."""

    def test_header_is_first_element(self, sink):
        render(JSONArrayHeaderRenderer(sink), ['id', 'name'], [[1, 'x']])
        assert sink.getvalue() == '[\n ["id","name"]\n,[1,"x"]\n]\n'

    def test_header_not_escaped(self, sink):
        render(JSONArrayHeaderRenderer(sink), ['<n>&m', 'caf\u00e9'], [])
        assert sink.getvalue() == '[\n ["<n>&m","caf\u00e9"]\n]\n'

    def test_empty_document(self, sink):
        render(JSONArrayHeaderRenderer(sink), None, [])
        assert json.loads(sink.getvalue()) == []


class TestJSONObjectRenderer:
    """Tests for the JSON array-of-objects document layout."""

    def test_objects(self, sink):
        render(JSONObjectRenderer(sink), ['id', 'name'], [[1, 'x'], [2, 'y']])
        assert sink.getvalue() == '[\n {"id":1,"name":"x"}\n,{"id":2,"name":"y"}\n]\n'
        assert json.loads(sink.getvalue()) == [{'id': 1, 'name': 'x'}, {'id': 2, 'name': 'y'}]

    def test_key_fragments_cached(self, sink):
        renderer = JSONObjectRenderer(sink)
        renderer.write_header(['id', 'full "name"'])
        assert renderer.keys == ['"id":', ',"full \\"name\\"":']

    def test_empty_document(self, sink):
        render(JSONObjectRenderer(sink), None, [])
        assert sink.getvalue() == '[\n]\n'

    def test_null_and_binary(self, sink):
        render(JSONObjectRenderer(sink), ['bio', 'born'], [[b'<earth>', None]])
        assert json.loads(sink.getvalue()) == [{'bio': '<earth>', 'born': None}]

    def test_width_mismatch(self, sink):
        renderer = JSONObjectRenderer(sink)
        renderer.write_header(['a', 'b'])
        with pytest.raises(EncodeError, match='1 values for 2 column names'):
            renderer.write_row([1])

    def test_bad_value_writes_nothing_for_row(self, sink):
        renderer = JSONObjectRenderer(sink)
        renderer.write_header(['a', 'b'])
        with pytest.raises(EncodeError):
            renderer.write_row([1, object()])
        assert sink.getvalue() == '[\n'


class TestRegistry:
    """Tests for layout registration and lookup."""

    def test_builtin_layouts(self):
        assert set(get_all_layouts()) == {
            'text', 'csv', 'csv-Excel', 'json-lines-array',
            'json-array', 'json-array-header', 'json-object'
        }

    def test_help_text(self):
        assert get_all_layouts()['csv'] == 'CSV output'

    def test_create_renderer(self, sink):
        renderer = create_renderer('json-object', sink)
        assert isinstance(renderer, JSONObjectRenderer)
        assert renderer.sink is sink
        assert renderer.name == 'json-object'

    def test_create_renderer_kwargs(self, sink):
        renderer = create_renderer('csv', sink, null_string='\\N')
        assert renderer.null_string == '\\N'

    def test_default_layout_is_text(self):
        assert get_layout() is TextRenderer

    def test_default_layout_from_settings(self):
        settings['default_layout'] = 'json-array'
        assert get_layout() is JSONArrayRenderer

    def test_unknown_layout(self):
        with pytest.raises(ValueError, match="Unknown layout 'xml'"):
            get_layout('xml')

    def test_register_decorator(self, sink):
        @register_layout('tsv', 'Tab separated output')
        class TSVRenderer(CSVRenderer):
            def __init__(self, sink=None, **kwargs):
                super().__init__(sink, delimiter='\t', **kwargs)

        try:
            render(create_renderer('tsv', sink), ['a', 'b'], [[1, 2]])
            assert sink.getvalue() == 'a\tb\n1\t2\n'
            assert get_all_layouts()['tsv'] == 'Tab separated output'
        finally:
            del LAYOUTS['tsv']

    def test_register_rejects_non_renderer(self):
        with pytest.raises(TypeError):
            register_layout('bogus', renderer=dict)
