from protrack.common import ensure_directory, format_currency, format_date, format_month, safe_filename


def test_format_currency():
    assert format_currency(1234.5, symbol='₹') == '₹1,234.5'
    assert format_currency(1200, symbol='$') == '$1,200'
    assert format_currency(99.999, symbol='') == '100'
    assert format_currency(0, include_sign=False) == '0'
    assert format_currency(-0.001, include_sign=False) == '0'
    assert format_currency(None, include_sign=False) == '0'


def test_format_date():
    assert format_date('2024-06-01') == '1 Jun 2024'
    assert format_date('someday') == 'someday'
    assert format_date(None) == ''


def test_format_month():
    assert format_month(6, 2024) == 'June 2024'
    assert format_month(1, 2025) == 'January 2025'


def test_safe_filename():
    assert safe_filename('time entries!') == 'time_entries'
    assert safe_filename('a  b') == 'a_b'
    assert safe_filename('', default='expenses') == 'expenses'
    assert safe_filename('***') == 'export'
    assert safe_filename('abcdef', max_length=3) == 'abc'


def test_ensure_directory(tmp_path):
    target = tmp_path / 'a' / 'b'
    assert ensure_directory(target) == target
    assert target.is_dir()
