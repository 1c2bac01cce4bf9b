import threading
import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from b3history.parser import RecordError, map_record, parse_txt_file

HEADER = (
    "DataReferencia;CodigoInstrumento;AcaoAtualizacao;PrecoNegocio;"
    "QuantidadeNegociada;HoraFechamento;CodigoIdentificadorNegocio;"
    "TipoSessaoPregao;DataNegocio;CodigoParticipanteComprador;"
    "CodigoParticipanteVendedor"
)
NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)


def row(ticker="WINQ25", price="140750,00", qty="7", close="090000123", day="2025-06-02"):
    return f"2025-06-02;{ticker};0;{price};{qty};{close};10;1;{day};1;2"


def record(ticker="WINQ25", price="140750,00", qty="7", close="090000123", day="2025-06-02"):
    return row(ticker, price, qty, close, day).split(";")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("CSV_DELIMITER", raising=False)
    monkeypatch.delenv("SKIP_HEADER", raising=False)


def write(tmp_path, lines, name="trades.txt"):
    path = tmp_path / name
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return str(path)


def test_map_record_fields():
    trade = map_record(record(), NOW)
    assert trade.instrument_code == "WINQ25"
    assert trade.trade_price == Decimal("140750.00")
    assert trade.trade_quantity == 7
    assert trade.close_time == "090000123"
    assert trade.trade_date == datetime(2025, 6, 2, tzinfo=timezone.utc)
    assert trade.created_at == NOW
    assert trade.updated_at == NOW
    assert trade.deleted is False


def test_map_record_gives_fresh_random_ids():
    first = map_record(record(), NOW)
    second = map_record(record(), NOW)
    assert first.id != second.id
    assert first.id.version == 4
    assert isinstance(second.id, uuid.UUID) and second.id.version == 4


def test_map_record_price_keeps_fraction():
    trade = map_record(record(price="140700,5"), NOW)
    assert trade.trade_price == Decimal("140700.5")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"price": "abc"},
        {"price": "nan"},
        {"price": " 10"},
        {"qty": "7.5"},
        {"qty": ""},
        {"qty": "99999999999"},
        {"day": "2025/06/02"},
        {"day": "2025-13-02"},
        {"day": "2025-6-2"},
    ],
)
def test_map_record_rejects_bad_fields(kwargs):
    with pytest.raises(RecordError):
        map_record(record(**kwargs), NOW)


def test_map_record_rejects_short_record():
    with pytest.raises(RecordError):
        map_record(["2025-06-02", "WINQ25", "0"], NOW)


def test_record_error_is_value_error():
    with pytest.raises(ValueError):
        map_record(record(qty="x"), NOW)


def test_parse_skips_header_and_bad_lines(tmp_path):
    path = write(
        tmp_path,
        [HEADER, row(qty="3"), row(price="bad"), row(ticker="PETR4", qty="4")],
    )
    trades = list(parse_txt_file(path, NOW))
    assert [t.instrument_code for t in trades] == ["WINQ25", "PETR4"]
    assert [t.trade_quantity for t in trades] == [3, 4]


def test_parse_without_header(tmp_path, monkeypatch):
    monkeypatch.setenv("SKIP_HEADER", "false")
    path = write(tmp_path, [row(qty="3"), row(qty="4")])
    trades = list(parse_txt_file(path, NOW))
    assert [t.trade_quantity for t in trades] == [3, 4]


def test_parse_header_counted_when_skip_disabled(tmp_path, monkeypatch):
    monkeypatch.setenv("SKIP_HEADER", "no")
    path = write(tmp_path, [HEADER, row(qty="3")])
    trades = list(parse_txt_file(path, NOW))
    assert [t.trade_quantity for t in trades] == [3]


def test_parse_skipping_first_data_line_when_header_expected(tmp_path):
    path = write(tmp_path, [row(qty="3"), row(qty="4")])
    trades = list(parse_txt_file(path, NOW))
    assert [t.trade_quantity for t in trades] == [4]


def test_parse_custom_delimiter(tmp_path, monkeypatch):
    monkeypatch.setenv("CSV_DELIMITER", ",")
    lines = [HEADER.replace(";", ","), row(price="140750.00").replace(";", ",")]
    trades = list(parse_txt_file(write(tmp_path, lines), NOW))
    assert len(trades) == 1
    assert trades[0].trade_price == Decimal("140750.00")


def test_parse_skips_lines_with_wrong_field_count(tmp_path):
    path = write(tmp_path, [HEADER, row() + ";extra", row(qty="4")])
    trades = list(parse_txt_file(path, NOW))
    assert [t.trade_quantity for t in trades] == [4]


def test_parse_ignores_blank_lines(tmp_path):
    path = write(tmp_path, [HEADER, "", row(qty="3"), "", row(qty="4")])
    assert len(list(parse_txt_file(path, NOW))) == 2


def test_parse_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        list(parse_txt_file(str(tmp_path / "missing.txt"), NOW))


def test_parse_stops_when_event_set(tmp_path):
    path = write(tmp_path, [HEADER, row(), row()])
    stop = threading.Event()
    stop.set()
    assert list(parse_txt_file(path, NOW, stop)) == []


def test_parse_uses_given_time(tmp_path):
    path = write(tmp_path, [HEADER, row()])
    (trade,) = parse_txt_file(path, NOW)
    assert trade.created_at == NOW