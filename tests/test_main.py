import csv
from datetime import date

import pytest
from typer.testing import CliRunner

from helpers import ALIPAY_HEADER, WECHAT_HEADER, alipay_row, update_json, wechat_row, write_export
from sui_ledger.errors import (
    AmbiguousCounterpartyError,
    InvalidAmountError,
    UnknownDirectionError,
    UnsupportedFormatError,
)
from sui_ledger.main import LedgerConverter, app, get_parser_class, scan_directory
from sui_ledger.parsers import AlipayParser, WeChatParser
from sui_ledger.rules import COUNTERPARTY_RULES_FILE, load_rule_set

runner = CliRunner()


def read_output(path):
    with open(path, encoding="utf-8", newline="") as f:
        return list(csv.reader(f))


@pytest.fixture
def alipay_file(tmp_path):
    return write_export(tmp_path / "alipay_202105.csv", ALIPAY_HEADER, [
        alipay_row(timestamp="2021-05-02 08:00:00", counterparty="滴滴出行", description="打车", amount="18.00"),
        alipay_row(status="交易关闭", amount="99.00", timestamp="2021-05-01 10:00:00"),
        alipay_row(direction="收入", counterparty="张三", description="转账收款",
                   amount="100.00", timestamp="2021-05-01 12:00:00"),
        alipay_row(account="某某银行储蓄卡(0000)", amount="7.00", timestamp="2021-05-03 08:00:00"),
    ])


@pytest.fixture
def wechat_file(tmp_path):
    return write_export(tmp_path / "微信支付账单(20210501-20210531).csv", WECHAT_HEADER, [
        wechat_row(timestamp="2021-05-01 12:00:00", amount="¥25.00"),
        wechat_row(timestamp="2021-05-04 09:00:00", trade_type="零钱提现", counterparty="招商银行",
                   description="/", direction="/", amount="¥100.00",
                   account="招商银行储蓄卡(1234)", status="提现已到账"),
    ])


@pytest.mark.parametrize("filename, expected", [
    ("alipay_record_20210501.csv", AlipayParser),
    ("支付宝交易明细.csv", AlipayParser),
    ("WeChat_bill.csv", WeChatParser),
    ("微信支付账单(20210501-20210531).csv", WeChatParser),
])
def test_get_parser_class(filename, expected):
    assert get_parser_class(f"/data/{filename}") is expected


def test_unsupported_file_is_fatal():
    with pytest.raises(UnsupportedFormatError) as exc:
        get_parser_class("/data/建行-2021.csv")
    assert "建行-2021.csv" in str(exc.value)


def test_file_name_with_both_markers_is_fatal():
    with pytest.raises(UnsupportedFormatError) as exc:
        get_parser_class("/data/alipay_wechat.csv")
    assert "支付宝" in str(exc.value)
    assert "微信支付" in str(exc.value)


def test_directory_name_does_not_select_format():
    assert get_parser_class("/data/wechat/alipay_202105.csv") is AlipayParser


def test_scan_directory(tmp_path):
    for name in ["b_wechat.csv", "a_alipay.CSV", "notes.txt", ".hidden.csv", "~lock.csv"]:
        (tmp_path / name).write_text("", encoding="utf-8")
    (tmp_path / "sub.csv").mkdir()

    found = scan_directory(str(tmp_path))

    assert [p.rsplit("/", 1)[-1] for p in found] == ["a_alipay.CSV", "b_wechat.csv"]


def test_convert_merges_files_in_timestamp_order(rule_set, alipay_file, wechat_file):
    converter = LedgerConverter(rule_set, end=date(2021, 12, 31))

    entries = converter.convert([str(alipay_file), str(wechat_file)]).drain()

    assert [(e.to_row()[0], e.description) for e in entries] == [
        ("2021-05-01 12:00:00", "转账收款"),
        ("2021-05-01 12:00:00", "快车"),
        ("2021-05-02 08:00:00", "打车"),
        ("2021-05-04 09:00:00", "零钱提现"),
    ]


def test_income_row_with_unmatched_counterparty(rule_set, alipay_file):
    entries = LedgerConverter(rule_set, end=date(2021, 12, 31)).convert([str(alipay_file)]).drain()
    income = entries[0]

    assert income.credit == "100.00"
    assert income.debit == ""
    assert income.counter_account == "其他:未分类"
    assert income.account == "资产:流动资产:支付宝余额"


def test_every_entry_has_exactly_one_amount(rule_set, alipay_file, wechat_file):
    entries = LedgerConverter(rule_set, end=date(2021, 12, 31)).convert(
        [str(alipay_file), str(wechat_file)]).drain()

    for e in entries:
        assert bool(e.debit) != bool(e.credit)
    assert sorted(e.debit or e.credit for e in entries) == ["100.00", "18.00", "¥100.00", "¥25.00"]


def test_summary_counts(rule_set, alipay_file):
    from sui_ledger.ledger import LedgerBook

    book = LedgerBook()
    summary = LedgerConverter(rule_set, end=date(2021, 12, 31)).process_file(str(alipay_file), book)

    assert summary.rows == 4
    assert summary.kept == 2
    assert summary.filtered_status == 1
    assert summary.skipped_account == 1
    assert len(book) == 2


def test_date_range_is_inclusive(rule_set, alipay_file, wechat_file):
    converter = LedgerConverter(rule_set, start=date(2021, 5, 2), end=date(2021, 5, 4))

    entries = converter.convert([str(alipay_file), str(wechat_file)]).drain()

    assert [e.description for e in entries] == ["打车", "零钱提现"]


def test_unknown_direction_aborts(rule_set, tmp_path):
    path = write_export(tmp_path / "alipay.csv", ALIPAY_HEADER, [
        alipay_row(direction="不计收支", description="神秘交易"),
    ])

    with pytest.raises(UnknownDirectionError):
        LedgerConverter(rule_set).convert([str(path)])


def test_ambiguous_counterparty_aborts(config_dir, alipay_file):
    update_json(config_dir / COUNTERPARTY_RULES_FILE,
                lambda data: data["rules"].append({"pattern": "出行", "counter_account": "支出:交通:其他"}))
    converter = LedgerConverter(load_rule_set(str(config_dir)), end=date(2021, 12, 31))

    with pytest.raises(AmbiguousCounterpartyError):
        converter.convert([str(alipay_file)])


def test_empty_amount_aborts_with_location(rule_set, tmp_path):
    path = write_export(tmp_path / "alipay.csv", ALIPAY_HEADER, [alipay_row(amount="")])

    with pytest.raises(InvalidAmountError) as exc:
        LedgerConverter(rule_set, end=date(2021, 12, 31)).convert([str(path)])

    assert str(path) in str(exc.value)
    assert "第2行" in str(exc.value)


class TestCli:
    def test_file_mode(self, tmp_path, alipay_file, wechat_file):
        output = tmp_path / "out" / "ledger.csv"

        result = runner.invoke(app, ["-f", str(alipay_file), "-f", str(wechat_file),
                                     "--end", "2021-12-31", "-o", str(output)])

        assert result.exit_code == 0, result.output
        rows = read_output(output)
        assert len(rows) == 4
        assert all(len(row) == 6 for row in rows)
        assert rows[0] == ["2021-05-01 12:00:00", "转账收款", "资产:流动资产:支付宝余额",
                           "其他:未分类", "", "100.00"]

    def test_dir_mode(self, tmp_path, alipay_file, wechat_file):
        output = tmp_path / "ledger.csv"

        result = runner.invoke(app, ["-d", str(tmp_path), "--end", "2021-12-31", "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert len(read_output(output)) == 4

    def test_start_and_end_filter_output(self, tmp_path, alipay_file):
        output = tmp_path / "ledger.csv"

        result = runner.invoke(app, ["-f", str(alipay_file), "--start", "2021-05-02",
                                     "--end", "2021-05-31", "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert [row[1] for row in read_output(output)] == ["打车"]

    def test_default_end_is_today(self, tmp_path, alipay_file):
        output = tmp_path / "ledger.csv"

        result = runner.invoke(app, ["-f", str(alipay_file), "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert len(read_output(output)) == 2

    def test_output_is_byte_identical_across_runs(self, tmp_path, alipay_file, wechat_file):
        first, second = tmp_path / "first.csv", tmp_path / "second.csv"
        args = ["-f", str(alipay_file), "-f", str(wechat_file), "--end", "2021-12-31"]

        assert runner.invoke(app, args + ["-o", str(first)]).exit_code == 0
        assert runner.invoke(app, args + ["-o", str(second)]).exit_code == 0

        assert first.read_bytes() == second.read_bytes()

    def test_excel_output(self, tmp_path, alipay_file):
        output, workbook = tmp_path / "ledger.csv", tmp_path / "ledger.xlsx"

        result = runner.invoke(app, ["-f", str(alipay_file), "--end", "2021-12-31",
                                     "-o", str(output), "--excel", str(workbook)])

        assert result.exit_code == 0, result.output
        assert workbook.exists()

    def test_ambiguous_counterparty_writes_nothing(self, tmp_path, config_dir, alipay_file):
        update_json(config_dir / COUNTERPARTY_RULES_FILE,
                    lambda data: data["rules"].append({"pattern": "出行", "counter_account": "支出:交通:其他"}))
        output = tmp_path / "ledger.csv"

        result = runner.invoke(app, ["-f", str(alipay_file), "--end", "2021-12-31",
                                     "--config-dir", str(config_dir), "-o", str(output)])

        assert result.exit_code == 1
        assert not output.exists()

    def test_unsupported_file_writes_nothing(self, tmp_path, alipay_file):
        other = tmp_path / "bank.csv"
        other.write_text("", encoding="utf-8")
        output = tmp_path / "ledger.csv"

        result = runner.invoke(app, ["-f", str(alipay_file), "-f", str(other), "-o", str(output)])

        assert result.exit_code == 1
        assert not output.exists()

    def test_file_and_dir_are_exclusive(self, tmp_path, alipay_file):
        result = runner.invoke(app, ["-f", str(alipay_file), "-d", str(tmp_path)])
        assert result.exit_code != 0

    def test_file_or_dir_required(self):
        result = runner.invoke(app, [])
        assert result.exit_code != 0

    def test_bad_date(self, alipay_file):
        result = runner.invoke(app, ["-f", str(alipay_file), "--start", "May 1"])
        assert result.exit_code != 0

    def test_empty_amount_writes_nothing(self, tmp_path):
        path = write_export(tmp_path / "alipay.csv", ALIPAY_HEADER, [alipay_row(amount="")])
        output = tmp_path / "ledger.csv"

        result = runner.invoke(app, ["-f", str(path), "--end", "2021-12-31", "-o", str(output)])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert not output.exists()
