"""
Tests for the request replay client and the sample catalog
"""

from datetime import datetime
from pathlib import Path

import pytest
from typer.testing import CliRunner

from common.time_utils import FixedClock
from circulation.category import Category
from circulation.router import CatalogRouter
from tools.replay_requests import load_requests_from_file, parse_request_line, replay
from tools import seed_catalog
from tools.seed_catalog import SAMPLE_COPIES, build_catalog, generate_copies, render_catalog

SAMPLE_FILE = Path(__file__).resolve().parent.parent / "data" / "sample_requests.txt"


class TestParseRequestLine:
    """Line format"""

    def test_blank_and_comment_lines(self):
        assert parse_request_line("") is None
        assert parse_request_line("   # note") is None

    def test_requests(self):
        assert parse_request_line("BORROW | To Kill a Mockingbird | Alice | 7") == {
            "op": "BORROW", "title": "To Kill a Mockingbird", "person": "Alice", "days": "7",
        }
        assert parse_request_line("borrow | Dune | Bob") == {"op": "BORROW", "title": "Dune", "person": "Bob"}
        assert parse_request_line("PAY | 1984 | 2.50") == {"op": "PAY", "title": "1984", "amount": "2.50"}
        assert parse_request_line("ASSESS_ALL") == {"op": "ASSESS_ALL"}
        assert parse_request_line("ADVANCE | 3") == {"op": "ADVANCE", "days": 3}

    @pytest.mark.parametrize("line", ["LEND | 1984", "RETURN", "RESERVE | 1984 | Bob | extra", "ADVANCE"])
    def test_malformed(self, line):
        with pytest.raises(ValueError):
            parse_request_line(line)

    def test_load_skips_bad_lines(self, tmp_path):
        path = tmp_path / "requests.txt"
        path.write_text("BORROW | Dune | Bob\nLEND | Dune\n\nRETURN | Dune\n", encoding="utf-8")
        assert [r["op"] for r in load_requests_from_file(path)] == ["BORROW", "RETURN"]


class TestReplay:
    """Sample request file against the sample catalog"""

    def setup_method(self):
        self.clock = FixedClock(datetime(2024, 3, 1, 10, 0))
        self.catalog = build_catalog(clock=self.clock)
        self.router = CatalogRouter(self.catalog)

    def test_sample_catalog(self):
        assert len(self.catalog) == len(SAMPLE_COPIES)
        assert generate_copies(self.catalog, 5, seed=1) == 5
        assert len(self.catalog) == len(SAMPLE_COPIES) + 5

    def test_render_catalog_by_category(self):
        assert render_catalog(self.catalog).row_count == len(SAMPLE_COPIES)
        assert render_catalog(self.catalog, Category.parse("classic")).row_count == 4
        assert render_catalog(self.catalog, Category.parse("Science Fiction")).row_count == 1

    def test_seed_command_category_option(self):
        runner = CliRunner()
        assert runner.invoke(seed_catalog.app, ["--category", "fantasy"]).exit_code == 0
        assert runner.invoke(seed_catalog.app, ["--category", "cookbooks"]).exit_code == 1

    def test_sample_file_replay(self):
        replies = replay(self.router, self.clock, load_requests_from_file(SAMPLE_FILE))
        statuses = [(r["op"], r["status"]) for r in replies]

        assert statuses == [
            ("BORROW", "OK"),
            ("RESERVE", "OK"),
            ("RESERVE", "OK"),
            ("RESERVE", "REJECTED"),
            ("BORROW", "REJECTED"),
            ("BORROW", "OK"),
            ("ASSESS_ALL", "OK"),
            ("PAY", "OK"),
            ("PAY", "ERROR"),
            ("PAY", "OK"),
            ("PAY", "REJECTED"),
            ("RETURN", "OK"),
            ("CANCEL", "OK"),
            ("RETURN", "OK"),
            ("RETURN", "REJECTED"),
            ("ASSESS", "OK"),
            ("WAIVE", "OK"),
            ("WAIVE", "REJECTED"),
            ("RATE", "OK"),
            ("RETURN", "OK"),
            ("BORROW", "REJECTED"),
        ]
        assert replies[6]["count"] == 1
        assert replies[11]["holder"] == "Bob"

        nineteen = self.catalog.find_by_title("1984")
        assert nineteen.available
        assert nineteen.read_count == 2
        assert nineteen.current_fine.is_settled
        assert self.catalog.find_by_title("Dune").current_fine.waived
        assert self.catalog.total_unpaid_fines().is_zero()
