"""Unit tests for CLI argument parsing helpers."""

import pytest

from price_feed.main import parse_asset_oracles, parse_list


class TestParseList:
    def test_empty(self) -> None:
        assert parse_list(None) == []
        assert parse_list("") == []

    def test_strips_and_drops_empty(self) -> None:
        assert parse_list(" 0xa , ,0xb,") == ["0xa", "0xb"]


class TestParseAssetOracles:
    def test_valid(self) -> None:
        """token=oracle pairs should map tokens to oracles."""
        assert parse_asset_oracles("0xa=0x1, 0xb = 0x2") == {"0xa": "0x1", "0xb": "0x2"}

    def test_empty(self) -> None:
        assert parse_asset_oracles(None) == {}

    def test_later_assignment_wins(self) -> None:
        assert parse_asset_oracles("0xa=0x1,0xa=0x2") == {"0xa": "0x2"}

    def test_missing_separator(self) -> None:
        with pytest.raises(ValueError, match="Expected 'token=oracle'"):
            parse_asset_oracles("0xa")
