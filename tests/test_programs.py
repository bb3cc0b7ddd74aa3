"""Tests for the program label directory"""

import pytest

from solana_lens.services.programs import (
    KNOWN_PROGRAMS,
    OTHER_CATEGORY,
    PROGRAM_CATEGORIES,
    categorize_program,
    get_program_label,
    list_known_programs,
    resolve_label,
    shorten_address,
)

TOKEN_PROGRAM = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"


class TestShortenAddress:
    """Test address abbreviation"""

    def test_long_address(self):
        """Test long addresses keep first and last 4 characters"""
        assert shorten_address("9xQeWvG816bUx9EPjHmaT23yvVM2ZWbrrpZb9PusVFin") == "9xQe...VFin"

    @pytest.mark.parametrize("address", ["", "abc", "abcdefghijk"])
    def test_short_address_unchanged(self, address):
        """Test addresses of 11 characters or fewer are kept whole"""
        assert shorten_address(address) == address


class TestLabels:
    """Test label and category resolution"""

    def test_known_program(self):
        """Test known programs resolve to their label and category"""
        assert resolve_label(TOKEN_PROGRAM) == ("Token Program", "Token")

    def test_labelled_but_uncategorized(self):
        """Test a labelled program outside every category is Other"""
        program_id = "SysvarC1ock11111111111111111111111111111111"
        assert get_program_label(program_id) == "Sysvar Clock"
        assert categorize_program(program_id) == OTHER_CATEGORY

    def test_unknown_program(self):
        """Test unknown programs get a shortened label"""
        assert resolve_label("Unknown1111111111111111111111111111111Zzzz") == ("Unkn...Zzzz", "Other")

    def test_categorized_programs_are_labelled(self):
        """Test every categorized program has a label"""
        for program_ids in PROGRAM_CATEGORIES.values():
            for program_id in program_ids:
                assert program_id in KNOWN_PROGRAMS


class TestListKnownPrograms:
    """Test the directory listing"""

    def test_lists_every_label(self):
        """Test one entry per labelled program"""
        programs = list_known_programs()

        assert len(programs) == len(KNOWN_PROGRAMS)
        assert {"program_id": TOKEN_PROGRAM, "label": "Token Program", "category": "Token"} in programs
